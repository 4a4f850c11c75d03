# project/settings.py
"""
Django settings for the oligowatch project.

Values are read from the environment, with an optional .env file next to
manage.py. Domain data lives in the external backend; the local database
only holds auth mirror rows and sessions.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')

logger = logging.getLogger(__name__)


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def env_int(name, default):
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return int(value)


SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-oligowatch-development-key')

DEBUG = env_bool('DJANGO_DEBUG', False)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')
    if host.strip()
]

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'core',
    'users',
    'home',
    'assays',
    'oligos',
    'taxids',
    'blast',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'core.middleware.BackendClientMiddleware',
]

ROOT_URLCONF = 'project.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'project.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('DJANGO_DB_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

AUTHENTICATION_BACKENDS = [
    'users.backends.BackendAuthenticationBackend',
]

LOGIN_URL = 'users:login'
LOGIN_REDIRECT_URL = 'home:dashboard'
LOGOUT_REDIRECT_URL = 'users:login'

SESSION_COOKIE_AGE = 60 * 60 * 24 * 7

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Uploaded FASTA files are small text files
DATA_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024
FASTA_UPLOAD_MAX_BYTES = env_int('FASTA_UPLOAD_MAX_BYTES', 5 * 1024 * 1024)

# External backend (database + remote procedures + auth)
BACKEND_URL = os.environ.get('BACKEND_URL', '')
BACKEND_ANON_KEY = os.environ.get('BACKEND_ANON_KEY', '')
BACKEND_TIMEOUT_SECONDS = env_int('BACKEND_TIMEOUT_SECONDS', 30)

if not BACKEND_URL or not BACKEND_ANON_KEY:
    logger.warning('Backend environment variables are missing. Using placeholder values.')
    BACKEND_URL = BACKEND_URL or 'https://placeholder.invalid'
    BACKEND_ANON_KEY = BACKEND_ANON_KEY or 'placeholder-key'

# NCBI taxonomy lookups
NCBI_EUTILS_URL = os.environ.get(
    'NCBI_EUTILS_URL', 'https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esummary.fcgi'
)
NCBI_EMAIL = os.environ.get('NCBI_EMAIL', '')
NCBI_TOOL = os.environ.get('NCBI_TOOL', 'diversity-surveillance-tool')
NCBI_TIMEOUT_SECONDS = env_int('NCBI_TIMEOUT_SECONDS', 30)

# Dashboard status refresh and bulk operation fan-out
DASHBOARD_POLL_INTERVAL_SECONDS = env_int('DASHBOARD_POLL_INTERVAL_SECONDS', 15)
BULK_MAX_WORKERS = env_int('BULK_MAX_WORKERS', 4)

LOG_LEVEL = os.environ.get('OLIGOWATCH_LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
    },
}
