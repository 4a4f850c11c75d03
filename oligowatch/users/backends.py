# users/backends.py
"""
Django authentication backend that checks credentials against the external
backend's auth service and mirrors the account as a local User.
"""

import logging

from django.contrib.auth.backends import BaseBackend
from django.contrib.auth.models import User

from core.backend import BackendClient
from core.exceptions import AuthenticationError, BackendValidationError

logger = logging.getLogger(__name__)


class BackendAuthenticationBackend(BaseBackend):
    """
    Authenticate with email and password through the backend.

    On success the returned user carries the backend's auth answer as
    user.backend_session so the login view can store the tokens in the
    session after django.contrib.auth.login() has rotated it.
    """

    def authenticate(self, request, email=None, password=None, **kwargs):
        if not email or not password:
            return None

        client = BackendClient.from_settings()
        try:
            payload = client.sign_in(email, password)
        except (AuthenticationError, BackendValidationError) as e:
            logger.warning(f'Backend refused login for {email}: {e.message}')
            return None

        account = (payload or {}).get('user') or {}
        username = (account.get('email') or email).strip().lower()

        user, created = User.objects.get_or_create(
            username=username,
            defaults={'email': username},
        )
        if created:
            user.set_unusable_password()
            user.save()
            logger.info(f'Created local account mirror for {username}')

        user.backend_session = payload
        return user

    def get_user(self, user_id):
        try:
            return User.objects.get(pk=user_id)
        except User.DoesNotExist:
            return None
