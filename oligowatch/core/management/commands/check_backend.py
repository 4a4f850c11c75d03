# core/management/commands/check_backend.py
"""
Management command to show the backend configuration and check that the
backend answers. Useful right after a deployment or a .env change.
"""

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from core.backend import BackendClient


def mask(value):
    if not value:
        return 'NOT SET'
    if len(value) <= 8:
        return '[REDACTED]'
    return f'{value[:4]}...{value[-4:]}'


class Command(BaseCommand):
    help = 'Print the effective backend settings and check the backend health endpoint'

    def add_arguments(self, parser):
        parser.add_argument(
            '--no-connect',
            action='store_true',
            help='Only print the settings, do not contact the backend',
        )

    def handle(self, *args, **options):
        self.stdout.write(f'BACKEND_URL: {settings.BACKEND_URL}')
        self.stdout.write(f'BACKEND_ANON_KEY: {mask(settings.BACKEND_ANON_KEY)}')
        self.stdout.write(f'BACKEND_TIMEOUT_SECONDS: {settings.BACKEND_TIMEOUT_SECONDS}')
        self.stdout.write(f'NCBI_EMAIL: {settings.NCBI_EMAIL or "NOT SET"}')
        self.stdout.write(f'DASHBOARD_POLL_INTERVAL_SECONDS: {settings.DASHBOARD_POLL_INTERVAL_SECONDS}')
        self.stdout.write(f'BULK_MAX_WORKERS: {settings.BULK_MAX_WORKERS}')

        if options['no_connect']:
            return

        if BackendClient.from_settings().health_check():
            self.stdout.write(self.style.SUCCESS('Backend is reachable'))
        else:
            raise CommandError(f'Backend at {settings.BACKEND_URL} is not reachable')
