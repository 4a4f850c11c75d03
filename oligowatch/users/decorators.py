# users/decorators.py
"""
Access decorators for views that call the backend on the user's behalf.
"""

import logging
from functools import wraps

from django.contrib import messages
from django.contrib.auth import logout
from django.http import JsonResponse
from django.shortcuts import redirect

from core.backend import (
    SESSION_ACCESS_TOKEN,
    SESSION_REFRESH_TOKEN,
    BackendClient,
    session_token_expired,
    store_session_tokens,
)
from core.exceptions import BackendError

logger = logging.getLogger(__name__)


def _is_ajax(request):
    return request.headers.get('x-requested-with') == 'XMLHttpRequest'


def _session_lost(request, message):
    logout(request)
    if _is_ajax(request):
        return JsonResponse({'error': message}, status=401)
    messages.error(request, message)
    return redirect('users:login')


def backend_session_required(view_func):
    """
    Decorator to ensure the user holds a live backend session.

    Refreshes an expired access token with the stored refresh token and
    rebuilds request.backend; logs the user out when that is impossible.

    Usage:
        @login_required
        @backend_session_required
        def my_view(request):
            ...
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            if _is_ajax(request):
                return JsonResponse({'error': 'Not authenticated'}, status=401)
            messages.error(request, 'You must be logged in.')
            return redirect('users:login')

        if not request.session.get(SESSION_ACCESS_TOKEN):
            return _session_lost(request, 'Your session has expired. Please log in again.')

        if session_token_expired(request.session):
            refresh_token = request.session.get(SESSION_REFRESH_TOKEN)
            if not refresh_token:
                return _session_lost(request, 'Your session has expired. Please log in again.')
            try:
                payload = BackendClient.from_settings().refresh_session(refresh_token)
            except BackendError as e:
                logger.warning(f'Session refresh failed for {request.user.username}: {e.message}')
                return _session_lost(request, 'Your session has expired. Please log in again.')
            store_session_tokens(request.session, payload)
            request.backend = BackendClient.for_session(request.session)

        return view_func(request, *args, **kwargs)
    return wrapper
