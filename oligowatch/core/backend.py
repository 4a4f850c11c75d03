# core/backend.py
"""
HTTP client for the managed backend.

The backend exposes remote procedures and table reads through a PostgREST
style REST interface (/rest/v1) and account handling through a GoTrue style
auth interface (/auth/v1). A client is built explicitly for each request
from the settings and the caller's session, and passed to whatever needs it.
"""

import logging
import time
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from .exceptions import (
    AuthenticationError,
    BackendError,
    BackendUnavailableError,
    classify_backend_error,
)

logger = logging.getLogger(__name__)

# Session keys holding the backend tokens
SESSION_ACCESS_TOKEN = 'backend_access_token'
SESSION_REFRESH_TOKEN = 'backend_refresh_token'
SESSION_EXPIRES_AT = 'backend_expires_at'
SESSION_USER_ID = 'backend_user_id'


class BackendClient:
    """
    Client for the backend's REST, RPC and auth endpoints.

    Documentation: https://postgrest.org/en/stable/references/api.html
    """

    def __init__(self, base_url: str, api_key: str,
                 access_token: Optional[str] = None, timeout: float = 30):
        """
        Args:
            base_url: Backend root URL (e.g. 'https://xyz.example.co')
            api_key: Public (anon) API key sent with every call
            access_token: User JWT; calls run anonymously without it
            timeout: Seconds before a call is abandoned
        """
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.access_token = access_token
        self.timeout = timeout

    @classmethod
    def from_settings(cls, access_token: Optional[str] = None) -> 'BackendClient':
        return cls(
            settings.BACKEND_URL,
            settings.BACKEND_ANON_KEY,
            access_token=access_token,
            timeout=getattr(settings, 'BACKEND_TIMEOUT_SECONDS', 30),
        )

    @classmethod
    def for_session(cls, session) -> 'BackendClient':
        """Build a client carrying the access token stored in a Django session."""
        return cls.from_settings(access_token=session.get(SESSION_ACCESS_TOKEN))

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def _headers(self, authenticated: bool = True) -> Dict[str, str]:
        bearer = self.access_token if (authenticated and self.access_token) else self.api_key
        return {
            'apikey': self.api_key,
            'Authorization': f'Bearer {bearer}',
            'Accept': 'application/json',
            'Content-Type': 'application/json',
        }

    def _request(self, method: str, path: str, *, params: Optional[Dict] = None,
                 json_body: Any = None, authenticated: bool = True) -> Any:
        """
        Send one request and decode the JSON answer.

        Raises:
            BackendUnavailableError: timeout or connection failure
            BackendError subclass: the backend answered with an error status
        """
        url = f'{self.base_url}{path}'
        try:
            response = requests.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._headers(authenticated),
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            logger.error(f'Backend request timed out: {method} {path}: {e}')
            raise BackendUnavailableError(
                'The backend did not answer in time. Please try again.', timed_out=True
            )
        except requests.ConnectionError as e:
            logger.error(f'Backend connection failed: {method} {path}: {e}')
            raise BackendUnavailableError(
                'Failed to connect to the backend. Please check your internet connection.'
            )
        except requests.RequestException as e:
            logger.error(f'Backend request failed: {method} {path}: {e}')
            raise BackendUnavailableError(f'Backend request failed: {e}')

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            error = classify_backend_error(response.status_code, payload)
            log = logger.error if response.status_code >= 500 else logger.warning
            log(f'Backend rejected {method} {path} ({response.status_code}): {error.message}')
            raise error

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.error(f'Backend returned a non-JSON body for {method} {path}')
            raise BackendUnavailableError('The backend returned an unreadable response.')

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------

    def rpc(self, function: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Call a remote procedure.

        Parameters are sent verbatim as a JSON object, so a key mapped to
        None reaches the procedure as SQL NULL.
        """
        if not self.access_token:
            raise AuthenticationError('Not authenticated')
        return self._request('POST', f'/rest/v1/rpc/{function}', json_body=params or {})

    def select(self, table: str, columns: str = '*', order: Optional[str] = None) -> Any:
        """Read rows of a table or view visible to the current user."""
        if not self.access_token:
            raise AuthenticationError('Not authenticated')
        params = {'select': columns}
        if order:
            params['order'] = order
        return self._request('GET', f'/rest/v1/{table}', params=params)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def sign_in(self, email: str, password: str) -> Dict:
        """Exchange email and password for a session (access and refresh tokens)."""
        return self._request(
            'POST',
            '/auth/v1/token',
            params={'grant_type': 'password'},
            json_body={'email': email, 'password': password},
            authenticated=False,
        )

    def sign_up(self, email: str, password: str) -> Dict:
        return self._request(
            'POST',
            '/auth/v1/signup',
            json_body={'email': email, 'password': password},
            authenticated=False,
        )

    def refresh_session(self, refresh_token: str) -> Dict:
        return self._request(
            'POST',
            '/auth/v1/token',
            params={'grant_type': 'refresh_token'},
            json_body={'refresh_token': refresh_token},
            authenticated=False,
        )

    def sign_out(self) -> None:
        if not self.access_token:
            return
        self._request('POST', '/auth/v1/logout')

    def get_user(self) -> Dict:
        if not self.access_token:
            raise AuthenticationError('Not authenticated')
        return self._request('GET', '/auth/v1/user')

    def health_check(self) -> bool:
        """
        Check that the backend answers at all.

        An error status still proves the backend is reachable; only
        transport failures count as disconnected.
        """
        try:
            self._request('GET', '/auth/v1/health', authenticated=False)
        except BackendUnavailableError as e:
            if e.status_code is None:
                return False
            logger.warning(f'Backend health check answered with an error: {e}')
        except BackendError as e:
            logger.warning(f'Backend health check answered with an error: {e}')
        return True


def store_session_tokens(session, auth_payload: Dict) -> None:
    """
    Save the tokens of a backend auth answer into a Django session.

    Args:
        session: request.session
        auth_payload: JSON answer of sign_in / refresh_session
    """
    session[SESSION_ACCESS_TOKEN] = auth_payload.get('access_token')
    session[SESSION_REFRESH_TOKEN] = auth_payload.get('refresh_token')

    expires_at = auth_payload.get('expires_at')
    if expires_at is None and auth_payload.get('expires_in') is not None:
        expires_at = int(time.time()) + int(auth_payload['expires_in'])
    session[SESSION_EXPIRES_AT] = expires_at

    user = auth_payload.get('user') or {}
    if user.get('id'):
        session[SESSION_USER_ID] = user['id']


def clear_session_tokens(session) -> None:
    for key in (SESSION_ACCESS_TOKEN, SESSION_REFRESH_TOKEN, SESSION_EXPIRES_AT, SESSION_USER_ID):
        session.pop(key, None)


def session_token_expired(session, leeway: int = 30) -> bool:
    expires_at = session.get(SESSION_EXPIRES_AT)
    if not expires_at:
        return False
    return time.time() + leeway >= float(expires_at)
