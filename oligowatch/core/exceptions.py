# core/exceptions.py
"""
Error types raised by the backend client and the local input checks.

Every failure surfaced to a user derives from OligowatchError so views can
turn it into a message without knowing where it came from.
"""

from typing import Optional


class OligowatchError(Exception):
    """Base class for all user-facing failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class SequenceValidationError(OligowatchError):
    """A DNA sequence contains characters outside the IUPAC alphabet."""


class FastaFormatError(OligowatchError):
    """FASTA input could not be read or has the wrong number of records."""


class BackendError(OligowatchError):
    """
    The backend rejected a call.

    Carries the HTTP status and the PostgREST error fields when present.
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 code: Optional[str] = None, details: Optional[str] = None,
                 hint: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.details = details
        self.hint = hint


class AuthenticationError(BackendError):
    """No valid session, or the backend refused the credentials."""


class NotFoundError(BackendError):
    """The referenced entity id does not exist."""


class OwnershipError(BackendError):
    """The referenced entity exists but belongs to another user."""


class BackendValidationError(BackendError):
    """The backend refused the input (empty or duplicate name, bad sequence, ...)."""


class BackendUnavailableError(BackendError):
    """The backend could not be reached, timed out, or failed internally."""

    def __init__(self, message: str, timed_out: bool = False, **kwargs):
        super().__init__(message, **kwargs)
        self.timed_out = timed_out


def classify_backend_error(status_code: int, payload) -> BackendError:
    """
    Build the matching BackendError subclass for a failed backend response.

    Args:
        status_code: HTTP status of the response
        payload: Decoded JSON body (dict) or raw text

    Returns:
        BackendError instance (not raised)
    """
    code = details = hint = None
    if isinstance(payload, dict):
        message = (
            payload.get('message')
            or payload.get('msg')
            or payload.get('error_description')
            or payload.get('error')
            or ''
        )
        code = payload.get('code')
        details = payload.get('details')
        hint = payload.get('hint')
    else:
        message = str(payload or '').strip()

    if not message:
        message = f'Backend request failed with status {status_code}'

    fields = {'status_code': status_code, 'code': code, 'details': details, 'hint': hint}
    lowered = message.lower()

    if 'does not belong to you' in lowered:
        return OwnershipError(message, **fields)
    if 'does not exist' in lowered or status_code == 404:
        return NotFoundError(message, **fields)
    if 'not authenticated' in lowered or status_code in (401, 403):
        return AuthenticationError(message, **fields)
    if status_code >= 500:
        return BackendUnavailableError(message, **fields)
    return BackendValidationError(message, **fields)
