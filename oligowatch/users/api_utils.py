# users/api_utils.py
"""
Backend calls for the account settings page.
"""

from typing import Dict, Optional


def fetch_account_settings(backend) -> Dict[str, Optional[str]]:
    """
    Fetch the display name and institution of the current user.

    The procedure returns one row, or no row when nothing was saved yet.
    """
    rows = backend.rpc('fetch_user_name_institution')
    row = rows[0] if isinstance(rows, list) and rows else {}
    return {
        'user_name': row.get('user_name') or None,
        'user_institution': row.get('user_institution') or None,
    }


def edit_account_settings(backend, user_name: Optional[str], user_institution: Optional[str]) -> None:
    """Save name and institution; blank values are stored as NULL."""
    backend.rpc('edit_user_name_institution', {
        'p_user_name': (user_name or '').strip() or None,
        'p_user_institution': (user_institution or '').strip() or None,
    })
