# taxids/api_utils.py
"""
TaxID entries in the backend, and species-name lookups against NCBI.
"""

import logging
from typing import Dict, List, Optional

import requests
from django.conf import settings

from core.exceptions import OligowatchError

logger = logging.getLogger(__name__)


class TaxonomyLookupError(OligowatchError):
    """A taxonomy lookup failed; status_code is the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


def parse_positive_taxid(value) -> int:
    """
    Parse a TaxID typed by a user.

    Raises:
        ValueError: missing, not an integer, or not positive
    """
    text = str(value if value is not None else '').strip()
    if not text:
        raise ValueError('TaxID is required')
    try:
        taxid = int(text)
    except ValueError:
        raise ValueError('TaxID must be a positive integer')
    if taxid <= 0:
        raise ValueError('TaxID must be a positive integer')
    return taxid


def normalize_taxid(row: Dict) -> Dict:
    return {
        'entry_id': int(row['entry_id']),
        'taxid': int(row['taxid']),
        'taxid_spec': row.get('taxid_spec') or None,
        'created_at': row.get('created_at'),
    }


def fetch_user_taxids(backend) -> List[Dict]:
    rows = backend.rpc('fetch_user_taxids')
    if not isinstance(rows, list):
        return []
    return [normalize_taxid(row) for row in rows]


def create_user_taxid(backend, taxid: int, taxid_spec: Optional[str]):
    result = backend.rpc('create_user_taxid', {
        'p_taxid': taxid,
        'p_taxid_spec': (taxid_spec or '').strip() or None,
    })
    logger.info(f'Created taxid entry {taxid}')
    return result


def delete_user_taxid(backend, entry_id: int) -> None:
    backend.rpc('delete_user_taxid', {'p_entry_id': entry_id})
    logger.info(f'Deleted taxid entry {entry_id}')


class NCBITaxonomyClient:
    """
    Client for the NCBI E-utilities esummary endpoint (taxonomy database).
    Documentation: https://www.ncbi.nlm.nih.gov/books/NBK25499/
    """

    def __init__(self, base_url: Optional[str] = None, email: Optional[str] = None,
                 tool: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = base_url or settings.NCBI_EUTILS_URL
        self.email = email if email is not None else getattr(settings, 'NCBI_EMAIL', '')
        self.tool = tool or getattr(settings, 'NCBI_TOOL', 'diversity-surveillance-tool')
        self.timeout = timeout or getattr(settings, 'NCBI_TIMEOUT_SECONDS', 30)

    def lookup(self, taxid: int) -> Dict[str, str]:
        """
        Look up the scientific name of a taxonomy id.

        Args:
            taxid: Positive NCBI taxonomy id

        Returns:
            {'taxid': '<id>', 'scientificName': '<name>'}

        Raises:
            TaxonomyLookupError: with status 404 (unknown id or no name),
                503 (NCBI unreachable), 504 (timeout) or 500 (anything else)
        """
        params = {
            'db': 'taxonomy',
            'retmode': 'json',
            'id': str(taxid),
            'tool': self.tool,
        }
        if self.email:
            params['email'] = self.email

        try:
            response = requests.get(
                self.base_url,
                params=params,
                headers={'Accept': 'application/json'},
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.error(f'NCBI taxonomy lookup timed out for {taxid}')
            raise TaxonomyLookupError('Request to NCBI timed out. Please try again.', 504)
        except requests.ConnectionError as e:
            logger.error(f'NCBI taxonomy lookup could not connect for {taxid}: {e}')
            raise TaxonomyLookupError(
                'Failed to connect to NCBI. Please check your internet connection.', 503
            )
        except requests.RequestException as e:
            logger.error(f'NCBI taxonomy lookup failed for {taxid}: {e}')
            raise TaxonomyLookupError(str(e) or 'Failed to fetch TaxID information', 500)

        if not response.ok:
            logger.error(f'NCBI taxonomy lookup for {taxid} returned {response.status_code}')
            raise TaxonomyLookupError(f'NCBI API returned status {response.status_code}', 500)

        try:
            data = response.json()
        except ValueError:
            raise TaxonomyLookupError('NCBI returned an unreadable response', 500)

        result = data.get('result') or {}
        uids = result.get('uids') or []
        if not uids:
            raise TaxonomyLookupError('TaxID not found in NCBI database', 404)

        record = result.get(str(uids[0])) or {}
        scientific_name = record.get('scientificname')
        if not scientific_name:
            raise TaxonomyLookupError('Scientific name not found for this TaxID', 404)

        return {'taxid': str(taxid), 'scientificName': scientific_name}
