# assays/api_utils.py
"""
Assay calls against the backend. An assay is created together with its
reference amplicon; deleting it removes the amplicon and the assay's
oligos on the backend side.
"""

import logging
from typing import Dict, List, Optional

from core.exceptions import BackendError, NotFoundError

logger = logging.getLogger(__name__)


def _optional_int(value) -> Optional[int]:
    if value is None or value == '':
        return None
    return int(value)


def normalize_assay(row: Dict) -> Dict:
    return {
        'assay_id': int(row['assay_id']),
        'assay_name': row.get('assay_name') or '',
        'target_taxid_entry_id': _optional_int(
            row.get('target_taxid_entry_id', row.get('assay_taxid_entry_id'))
        ),
        'taxid': _optional_int(row.get('taxid')),
        'taxid_spec': row.get('taxid_spec') or None,
        'target_gene': row.get('target_gene') or None,
        'amplicon_id': _optional_int(row.get('amplicon_id')),
        'amplicon_name': row.get('amplicon_name') or None,
        'amplicon_sequence': row.get('amplicon_sequence') or '',
        'created_at': row.get('created_at'),
    }


def fetch_user_assays(backend) -> List[Dict]:
    rows = backend.rpc('fetch_user_assays')
    if not isinstance(rows, list):
        return []
    return [normalize_assay(row) for row in rows]


def get_user_assay(backend, assay_id: int) -> Dict:
    """
    Find one of the user's assays.

    Raises:
        NotFoundError: the id is not among the user's assays
    """
    for assay in fetch_user_assays(backend):
        if assay['assay_id'] == assay_id:
            return assay
    raise NotFoundError(f'assay_id {assay_id} does not exist')


def fetch_assay_names(backend) -> Optional[Dict[int, str]]:
    """
    Map assay ids to names for display.

    This read is optional: on failure it logs and returns None so the
    caller can show 'Unknown' instead of failing the page.
    """
    try:
        rows = backend.select('user_assays', 'assay_id,assay_name', order='assay_name.asc')
    except BackendError as e:
        logger.warning(f'Could not fetch assay names: {e.message}')
        return None
    if not isinstance(rows, list):
        logger.warning(f'Unexpected assay names payload: {type(rows).__name__}')
        return None
    try:
        return {int(row['assay_id']): row.get('assay_name') or '' for row in rows}
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning(f'Malformed assay names row: {e!r}')
        return None


def create_user_assay(backend, assay_name: str, amplicon_sequence: str,
                      taxid_entry_id: Optional[int] = None,
                      target_gene: Optional[str] = None,
                      amplicon_name: Optional[str] = None):
    result = backend.rpc('create_user_assay', {
        'p_assay_name': assay_name,
        'p_taxid_entry_id': taxid_entry_id,
        'p_target_gene': target_gene or None,
        'p_amplicon_name': amplicon_name or None,
        'p_amplicon_sequence': amplicon_sequence,
    })
    logger.info(f'Created assay {assay_name}')
    return result


def delete_user_assay(backend, assay_id: int) -> None:
    backend.rpc('delete_user_assay', {'p_assay_id': assay_id})
    logger.info(f'Deleted assay {assay_id}')
