# oligos/api_utils.py
"""
Oligo calls against the backend, and the bulk FASTA import built on them.
"""

import logging
from typing import Dict, List, Optional

from core.batch import BatchResult, run_batch
from core.sequences import FastaRecord, validate_dna_sequence

logger = logging.getLogger(__name__)


def normalize_oligo(row: Dict) -> Dict:
    assay_id = row.get('assay_id')
    panel_id = row.get('panel_id')
    return {
        'oligo_id': int(row['oligo_id']),
        'sequence_name': row.get('sequence_name') or '',
        'dna_sequence': row.get('dna_sequence') or '',
        'assay_id': int(assay_id) if assay_id is not None else None,
        'panel_id': int(panel_id) if panel_id is not None else None,
        'created_at': row.get('created_at'),
    }


def fetch_user_oligos(backend) -> List[Dict]:
    rows = backend.rpc('fetch_user_oligos')
    if not isinstance(rows, list):
        return []
    return [normalize_oligo(row) for row in rows]


def create_user_oligo(backend, sequence_name: str, dna_sequence: str,
                      assay_id: Optional[int] = None):
    result = backend.rpc('create_user_oligo', {
        'p_sequence_name': sequence_name,
        'p_dna_sequence': dna_sequence,
        'p_assay_id': assay_id,
        'p_panel_id': None,
    })
    logger.info(f'Created oligo {sequence_name}')
    return result


def delete_user_oligo(backend, oligo_id: int) -> None:
    backend.rpc('delete_user_oligo', {'p_oligo_id': oligo_id})
    logger.info(f'Deleted oligo {oligo_id}')


def reassign_oligo(backend, oligo_id: int, assay_id: int):
    """Move an oligo to another assay."""
    result = backend.rpc('reassign_user_oligo', {
        'p_oligo_id': oligo_id,
        'p_assay_id': assay_id,
    })
    logger.info(f'Reassigned oligo {oligo_id} to assay {assay_id}')
    return result


def unassign_oligo(backend, oligo_id: int):
    """Detach an oligo from its assay. Always sends an explicit null assay."""
    result = backend.rpc('reassign_user_oligo', {
        'p_oligo_id': oligo_id,
        'p_assay_id': None,
    })
    logger.info(f'Unassigned oligo {oligo_id}')
    return result


def import_oligo_records(backend, records: List[FastaRecord],
                         assay_id: Optional[int] = None,
                         max_workers: Optional[int] = None) -> BatchResult:
    """
    Create one oligo per FASTA record.

    Every record is validated and created on its own; a bad sequence or a
    backend rejection fails only that record.

    Args:
        backend: BackendClient of the current request
        records: Parsed FASTA records
        assay_id: Assay to assign every new oligo to, or None
        max_workers: Passed through to run_batch

    Returns:
        BatchResult labelled by record name
    """
    def create(record):
        sequence = validate_dna_sequence(record.sequence)
        create_user_oligo(backend, record.name, sequence, assay_id)

    result = run_batch(records, create, label=lambda record: record.name, max_workers=max_workers)
    logger.info(f'FASTA import: {result.summary("record")}')
    return result
