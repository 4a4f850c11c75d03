# home/api_utils.py
"""
Surveillance dashboard calls and the entry selection rules.

An entry with a queued job can't be selected again until the job is
picked up by the backend.
"""

import logging
from typing import Dict, Iterable, List

logger = logging.getLogger(__name__)

# Job type tag understood by order_dashboard_job
DIVERGENCE_CHECK_JOB = 1


def normalize_dashboard_entry(row: Dict) -> Dict:
    queued_job_id = row.get('queued_job_id')
    found = row.get('nuccor_entries_found')
    return {
        'entry_id': int(row['entry_id']),
        'assay_name': row.get('assay_name') or '',
        'lookback_days': row.get('lookback_days'),
        'last_checked': row.get('last_checked'),
        'nuccor_entries_found': int(found) if found is not None else None,
        'queued_job_id': int(queued_job_id) if queued_job_id is not None else None,
    }


def sync_dashboard_entries(backend) -> None:
    """Add entries for new assays and drop entries of deleted ones."""
    backend.rpc('sync_dashboard_entries')


def fetch_dashboard_entries(backend) -> List[Dict]:
    rows = backend.rpc('fetch_dashboard_entries')
    if not isinstance(rows, list):
        return []
    return [normalize_dashboard_entry(row) for row in rows]


def order_dashboard_job(backend, entry_id: int, lookback_days: int) -> None:
    backend.rpc('order_dashboard_job', {
        'p_entry_id': entry_id,
        'p_job_type': DIVERGENCE_CHECK_JOB,
        'p_lookback_days': lookback_days,
    })
    logger.info(f'Ordered divergence check for dashboard entry {entry_id} ({lookback_days} days)')


def is_selectable(entry: Dict) -> bool:
    return entry.get('queued_job_id') is None


def selectable_entry_ids(entries: Iterable[Dict]) -> List[int]:
    return [entry['entry_id'] for entry in entries if is_selectable(entry)]


def resolve_selection(entries: Iterable[Dict], requested_ids: Iterable[int]) -> List[int]:
    """
    Keep only the requested ids that name a selectable entry, in entry order.
    """
    requested = set(requested_ids)
    return [entry_id for entry_id in selectable_entry_ids(entries) if entry_id in requested]


def toggle_select_all(entries: Iterable[Dict], selected_ids: Iterable[int]) -> List[int]:
    """
    Select every selectable entry, or none when all of them already are.
    """
    entries = list(entries)
    selectable = selectable_entry_ids(entries)
    if selectable and set(selectable) <= set(selected_ids):
        return []
    return selectable
