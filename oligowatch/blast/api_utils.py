# blast/api_utils.py
"""
BLAST planner and aligner job calls against the backend.

Jobs are run by backend workers; this side only orders them, lists them
and reads their results.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

JOB_STATUS_QUEUED = 'queued'
JOB_STATUS_WORKING = 'working'
JOB_STATUS_DONE = 'done'

# Older jobs were written with 'scheduled' before the status was renamed
LEGACY_STATUS_ALIASES = {'scheduled': JOB_STATUS_QUEUED}

# Keys of the statistics block of a result, with their display labels
STATISTICS_FIELDS = [
    ('alignment_rate', 'Alignment Rate (%)'),
    ('total_blast_hits', 'Total BLAST Hits'),
    ('sequences_aligned', 'Sequences Aligned'),
    ('filtered_blast_hits', 'Filtered BLAST Hits'),
    ('sequences_with_min_matches', 'Sequences with Min Matches'),
]


def _number(value, cast=float) -> Optional[float]:
    """Parse a numeric column; whole floats become ints so 95 is shown as '95'."""
    if value is None or value == '':
        return None
    value = cast(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def normalize_planning_entry(row: Dict) -> Dict:
    return {
        'planner_entry_id': int(row['planner_entry_id']),
        'assay_id': int(row['assay_id']),
        'assay_name': row.get('assay_name') or '',
        'oligo_count': int(row.get('oligo_count') or 0),
    }


def normalize_job_status(status: Optional[str]) -> str:
    status = (status or '').strip().lower()
    return LEGACY_STATUS_ALIASES.get(status, status)


def normalize_aligner_job(row: Dict) -> Dict:
    """
    Flatten a job row. The backend prefixes job columns with 'alignjob_';
    unprefixed names are accepted as well.
    """
    def field(name):
        return row.get(f'alignjob_{name}', row.get(name))

    oligos = field('oligos')
    return {
        'align_id': int(row['align_id']),
        'created_at': row.get('created_at'),
        'status': normalize_job_status(field('status')),
        'assay_id': _number(field('assay_id'), int),
        'taxid': _number(field('taxid'), int),
        'date_from': field('date_from'),
        'date_to': field('date_to'),
        'reference_seq': field('reference_seq') or '',
        'oligos': oligos if isinstance(oligos, list) else [],
        'identity': _number(field('identity')),
        'coverage': _number(field('coverage')),
        'match_score': _number(field('match_score')),
        'mismatch_score': _number(field('mismatch_score')),
        'opengap': _number(field('opengap')),
        'extendgap': _number(field('extendgap')),
        'oligo_min_cover': _number(field('oligo_min_cover'), int),
        'result': field('result') or None,
    }


def has_viewable_result(job: Dict) -> bool:
    return job['status'] == JOB_STATUS_DONE and bool(job.get('result'))


def fetch_blast_planning_list(backend) -> List[Dict]:
    """Assays with a target taxid, a reference amplicon and at least one oligo."""
    rows = backend.rpc('fetch_blast_planning_list')
    if not isinstance(rows, list):
        return []
    return [normalize_planning_entry(row) for row in rows]


def order_blast_aligner_job(backend, planner_entry_id: int, date_from: date, date_to: date,
                            identity: float, coverage: float, match_score: float,
                            mismatch_score: float, opengap: float, extendgap: float,
                            oligo_min_cover: int) -> None:
    backend.rpc('order_blast_aligner_job', {
        'p_planner_entry_id': planner_entry_id,
        'p_date_from': date_from.isoformat(),
        'p_date_to': date_to.isoformat(),
        'p_identity': identity,
        'p_coverage': coverage,
        'p_match_score': match_score,
        'p_mismatch_score': mismatch_score,
        'p_opengap': opengap,
        'p_extendgap': extendgap,
        'p_oligo_min_cover': oligo_min_cover,
    })
    logger.info(f'Ordered BLAST aligner job for planner entry {planner_entry_id}')


def fetch_blast_aligner_jobs(backend) -> List[Dict]:
    rows = backend.rpc('fetch_blast_aligner_jobs')
    if not isinstance(rows, list):
        return []
    return [normalize_aligner_job(row) for row in rows]


def get_blast_aligner_job(backend, align_id: int) -> Optional[Dict]:
    for job in fetch_blast_aligner_jobs(backend):
        if job['align_id'] == align_id:
            return job
    return None


def delete_blast_aligner_job(backend, align_id: int) -> None:
    backend.rpc('delete_blast_aligner_job', {'p_align_id': align_id})
    logger.info(f'Deleted BLAST aligner job {align_id}')


def assay_display_name(assay_id: Optional[int], assay_names: Dict[int, str]) -> str:
    return assay_names.get(assay_id) or f'Assay {assay_id}'


def oligo_columns(job: Dict):
    """Oligo names and sequences of a job, in the order of the pattern columns."""
    names = [str(oligo.get('id') or '') for oligo in job['oligos']]
    sequences = [str(oligo.get('sequence') or '') for oligo in job['oligos']]
    return names, sequences


def split_pattern(pattern: str, oligo_count: int) -> List[str]:
    """
    Split a pattern string into one alignment string per oligo.

    '....(fwd) | ..A.(rev)' gives ['....', '..A.']: parts are separated by
    '|', and each part is cut before its '(' direction marker. The list is
    padded with '' or truncated to oligo_count entries.
    """
    parts = []
    for part in (pattern or '').split('|'):
        part = part.strip()
        parts.append(part.split('(', 1)[0].strip())
    parts.extend([''] * (oligo_count - len(parts)))
    return parts[:oligo_count]


def result_pattern_rows(job: Dict) -> List[Dict]:
    """
    Rows of the patterns table: per-oligo alignment strings, count, total
    mismatches and example accessions.
    """
    oligo_count = len(job['oligos'])
    rows = []
    for pattern in (job.get('result') or {}).get('patterns') or []:
        rows.append({
            'alignments': split_pattern(pattern.get('pattern', ''), oligo_count),
            'count': pattern.get('count', 0),
            'total_mismatches': pattern.get('total_mismatches', 0),
            'examples': list(pattern.get('examples') or []),
        })
    return rows
