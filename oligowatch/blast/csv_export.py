# blast/csv_export.py
"""
CSV export of a finished BLAST aligner job.

The file is made of titled sections; every section title has an empty row
before and after it, and every cell is quoted.
"""

import csv
import io
import re
from typing import List

from .api_utils import STATISTICS_FIELDS, oligo_columns, result_pattern_rows


def _text(value, missing='') -> str:
    if value is None:
        return missing
    return str(value)


def _section(rows: List[List[str]], title: str) -> None:
    rows.append([''])
    rows.append([title])
    rows.append([''])


def build_result_rows(job, assay_name: str) -> List[List[str]]:
    """
    Lay out the export as rows of cells.

    Args:
        job: Normalized aligner job holding a result
        assay_name: Display name of the job's assay

    Returns:
        List of rows; the last 2 + P rows are the patterns table header,
        the oligo sequences row and one row per pattern
    """
    result = job.get('result') or {}
    statistics = result.get('statistics') or {}
    per_oligo_stats = result.get('per_oligo_stats') or {}
    rows = []

    _section(rows, 'Job Information')
    rows.append(['Assay Name', assay_name])
    rows.append(['Job ID', _text(job['align_id'])])
    rows.append(['Date Range', f"{_text(job['date_from'])} to {_text(job['date_to'])}"])

    _section(rows, 'Statistics')
    for key, label in STATISTICS_FIELDS:
        rows.append([label, _text(statistics.get(key))])

    if per_oligo_stats:
        _section(rows, 'Per-Oligo Statistics')
        rows.append(['Oligo Name', 'Match Rate (%)', 'Sense Matches', 'Antisense Matches', 'Total Matches'])
        for oligo_name, stats in per_oligo_stats.items():
            rows.append([
                oligo_name,
                _text(stats.get('match_rate')),
                _text(stats.get('sense_matches')),
                _text(stats.get('antisense_matches')),
                _text(stats.get('total_matches')),
            ])

    _section(rows, 'Input Parameters')
    rows.append(['Date From', _text(job['date_from'])])
    rows.append(['Date To', _text(job['date_to'])])
    rows.append(['TaxID', _text(job['taxid'])])
    rows.append([''])
    rows.append(['BLAST Parameters'])
    rows.append(['Identity (%)', _text(job['identity'], 'N/A')])
    rows.append(['Coverage (%)', _text(job['coverage'], 'N/A')])
    rows.append([''])
    rows.append(['Pairwise Aligner Parameters'])
    rows.append(['Match Score', _text(job['match_score'], 'N/A')])
    rows.append(['Mismatch Score', _text(job['mismatch_score'], 'N/A')])
    rows.append(['Open Gap Penalty', _text(job['opengap'], 'N/A')])
    rows.append(['Extend Gap Penalty', _text(job['extendgap'], 'N/A')])
    rows.append([''])
    rows.append(['Other Parameters'])
    rows.append(['Oligo Min Cover', _text(job['oligo_min_cover'], 'N/A')])

    _section(rows, 'Alignment Patterns')
    names, sequences = oligo_columns(job)
    rows.append(names + ['Count', 'Total Mismatches', 'Examples'])
    rows.append(sequences + ['', '', ''])
    for pattern in result_pattern_rows(job):
        rows.append(pattern['alignments'] + [
            _text(pattern['count']),
            _text(pattern['total_mismatches']),
            '; '.join(str(example) for example in pattern['examples']),
        ])

    return rows


def render_result_csv(job, assay_name: str) -> str:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerows(build_result_rows(job, assay_name))
    return output.getvalue()


def result_csv_filename(job, assay_name: str) -> str:
    name = re.sub(r'\s+', '_', assay_name)
    return f"blast_result_{job['align_id']}_{name}.csv"
