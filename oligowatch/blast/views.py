# blast/views.py
import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse
from django.shortcuts import render, redirect
from django.views.decorators.http import require_POST

from assays.api_utils import fetch_user_assays
from core.batch import run_batch
from core.exceptions import BackendError
from users.decorators import backend_session_required
from .api_utils import (
    STATISTICS_FIELDS,
    assay_display_name,
    delete_blast_aligner_job,
    fetch_blast_aligner_jobs,
    fetch_blast_planning_list,
    get_blast_aligner_job,
    has_viewable_result,
    oligo_columns,
    order_blast_aligner_job,
    result_pattern_rows,
)
from .csv_export import render_result_csv, result_csv_filename
from .forms import BlastPlannerForm

logger = logging.getLogger(__name__)


def _posted_ids(request, field):
    return [int(value) for value in request.POST.getlist(field) if value.isdigit()]


def _assay_names(request):
    """Assay id to name; empty when the assays can't be read."""
    try:
        return {a['assay_id']: a['assay_name'] for a in fetch_user_assays(request.backend)}
    except BackendError as e:
        logger.warning(f'Could not fetch assay names for BLAST results: {e.message}')
        return {}


@login_required
@backend_session_required
def blast_planner(request):
    """
    Order BLAST aligner jobs for the selected eligible assays.

    Only assays with a target taxid, a reference amplicon and at least one
    oligo are listed by the backend.
    """
    entries = []
    try:
        entries = fetch_blast_planning_list(request.backend)
    except BackendError as e:
        messages.error(request, e.message or 'Failed to fetch planning list')

    selected_ids = []
    if request.method == 'POST':
        form = BlastPlannerForm(request.POST)
        known = {entry['planner_entry_id'] for entry in entries}
        selected_ids = [i for i in _posted_ids(request, 'planner_entry_ids') if i in known]

        if form.is_valid():
            if not selected_ids:
                messages.error(request, 'Please select at least one assay')
            else:
                params = form.cleaned_data
                names = {entry['planner_entry_id']: entry['assay_name'] for entry in entries}
                backend = request.backend
                result = run_batch(
                    selected_ids,
                    lambda entry_id: order_blast_aligner_job(backend, entry_id, **params),
                    label=lambda entry_id: names.get(entry_id) or str(entry_id),
                )
                if result.success_count:
                    messages.success(request, f'Ordered {result.success_count} BLAST job(s).')
                if result.failures:
                    messages.error(request, 'Some jobs failed:')
                for failure in result.failures:
                    messages.error(request, str(failure))
                return redirect('blast:planner')
    else:
        form = BlastPlannerForm()

    context = {
        'entries': entries,
        'selected_ids': selected_ids,
        'form': form,
        'title': 'BLAST Planner',
    }
    return render(request, 'blast/planner.html', context)


@login_required
@backend_session_required
def blast_results(request):
    jobs = []
    try:
        jobs = fetch_blast_aligner_jobs(request.backend)
    except BackendError as e:
        messages.error(request, e.message or 'Failed to fetch BLAST jobs')

    assay_names = _assay_names(request)
    for job in jobs:
        job['assay_name'] = assay_display_name(job['assay_id'], assay_names)
        job['viewable'] = has_viewable_result(job)

    context = {
        'jobs': jobs,
        'title': 'BLAST Results',
    }
    return render(request, 'blast/results.html', context)


@login_required
@backend_session_required
@require_POST
def blast_results_delete(request):
    align_ids = _posted_ids(request, 'align_ids')
    if not align_ids:
        messages.error(request, 'Please select at least one job to delete')
        return redirect('blast:results')

    backend = request.backend
    result = run_batch(
        align_ids,
        lambda align_id: delete_blast_aligner_job(backend, align_id),
        label=lambda align_id: f'Job {align_id}',
    )
    if result.success_count:
        messages.success(request, f'Deleted {result.success_count} job(s).')
    for failure in result.failures:
        messages.error(request, str(failure))
    return redirect('blast:results')


def _viewable_job(request, align_id):
    """The job and its assay name, or (None, None) with a message set."""
    try:
        job = get_blast_aligner_job(request.backend, align_id)
    except BackendError as e:
        messages.error(request, e.message)
        return None, None
    if job is None:
        messages.error(request, 'BLAST job not found.')
        return None, None
    if not has_viewable_result(job):
        messages.info(request, 'This job has no result yet.')
        return None, None
    return job, assay_display_name(job['assay_id'], _assay_names(request))


@login_required
@backend_session_required
def blast_result_detail(request, align_id):
    """
    Result viewer: patterns table, statistics, per-oligo statistics and
    the input parameters of a finished job.
    """
    job, assay_name = _viewable_job(request, align_id)
    if job is None:
        return redirect('blast:results')

    statistics = job['result'].get('statistics') or {}
    oligo_names, oligo_sequences = oligo_columns(job)
    context = {
        'job': job,
        'assay_name': assay_name,
        'statistics': [(label, statistics.get(key)) for key, label in STATISTICS_FIELDS],
        'per_oligo_stats': job['result'].get('per_oligo_stats') or {},
        'oligo_names': oligo_names,
        'oligo_sequences': oligo_sequences,
        'patterns': result_pattern_rows(job),
        'title': f'BLAST Result: {assay_name}',
    }
    return render(request, 'blast/result_detail.html', context)


@login_required
@backend_session_required
def blast_result_csv(request, align_id):
    job, assay_name = _viewable_job(request, align_id)
    if job is None:
        return redirect('blast:results')

    response = HttpResponse(render_result_csv(job, assay_name), content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{result_csv_filename(job, assay_name)}"'
    return response
