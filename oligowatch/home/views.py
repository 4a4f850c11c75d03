# home/views.py
import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import render, redirect
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_GET

from assays.api_utils import fetch_user_assays
from core.batch import run_batch
from core.exceptions import BackendError
from core.templatetags.oligowatch_tags import timestamp
from oligos.api_utils import fetch_user_oligos
from users.api_utils import fetch_account_settings
from users.decorators import backend_session_required
from .api_utils import (
    fetch_dashboard_entries,
    order_dashboard_job,
    resolve_selection,
    selectable_entry_ids,
    sync_dashboard_entries,
    toggle_select_all,
)
from .forms import RunCheckForm

logger = logging.getLogger(__name__)


def _posted_entry_ids(request):
    return [int(value) for value in request.POST.getlist('entry_ids') if value.isdigit()]


def index(request):
    """
    Landing page: backend connection status and the way in.
    """
    backend_online = request.backend.health_check()
    context = {
        'backend_online': backend_online,
        'title': 'Diversity Surveillance',
    }
    return render(request, 'home/index.html', context)


def _general_information(request):
    """
    Account details and repository counts. Each read fails on its own
    without taking the others down.
    """
    info = {
        'email': request.user.email,
        'user_name': None,
        'user_institution': None,
        'assay_count': None,
        'oligo_count': None,
    }
    try:
        info.update(fetch_account_settings(request.backend))
    except BackendError as e:
        logger.warning(f'Dashboard: could not fetch account details: {e.message}')
    try:
        info['assay_count'] = len(fetch_user_assays(request.backend))
    except BackendError as e:
        logger.warning(f'Dashboard: could not count assays: {e.message}')
    try:
        info['oligo_count'] = len(fetch_user_oligos(request.backend))
    except BackendError as e:
        logger.warning(f'Dashboard: could not count oligos: {e.message}')
    return info


def _load_entries(request):
    try:
        sync_dashboard_entries(request.backend)
        return fetch_dashboard_entries(request.backend)
    except BackendError as e:
        messages.error(request, e.message or 'Failed to load surveillance entries')
        return []


@login_required
@backend_session_required
@never_cache
def dashboard(request):
    """
    Main dashboard: general information and the surveillance table.

    POST action=toggle_all flips the select-all state; action=run_check
    orders one divergence check per selected entry.
    """
    entries = _load_entries(request)
    selected_ids = []

    if request.method == 'POST':
        form = RunCheckForm(request.POST)
        action = request.POST.get('action', 'run_check')
        posted_ids = resolve_selection(entries, _posted_entry_ids(request))

        if action == 'toggle_all':
            selected_ids = toggle_select_all(entries, posted_ids)
        elif form.is_valid():
            selected_ids = posted_ids
            if not selected_ids:
                messages.error(request, 'Select at least one assay to check.')
            else:
                lookback_days = form.cleaned_data['lookback_days']
                names = {entry['entry_id']: entry['assay_name'] for entry in entries}
                backend = request.backend
                result = run_batch(
                    selected_ids,
                    lambda entry_id: order_dashboard_job(backend, entry_id, lookback_days),
                    label=lambda entry_id: names.get(entry_id) or f'Entry {entry_id}',
                )
                if result.success_count:
                    messages.success(
                        request,
                        f'Queued divergence check for {result.success_count} assay(s).'
                    )
                for failure in result.failures:
                    messages.error(request, str(failure))
                return redirect('home:dashboard')
        else:
            selected_ids = posted_ids
    else:
        form = RunCheckForm()

    context = {
        'info': _general_information(request),
        'entries': entries,
        'selected_ids': selected_ids,
        'selectable_count': len(selectable_entry_ids(entries)),
        'form': form,
        'poll_interval_ms': int(getattr(settings, 'DASHBOARD_POLL_INTERVAL_SECONDS', 15)) * 1000,
        'title': 'Dashboard',
    }
    return render(request, 'home/dashboard.html', context)


@login_required
@backend_session_required
@require_GET
@never_cache
def dashboard_status(request):
    """
    JSON snapshot of the surveillance entries for the dashboard poll.
    """
    try:
        entries = fetch_dashboard_entries(request.backend)
    except BackendError as e:
        return JsonResponse({'error': e.message}, status=502)

    for entry in entries:
        entry['last_checked_display'] = timestamp(entry['last_checked'])
        entry['selectable'] = entry['queued_job_id'] is None
    return JsonResponse({'entries': entries})
