# taxids/views.py
"""
Views for the TaxID area: list, create and delete entries, and the
same-origin proxy for NCBI species-name lookups.
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import render, redirect
from django.views.decorators.http import require_GET, require_POST

from core.exceptions import BackendError
from users.decorators import backend_session_required
from .api_utils import (
    NCBITaxonomyClient,
    TaxonomyLookupError,
    create_user_taxid,
    delete_user_taxid,
    fetch_user_taxids,
    parse_positive_taxid,
)
from .forms import TaxIDForm

logger = logging.getLogger(__name__)


@login_required
@backend_session_required
def taxid_list(request):
    """
    List the user's TaxID entries; POST creates one, or with
    action=lookup fills the species name from NCBI.
    """
    show_form = False

    if request.method == 'POST':
        show_form = True
        form = TaxIDForm(request.POST)
        action = request.POST.get('action', 'create')

        if form.is_valid():
            taxid = form.cleaned_data['taxid']

            if action == 'lookup':
                try:
                    found = NCBITaxonomyClient().lookup(taxid)
                except TaxonomyLookupError as e:
                    form.add_error('taxid', e.message)
                else:
                    data = request.POST.copy()
                    data['taxid_spec'] = found['scientificName']
                    form = TaxIDForm(data)
                    form.is_valid()
            else:
                try:
                    create_user_taxid(request.backend, taxid, form.cleaned_data['taxid_spec'])
                except BackendError as e:
                    form.add_error(None, e.message)
                else:
                    messages.success(request, f'TaxID {taxid} added.')
                    return redirect('taxids:taxid_list')
    else:
        form = TaxIDForm()
        show_form = request.GET.get('new') == '1'

    taxids = []
    try:
        taxids = fetch_user_taxids(request.backend)
    except BackendError as e:
        messages.error(request, e.message or 'Failed to fetch taxids')

    context = {
        'form': form,
        'show_form': show_form,
        'taxids': taxids,
        'title': 'TaxID Area',
    }
    return render(request, 'taxids/taxid_list.html', context)


@login_required
@backend_session_required
@require_POST
def taxid_delete(request, entry_id):
    try:
        delete_user_taxid(request.backend, entry_id)
    except BackendError as e:
        messages.error(request, e.message or 'Failed to delete taxid entry')
    else:
        messages.success(request, 'TaxID entry deleted.')
    return redirect('taxids:taxid_list')


@login_required
@require_GET
def taxid_lookup(request):
    """
    JSON proxy for NCBI taxonomy lookups: GET ?taxid=<positive int>.

    Answers 200 {'taxid', 'scientificName'} or {'error'} with 400, 404,
    503, 504 or 500.
    """
    raw_taxid = request.GET.get('taxid')
    if raw_taxid is None or not raw_taxid.strip():
        return JsonResponse({'error': 'TaxID parameter is required'}, status=400)

    try:
        taxid = parse_positive_taxid(raw_taxid)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)

    try:
        found = NCBITaxonomyClient().lookup(taxid)
    except TaxonomyLookupError as e:
        return JsonResponse({'error': e.message}, status=e.status_code)

    return JsonResponse(found)
