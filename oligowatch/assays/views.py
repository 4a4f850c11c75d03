# assays/views.py
import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import render, redirect
from django.views.decorators.http import require_POST

from core.exceptions import BackendError, FastaFormatError, NotFoundError
from core.sequences import parse_single_fasta, read_uploaded_fasta
from oligos.api_utils import fetch_user_oligos
from taxids.api_utils import fetch_user_taxids
from users.decorators import backend_session_required
from .api_utils import create_user_assay, delete_user_assay, fetch_user_assays, get_user_assay
from .forms import AssayForm

logger = logging.getLogger(__name__)


def _taxid_choices(request):
    """TaxID entries for the target dropdown; an empty list when unavailable."""
    try:
        return fetch_user_taxids(request.backend)
    except BackendError as e:
        logger.warning(f'Could not fetch taxids for assay form: {e.message}')
        return []


@login_required
@backend_session_required
def assay_list(request):
    """
    Display the user's assays with the number of oligos assigned to each.
    """
    assays = []
    try:
        assays = fetch_user_assays(request.backend)
    except BackendError as e:
        messages.error(request, e.message or 'Failed to fetch assays')

    oligo_counts = None
    if assays:
        try:
            oligos = fetch_user_oligos(request.backend)
        except BackendError as e:
            logger.warning(f'Could not fetch oligo counts: {e.message}')
        else:
            oligo_counts = {}
            for oligo in oligos:
                if oligo['assay_id'] is not None:
                    oligo_counts[oligo['assay_id']] = oligo_counts.get(oligo['assay_id'], 0) + 1

    for assay in assays:
        assay['oligo_count'] = None if oligo_counts is None else oligo_counts.get(assay['assay_id'], 0)

    context = {
        'assays': assays,
        'show_counts': oligo_counts is not None,
        'title': 'Assay Repository',
    }
    return render(request, 'assays/assay_list.html', context)


@login_required
@backend_session_required
def assay_create(request):
    """
    Create an assay and its reference amplicon.

    POST with action=import_fasta reads a single-record FASTA file into the
    amplicon name and sequence fields instead of saving.
    """
    taxids = _taxid_choices(request)

    if request.method == 'POST':
        action = request.POST.get('action', 'create')

        if action == 'import_fasta':
            data = request.POST.copy()
            try:
                uploaded = request.FILES.get('fasta_file')
                if uploaded is None:
                    raise FastaFormatError('Choose a FASTA file to import')
                text = read_uploaded_fasta(
                    uploaded, max_bytes=getattr(settings, 'FASTA_UPLOAD_MAX_BYTES', None)
                )
                record = parse_single_fasta(text)
            except FastaFormatError as e:
                messages.error(request, e.message)
            else:
                data['amplicon_name'] = record.name
                data['amplicon_sequence'] = record.sequence
                messages.success(request, f'Imported sequence "{record.name}" from FASTA.')
            form = AssayForm(initial=data.dict(), taxids=taxids)
        else:
            form = AssayForm(request.POST, taxids=taxids)
            if form.is_valid():
                name = form.cleaned_data['assay_name']
                try:
                    create_user_assay(
                        request.backend,
                        assay_name=name,
                        amplicon_sequence=form.cleaned_data['amplicon_sequence'],
                        taxid_entry_id=form.cleaned_data['target_taxid'],
                        target_gene=form.cleaned_data['target_gene'],
                        amplicon_name=form.cleaned_data['amplicon_name'],
                    )
                except BackendError as e:
                    form.add_error(None, e.message)
                else:
                    messages.success(request, f'Assay "{name}" created successfully.')
                    return redirect('assays:assay_list')
    else:
        form = AssayForm(taxids=taxids)

    context = {
        'form': form,
        'title': 'Create Assay',
    }
    return render(request, 'assays/assay_create.html', context)


@login_required
@backend_session_required
def assay_detail(request, assay_id):
    """
    Display one assay with its reference amplicon and assigned oligos.
    """
    try:
        assay = get_user_assay(request.backend, assay_id)
    except NotFoundError:
        messages.error(request, 'Assay not found.')
        return redirect('assays:assay_list')
    except BackendError as e:
        messages.error(request, e.message)
        return redirect('assays:assay_list')

    oligos = []
    try:
        oligos = [o for o in fetch_user_oligos(request.backend) if o['assay_id'] == assay_id]
    except BackendError as e:
        messages.warning(request, f'Could not load oligos: {e.message}')

    context = {
        'assay': assay,
        'oligos': oligos,
        'title': assay['assay_name'],
    }
    return render(request, 'assays/assay_detail.html', context)


@login_required
@backend_session_required
@require_POST
def assay_delete(request, assay_id):
    """Delete an assay; its oligos and reference amplicon go with it."""
    try:
        delete_user_assay(request.backend, assay_id)
    except BackendError as e:
        messages.error(request, e.message or 'Failed to delete assay')
    else:
        messages.success(request, 'Assay deleted, along with its oligos and reference amplicon.')
    return redirect('assays:assay_list')
