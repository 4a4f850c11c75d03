# oligos/views.py
import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.paginator import Paginator, EmptyPage, PageNotAnInteger
from django.shortcuts import render, redirect
from django.views.decorators.http import require_POST

from assays.api_utils import fetch_assay_names
from core.batch import run_batch
from core.exceptions import BackendError, FastaFormatError
from core.sequences import parse_fasta, read_uploaded_fasta
from users.decorators import backend_session_required
from .api_utils import (
    create_user_oligo,
    delete_user_oligo,
    fetch_user_oligos,
    import_oligo_records,
    reassign_oligo,
    unassign_oligo,
)
from .forms import UNASSIGN, FastaImportForm, OligoForm, ReassignForm

logger = logging.getLogger(__name__)

OLIGOS_PER_PAGE = 25


def assay_label(assay_id, assay_names):
    """
    Name shown for an oligo's assay: 'None' when unassigned, 'Unknown' when
    the names could not be read or the id is not among them.
    """
    if assay_id is None:
        return 'None'
    if assay_names is None:
        return 'Unknown'
    return assay_names.get(assay_id) or 'Unknown'


def _assay_options(assay_names):
    return [
        {'assay_id': assay_id, 'assay_name': name}
        for assay_id, name in (assay_names or {}).items()
    ]


def _move_oligo(backend, oligo_id, target):
    if target == UNASSIGN:
        return unassign_oligo(backend, oligo_id)
    return reassign_oligo(backend, oligo_id, target)


def _selected_ids(request):
    return [int(value) for value in request.POST.getlist('oligo_ids') if value.isdigit()]


@login_required
@backend_session_required
def oligo_list(request):
    """
    Display the user's oligos, 25 per page, with the name of each one's assay.
    """
    oligos = []
    try:
        oligos = fetch_user_oligos(request.backend)
    except BackendError as e:
        messages.error(request, e.message or 'Failed to fetch oligos')

    assay_names = fetch_assay_names(request.backend)
    for oligo in oligos:
        oligo['assay_name'] = assay_label(oligo['assay_id'], assay_names)

    paginator = Paginator(oligos, OLIGOS_PER_PAGE)
    page_number = request.GET.get('page', 1)

    try:
        page_obj = paginator.get_page(page_number)
    except PageNotAnInteger:
        page_obj = paginator.get_page(1)
    except EmptyPage:
        page_obj = paginator.get_page(paginator.num_pages)

    context = {
        'page_obj': page_obj,
        'oligo_list': page_obj.object_list,
        'total_count': paginator.count,
        'reassign_form': ReassignForm(assays=_assay_options(assay_names)),
        'title': 'Oligo Repository',
    }
    return render(request, 'oligos/oligo_list.html', context)


@login_required
@backend_session_required
def oligo_create(request):
    assays = _assay_options(fetch_assay_names(request.backend))

    if request.method == 'POST':
        form = OligoForm(request.POST, assays=assays)
        if form.is_valid():
            name = form.cleaned_data['sequence_name']
            try:
                create_user_oligo(
                    request.backend,
                    name,
                    form.cleaned_data['dna_sequence'],
                    form.cleaned_data['assay'],
                )
            except BackendError as e:
                form.add_error(None, e.message)
            else:
                messages.success(request, f'Oligo "{name}" created successfully.')
                return redirect('oligos:oligo_list')
    else:
        form = OligoForm(assays=assays, initial={'assay': request.GET.get('assay', '')})

    context = {
        'form': form,
        'title': 'Create Oligo',
    }
    return render(request, 'oligos/oligo_create.html', context)


@login_required
@backend_session_required
@require_POST
def oligo_delete(request, oligo_id):
    try:
        delete_user_oligo(request.backend, oligo_id)
    except BackendError as e:
        messages.error(request, e.message or 'Failed to delete oligo')
    else:
        messages.success(request, 'Oligo deleted.')
    return redirect('oligos:oligo_list')


@login_required
@backend_session_required
@require_POST
def oligo_reassign(request, oligo_id):
    assays = _assay_options(fetch_assay_names(request.backend))
    form = ReassignForm(request.POST, assays=assays)
    if not form.is_valid():
        messages.error(request, form.errors['target'][0])
        return redirect('oligos:oligo_list')

    target = form.cleaned_data['target']
    try:
        _move_oligo(request.backend, oligo_id, target)
    except BackendError as e:
        messages.error(request, e.message or 'Failed to reassign oligo')
    else:
        messages.success(request, 'Oligo unassigned.' if target == UNASSIGN else 'Oligo reassigned.')
    return redirect('oligos:oligo_list')


@login_required
@backend_session_required
@require_POST
def oligo_bulk_action(request):
    """
    Delete or reassign the selected oligos. Each oligo is handled on its
    own; failures are reported without stopping the rest.
    """
    oligo_ids = _selected_ids(request)
    if not oligo_ids:
        messages.error(request, 'Select at least one oligo.')
        return redirect('oligos:oligo_list')

    action = request.POST.get('action')
    backend = request.backend

    if action == 'delete':
        result = run_batch(
            oligo_ids,
            lambda oligo_id: delete_user_oligo(backend, oligo_id),
            label=lambda oligo_id: f'Oligo {oligo_id}',
        )
        verb = 'Deleted'
    elif action == 'reassign':
        form = ReassignForm(request.POST, assays=_assay_options(fetch_assay_names(backend)))
        if not form.is_valid():
            messages.error(request, form.errors['target'][0])
            return redirect('oligos:oligo_list')
        target = form.cleaned_data['target']
        result = run_batch(
            oligo_ids,
            lambda oligo_id: _move_oligo(backend, oligo_id, target),
            label=lambda oligo_id: f'Oligo {oligo_id}',
        )
        verb = 'Unassigned' if target == UNASSIGN else 'Reassigned'
    else:
        messages.error(request, 'Unknown bulk action.')
        return redirect('oligos:oligo_list')

    if result.success_count:
        messages.success(request, f'{verb} {result.success_count} oligo(s).')
    for failure in result.failures:
        messages.error(request, str(failure))
    return redirect('oligos:oligo_list')


@login_required
@backend_session_required
def oligo_import(request):
    """
    Import many oligos from FASTA text or an uploaded FASTA file.
    Shows a result page with the per-record outcome.
    """
    assays = _assay_options(fetch_assay_names(request.backend))

    if request.method == 'POST':
        form = FastaImportForm(request.POST, request.FILES, assays=assays)
        if form.is_valid():
            try:
                uploaded = form.cleaned_data.get('fasta_file')
                if uploaded:
                    text = read_uploaded_fasta(
                        uploaded, max_bytes=getattr(settings, 'FASTA_UPLOAD_MAX_BYTES', None)
                    )
                else:
                    text = form.cleaned_data['fasta_text']
                records = parse_fasta(text)
                if not records:
                    raise FastaFormatError('No sequence found in FASTA input')
            except FastaFormatError as e:
                form.add_error(None, e.message)
            else:
                result = import_oligo_records(request.backend, records, form.cleaned_data['assay'])
                context = {
                    'result': result,
                    'title': 'Import Results',
                }
                return render(request, 'oligos/oligo_import_result.html', context)
    else:
        form = FastaImportForm(assays=assays)

    context = {
        'form': form,
        'title': 'Import Oligos from FASTA',
    }
    return render(request, 'oligos/oligo_import.html', context)
