# oligos/forms.py
"""
Forms for creating, importing and reassigning oligos.

Assay choices come from the backend and are passed in by the view.
"""

from django import forms

from core.exceptions import SequenceValidationError
from core.sequences import validate_dna_sequence

INPUT_CLASS = 'w-full px-4 py-2 border border-gray-300 rounded-lg focus:ring-2 focus:ring-blue-500'

# Choice value for moving an oligo out of any assay
UNASSIGN = '__unassign__'


def _assay_choices(assays, empty_label):
    return [('', empty_label)] + [(str(a['assay_id']), a['assay_name']) for a in assays or []]


def _optional_assay_id(value):
    return int(value) if value else None


class OligoForm(forms.Form):
    sequence_name = forms.CharField(
        max_length=200,
        required=False,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'e.g., FWD_primer_1'}),
        label='Sequence Name'
    )
    dna_sequence = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': INPUT_CLASS + ' font-mono', 'rows': 3}),
        label='DNA Sequence',
        help_text='Valid characters: A, C, G, T and IUPAC codes (R, Y, S, W, K, M, B, D, H, V, N)'
    )
    assay = forms.ChoiceField(
        required=False,
        widget=forms.Select(attrs={'class': INPUT_CLASS}),
        label='Assay (Optional)'
    )

    def __init__(self, *args, assays=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['assay'].choices = _assay_choices(assays, 'No assay')

    def clean_sequence_name(self):
        name = self.cleaned_data.get('sequence_name', '').strip()
        if not name:
            raise forms.ValidationError('Sequence name is required')
        return name

    def clean_dna_sequence(self):
        try:
            return validate_dna_sequence(self.cleaned_data.get('dna_sequence', ''))
        except SequenceValidationError as e:
            raise forms.ValidationError(e.message)

    def clean_assay(self):
        return _optional_assay_id(self.cleaned_data.get('assay'))


class ReassignForm(forms.Form):
    """
    cleaned_data['target'] is an assay id, or UNASSIGN to detach the oligo.
    """
    target = forms.ChoiceField(
        required=False,
        widget=forms.Select(attrs={'class': INPUT_CLASS}),
        label='Move to'
    )

    def __init__(self, *args, assays=None, **kwargs):
        super().__init__(*args, **kwargs)
        choices = _assay_choices(assays, 'Select an assay...')
        choices.append((UNASSIGN, 'Unassign (no assay)'))
        self.fields['target'].choices = choices

    def clean_target(self):
        target = self.cleaned_data.get('target')
        if not target:
            raise forms.ValidationError('Please select a target assay or unassign')
        if target == UNASSIGN:
            return UNASSIGN
        return int(target)


class FastaImportForm(forms.Form):
    fasta_text = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={
            'class': INPUT_CLASS + ' font-mono',
            'rows': 10,
            'placeholder': '>oligo_1\nACGTACGT\n>oligo_2\nTTGGCCAA',
        }),
        label='Paste FASTA'
    )
    fasta_file = forms.FileField(
        required=False,
        label='Or upload a FASTA file'
    )
    assay = forms.ChoiceField(
        required=False,
        widget=forms.Select(attrs={'class': INPUT_CLASS}),
        label='Assign to assay (Optional)'
    )

    def __init__(self, *args, assays=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['assay'].choices = _assay_choices(assays, 'No assay')

    def clean_assay(self):
        return _optional_assay_id(self.cleaned_data.get('assay'))

    def clean(self):
        cleaned_data = super().clean()
        if not (cleaned_data.get('fasta_text') or '').strip() and not cleaned_data.get('fasta_file'):
            raise forms.ValidationError('Paste FASTA text or choose a file to import')
        return cleaned_data
