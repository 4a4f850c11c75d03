# assays/forms.py
"""
Form for creating an assay together with its reference amplicon.
"""

from django import forms

from core.exceptions import SequenceValidationError
from core.sequences import validate_dna_sequence

INPUT_CLASS = 'w-full px-4 py-2 border border-gray-300 rounded-lg focus:ring-2 focus:ring-blue-500'


class AssayForm(forms.Form):
    """
    target_taxid choices come from the user's TaxID entries and are passed
    in by the view, since they live in the backend.
    """
    assay_name = forms.CharField(
        max_length=200,
        required=False,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'Enter assay name'}),
        label='Assay Name'
    )
    target_taxid = forms.ChoiceField(
        required=False,
        widget=forms.Select(attrs={'class': INPUT_CLASS}),
        label='Target TaxID (Optional)'
    )
    target_gene = forms.CharField(
        max_length=100,
        required=False,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'e.g., 16S rRNA'}),
        label='Target Gene (Optional)'
    )
    amplicon_name = forms.CharField(
        max_length=200,
        required=False,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'Reference amplicon name'}),
        label='Amplicon Name (Optional)'
    )
    amplicon_sequence = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={
            'class': INPUT_CLASS + ' font-mono',
            'rows': 6,
            'placeholder': 'Reference amplicon sequence (spaces and lowercase are converted)',
        }),
        label='Reference Amplicon Sequence',
        help_text='Valid characters: A, C, G, T and IUPAC codes (R, Y, S, W, K, M, B, D, H, V, N)'
    )
    fasta_file = forms.FileField(
        required=False,
        label='Import from FASTA',
        help_text='A FASTA file holding exactly one sequence'
    )

    def __init__(self, *args, taxids=None, **kwargs):
        super().__init__(*args, **kwargs)
        choices = [('', 'None')]
        for entry in taxids or []:
            label = str(entry['taxid'])
            if entry.get('taxid_spec'):
                label = f"{label} - {entry['taxid_spec']}"
            choices.append((str(entry['entry_id']), label))
        self.fields['target_taxid'].choices = choices

    def clean_assay_name(self):
        assay_name = self.cleaned_data.get('assay_name', '').strip()
        if not assay_name:
            raise forms.ValidationError('Assay name is required')
        return assay_name

    def clean_target_taxid(self):
        value = self.cleaned_data.get('target_taxid')
        return int(value) if value else None

    def clean_target_gene(self):
        return self.cleaned_data.get('target_gene', '').strip() or None

    def clean_amplicon_name(self):
        return self.cleaned_data.get('amplicon_name', '').strip() or None

    def clean_amplicon_sequence(self):
        try:
            return validate_dna_sequence(self.cleaned_data.get('amplicon_sequence', ''))
        except SequenceValidationError as e:
            raise forms.ValidationError(e.message)
