# taxids/forms.py
from django import forms

from .api_utils import parse_positive_taxid

INPUT_CLASS = 'w-full px-4 py-2 border border-gray-300 rounded-lg focus:ring-2 focus:ring-blue-500'


class TaxIDForm(forms.Form):
    """
    New TaxID entry. The species name is optional and can be filled from
    NCBI with the lookup action.
    """
    taxid = forms.CharField(
        required=False,
        widget=forms.NumberInput(attrs={
            'class': INPUT_CLASS,
            'placeholder': 'Enter NCBI taxonomy ID (e.g., 9606)',
            'min': 1,
            'step': 1,
        }),
        label='TaxID (NCBI Taxonomy ID)',
        help_text='Must be a positive integer representing an NCBI taxonomy ID'
    )
    taxid_spec = forms.CharField(
        max_length=255,
        required=False,
        widget=forms.TextInput(attrs={
            'class': INPUT_CLASS,
            'placeholder': 'Enter human-readable species name (e.g., Homo sapiens)',
        }),
        label='Species Name (Optional)',
        help_text='Optional human-readable species name for reference'
    )

    def clean_taxid(self):
        try:
            return parse_positive_taxid(self.cleaned_data.get('taxid'))
        except ValueError as e:
            raise forms.ValidationError(str(e))

    def clean_taxid_spec(self):
        return self.cleaned_data.get('taxid_spec', '').strip() or None
