# blast/forms.py
from django import forms

INPUT_CLASS = 'w-full px-4 py-2 border border-gray-300 rounded-lg focus:ring-2 focus:ring-blue-500'


def _number_input(step):
    return forms.NumberInput(attrs={'class': INPUT_CLASS, 'step': step})


class BlastPlannerForm(forms.Form):
    """
    Parameters shared by every job ordered in one submission.
    """
    date_from = forms.DateField(
        widget=forms.DateInput(attrs={'class': INPUT_CLASS, 'type': 'date'}),
        label='Date From',
        error_messages={'required': 'Date From is required'}
    )
    date_to = forms.DateField(
        widget=forms.DateInput(attrs={'class': INPUT_CLASS, 'type': 'date'}),
        label='Date To',
        error_messages={'required': 'Date To is required'}
    )
    identity = forms.FloatField(
        min_value=0, max_value=100, initial=95.0,
        widget=_number_input('0.1'),
        label='Identity (%)'
    )
    coverage = forms.FloatField(
        min_value=0, max_value=100, initial=80.0,
        widget=_number_input('0.1'),
        label='Coverage (%)'
    )
    match_score = forms.FloatField(initial=2.0, widget=_number_input('0.1'), label='Match Score')
    mismatch_score = forms.FloatField(initial=-1.0, widget=_number_input('0.1'), label='Mismatch Score')
    opengap = forms.FloatField(initial=-0.5, widget=_number_input('0.1'), label='Open Gap Penalty')
    extendgap = forms.FloatField(initial=-0.1, widget=_number_input('0.1'), label='Extend Gap Penalty')
    oligo_min_cover = forms.IntegerField(
        min_value=1, initial=1,
        widget=_number_input('1'),
        label='Oligo Min Cover',
        error_messages={
            'min_value': 'Oligo Min Cover must be an integer greater than or equal to 1',
            'invalid': 'Oligo Min Cover must be an integer greater than or equal to 1',
        }
    )

    def clean(self):
        cleaned_data = super().clean()
        date_from = cleaned_data.get('date_from')
        date_to = cleaned_data.get('date_to')
        if date_from and date_to and date_to < date_from:
            raise forms.ValidationError('Date To must not be before Date From')
        return cleaned_data
