# home/forms.py
from django import forms


class RunCheckForm(forms.Form):
    lookback_days = forms.IntegerField(
        min_value=1,
        initial=30,
        widget=forms.NumberInput(attrs={
            'class': 'w-24 px-3 py-2 border border-gray-300 rounded-lg focus:ring-2 focus:ring-blue-500',
            'min': 1,
        }),
        label='Lookback (days)',
        error_messages={
            'required': 'Lookback days is required',
            'min_value': 'Lookback days must be a positive number',
            'invalid': 'Lookback days must be a positive number',
        }
    )
