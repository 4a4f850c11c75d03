# users/forms.py
"""
Forms for login, signup and account settings.
"""

from django import forms

INPUT_CLASS = 'w-full px-4 py-2 border border-gray-300 rounded-lg focus:ring-2 focus:ring-indigo-500'


class LoginForm(forms.Form):
    email = forms.EmailField(
        widget=forms.EmailInput(attrs={'class': INPUT_CLASS, 'autofocus': True}),
        label='Email Address'
    )
    password = forms.CharField(
        widget=forms.PasswordInput(attrs={'class': INPUT_CLASS}),
        label='Password'
    )

    def clean_email(self):
        return self.cleaned_data['email'].strip().lower()


class SignupForm(forms.Form):
    """
    Account creation form. The backend enforces its own password policy;
    only the obvious mistakes are caught here.
    """
    email = forms.EmailField(
        widget=forms.EmailInput(attrs={'class': INPUT_CLASS, 'autofocus': True}),
        label='Email Address'
    )
    password1 = forms.CharField(
        min_length=6,
        widget=forms.PasswordInput(attrs={'class': INPUT_CLASS}),
        label='Password'
    )
    password2 = forms.CharField(
        widget=forms.PasswordInput(attrs={'class': INPUT_CLASS}),
        label='Confirm Password'
    )

    def clean_email(self):
        return self.cleaned_data['email'].strip().lower()

    def clean(self):
        cleaned_data = super().clean()
        password1 = cleaned_data.get('password1')
        password2 = cleaned_data.get('password2')
        if password1 and password2 and password1 != password2:
            raise forms.ValidationError('Passwords do not match')
        return cleaned_data


class AccountSettingsForm(forms.Form):
    user_name = forms.CharField(
        max_length=200,
        required=False,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'No name set yet'}),
        label='Name'
    )
    user_institution = forms.CharField(
        max_length=200,
        required=False,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'No institution set yet'}),
        label='Institution'
    )
