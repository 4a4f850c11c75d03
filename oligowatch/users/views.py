# users/views.py
import logging

from django.contrib import messages
from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.decorators import login_required
from django.shortcuts import render, redirect
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from core.backend import clear_session_tokens, store_session_tokens
from core.exceptions import BackendError, BackendUnavailableError
from .api_utils import edit_account_settings, fetch_account_settings
from .decorators import backend_session_required
from .forms import AccountSettingsForm, LoginForm, SignupForm

logger = logging.getLogger(__name__)


def login_view(request):
    """
    Log in with the backend account (email and password).
    """
    if request.user.is_authenticated and request.backend.is_authenticated:
        return redirect('home:dashboard')

    if request.method == 'POST':
        form = LoginForm(request.POST)
        if form.is_valid():
            try:
                user = authenticate(
                    request,
                    email=form.cleaned_data['email'],
                    password=form.cleaned_data['password'],
                )
            except BackendUnavailableError as e:
                messages.error(request, e.message)
                return render(request, 'users/login.html', {'form': form})

            if user is None:
                form.add_error(None, 'Invalid email or password.')
            else:
                login(request, user)
                store_session_tokens(request.session, user.backend_session)
                logger.info(f'User logged in: {user.username}')
                next_url = request.GET.get('next')
                if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
                    return redirect(next_url)
                return redirect('home:dashboard')
    else:
        form = LoginForm()

    return render(request, 'users/login.html', {'form': form})


def signup(request):
    """
    Create a backend account. Depending on the backend configuration the
    user may have to confirm the email address before logging in.
    """
    if request.method == 'POST':
        form = SignupForm(request.POST)
        if form.is_valid():
            email = form.cleaned_data['email']
            try:
                request.backend.sign_up(email, form.cleaned_data['password1'])
            except BackendError as e:
                form.add_error(None, e.message)
            else:
                logger.info(f'New account registered: {email}')
                messages.success(
                    request,
                    f'Account created for {email}. Check your inbox if a confirmation '
                    'email was sent, then log in.'
                )
                return redirect('users:login')
    else:
        form = SignupForm()

    return render(request, 'users/signup.html', {'form': form})


@require_POST
def logout_view(request):
    """
    End the backend session and the local one. A failing backend sign-out
    still logs the user out locally.
    """
    try:
        request.backend.sign_out()
    except BackendError as e:
        logger.warning(f'Backend sign-out failed: {e.message}')
    clear_session_tokens(request.session)
    logout(request)
    return redirect('home:index')


@login_required
@backend_session_required
def account_settings(request):
    """
    Show and edit the display name and institution. Email is read-only.
    """
    if request.method == 'POST':
        form = AccountSettingsForm(request.POST)
        if form.is_valid():
            try:
                edit_account_settings(
                    request.backend,
                    form.cleaned_data['user_name'],
                    form.cleaned_data['user_institution'],
                )
            except BackendError as e:
                messages.error(request, e.message)
            else:
                messages.success(request, 'Settings updated successfully!')
                return redirect('users:settings')
    else:
        try:
            initial = fetch_account_settings(request.backend)
        except BackendError as e:
            messages.error(request, e.message)
            initial = {}
        form = AccountSettingsForm(initial=initial)

    context = {
        'form': form,
        'email': request.user.email,
        'title': 'Settings',
    }
    return render(request, 'users/settings.html', context)
