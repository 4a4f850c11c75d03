# users/test_auth.py
"""
Tests for login through the backend, the session guard on data pages and
the account settings page.

Tests verify that:
1. Valid credentials create a local account mirror and store the tokens
2. Pages without a backend token send the user back to login
3. Expired tokens are refreshed, or the user is logged out when that fails
4. Account settings send blank fields as null
"""

import time
from unittest import mock

from django.contrib.auth.models import User
from django.test import TestCase
from django.urls import reverse

from core.backend import SESSION_ACCESS_TOKEN, SESSION_EXPIRES_AT, SESSION_REFRESH_TOKEN
from core.exceptions import AuthenticationError, BackendUnavailableError
from core.testing import BackendViewTestCase

AUTH_BACKEND = 'users.backends.BackendAuthenticationBackend'


@mock.patch('core.middleware.BackendClient')
class LoginViewTest(TestCase):

    @mock.patch('users.backends.BackendClient')
    def test_successful_login_stores_tokens(self, auth_client, middleware_client):
        auth_client.from_settings.return_value.sign_in.return_value = {
            'access_token': 'jwt-1',
            'refresh_token': 'refresh-1',
            'expires_in': 3600,
            'user': {'id': 'uuid-1', 'email': 'Ana@Example.com'},
        }

        response = self.client.post(reverse('users:login'), {
            'email': 'ana@example.com',
            'password': 'secret1',
        })

        self.assertRedirects(response, reverse('home:dashboard'), fetch_redirect_response=False)
        user = User.objects.get(username='ana@example.com')
        self.assertFalse(user.has_usable_password())
        self.assertEqual(self.client.session[SESSION_ACCESS_TOKEN], 'jwt-1')
        self.assertEqual(self.client.session[SESSION_REFRESH_TOKEN], 'refresh-1')

    @mock.patch('users.backends.BackendClient')
    def test_rejected_credentials(self, auth_client, middleware_client):
        auth_client.from_settings.return_value.sign_in.side_effect = AuthenticationError(
            'Invalid login credentials', status_code=400
        )

        response = self.client.post(reverse('users:login'), {
            'email': 'ana@example.com',
            'password': 'wrong',
        })

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'Invalid email or password.')
        self.assertFalse(User.objects.exists())

    @mock.patch('users.backends.BackendClient')
    def test_backend_down(self, auth_client, middleware_client):
        auth_client.from_settings.return_value.sign_in.side_effect = BackendUnavailableError(
            'Failed to connect to the backend. Please check your internet connection.'
        )

        response = self.client.post(reverse('users:login'), {
            'email': 'ana@example.com',
            'password': 'secret1',
        })

        self.assertContains(response, 'Failed to connect to the backend.')

    @mock.patch('users.backends.BackendClient')
    def test_next_must_be_local(self, auth_client, middleware_client):
        auth_client.from_settings.return_value.sign_in.return_value = {'access_token': 'jwt'}

        response = self.client.post(
            reverse('users:login') + '?next=https://evil.example/',
            {'email': 'ana@example.com', 'password': 'secret1'},
        )

        self.assertRedirects(response, reverse('home:dashboard'), fetch_redirect_response=False)


@mock.patch('core.middleware.BackendClient')
class SessionGuardTest(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='ana@example.com', email='ana@example.com')

    def test_anonymous_user_is_sent_to_login(self, middleware_client):
        response = self.client.get(reverse('taxids:taxid_list'))
        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse('users:login'), response['Location'])

    def test_missing_token_logs_out(self, middleware_client):
        self.client.force_login(self.user, backend=AUTH_BACKEND)

        response = self.client.get(reverse('taxids:taxid_list'))

        self.assertRedirects(response, reverse('users:login'), fetch_redirect_response=False)
        self.assertNotIn('_auth_user_id', self.client.session)

    def test_missing_token_on_poll_answers_401(self, middleware_client):
        self.client.force_login(self.user, backend=AUTH_BACKEND)

        response = self.client.get(
            reverse('home:dashboard_status'),
            HTTP_X_REQUESTED_WITH='XMLHttpRequest',
        )

        self.assertEqual(response.status_code, 401)

    @mock.patch('users.decorators.BackendClient')
    def test_expired_token_is_refreshed(self, refresh_client, middleware_client):
        self.client.force_login(self.user, backend=AUTH_BACKEND)
        session = self.client.session
        session[SESSION_ACCESS_TOKEN] = 'old'
        session[SESSION_REFRESH_TOKEN] = 'refresh-1'
        session[SESSION_EXPIRES_AT] = int(time.time()) - 60
        session.save()
        refresh_client.from_settings.return_value.refresh_session.return_value = {
            'access_token': 'new',
            'refresh_token': 'refresh-2',
            'expires_in': 3600,
        }
        refresh_client.for_session.return_value.rpc.return_value = []

        response = self.client.get(reverse('taxids:taxid_list'))

        self.assertEqual(response.status_code, 200)
        refresh_client.from_settings.return_value.refresh_session.assert_called_once_with('refresh-1')
        self.assertEqual(self.client.session[SESSION_ACCESS_TOKEN], 'new')
        refresh_client.for_session.return_value.rpc.assert_called_with('fetch_user_taxids')

    @mock.patch('users.decorators.BackendClient')
    def test_failed_refresh_logs_out(self, refresh_client, middleware_client):
        self.client.force_login(self.user, backend=AUTH_BACKEND)
        session = self.client.session
        session[SESSION_ACCESS_TOKEN] = 'old'
        session[SESSION_REFRESH_TOKEN] = 'refresh-1'
        session[SESSION_EXPIRES_AT] = int(time.time()) - 60
        session.save()
        refresh_client.from_settings.return_value.refresh_session.side_effect = AuthenticationError(
            'Invalid Refresh Token', status_code=400
        )

        response = self.client.get(reverse('taxids:taxid_list'))

        self.assertRedirects(response, reverse('users:login'), fetch_redirect_response=False)
        self.assertNotIn('_auth_user_id', self.client.session)


class AccountSettingsTest(BackendViewTestCase):

    def test_shows_current_values(self):
        self.set_rpc(fetch_user_name_institution=[{'user_name': 'Ana', 'user_institution': 'FIOCRUZ'}])

        response = self.client.get(reverse('users:settings'))

        self.assertContains(response, 'value="Ana"')
        self.assertContains(response, 'ana@example.com')

    def test_no_saved_row(self):
        self.set_rpc(fetch_user_name_institution=[])
        response = self.client.get(reverse('users:settings'))
        self.assertEqual(response.status_code, 200)

    def test_blank_fields_are_sent_as_null(self):
        self.set_rpc(edit_user_name_institution=None)

        response = self.client.post(reverse('users:settings'), {
            'user_name': '  Ana ',
            'user_institution': '   ',
        })

        self.assertRedirects(response, reverse('users:settings'), fetch_redirect_response=False)
        self.assertEqual(
            self.rpc_calls('edit_user_name_institution'),
            [{'p_user_name': 'Ana', 'p_user_institution': None}],
        )

    def test_logout_clears_tokens(self):
        response = self.client.post(reverse('users:logout'))

        self.assertRedirects(response, reverse('home:index'), fetch_redirect_response=False)
        self.backend.sign_out.assert_called_once_with()
        self.assertNotIn(SESSION_ACCESS_TOKEN, self.client.session)
