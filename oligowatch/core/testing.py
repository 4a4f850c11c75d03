# core/testing.py
"""
Test helpers: a logged-in test client whose backend calls never leave the
process.
"""

import time
from unittest import mock

from django.contrib.auth.models import User
from django.contrib.messages import get_messages
from django.test import TestCase

from .backend import SESSION_ACCESS_TOKEN, SESSION_EXPIRES_AT, SESSION_REFRESH_TOKEN


class BackendViewTestCase(TestCase):
    """
    TestCase with a logged-in user and a mocked request.backend.

    Answers to remote procedures are registered with set_rpc(); calling a
    procedure that was not registered fails the test.
    """

    def setUp(self):
        patcher = mock.patch('core.middleware.BackendClient')
        self.backend_class = patcher.start()
        self.addCleanup(patcher.stop)

        self.backend = self.backend_class.for_session.return_value
        self.backend.is_authenticated = True
        self.backend.select.return_value = []
        self.rpc_answers = {}
        self.backend.rpc.side_effect = self._answer_rpc

        self.user = User.objects.create_user(username='ana@example.com', email='ana@example.com')
        self.client.force_login(self.user, backend='users.backends.BackendAuthenticationBackend')
        session = self.client.session
        session[SESSION_ACCESS_TOKEN] = 'access-token'
        session[SESSION_REFRESH_TOKEN] = 'refresh-token'
        session[SESSION_EXPIRES_AT] = int(time.time()) + 3600
        session.save()

    def _answer_rpc(self, function, params=None):
        if function not in self.rpc_answers:
            raise AssertionError(f'Unexpected backend call: {function}({params})')
        answer = self.rpc_answers[function]
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(params)
        return answer

    def set_rpc(self, **answers):
        """Register answers: a value, an exception to raise, or a callable taking the params."""
        self.rpc_answers.update(answers)

    def rpc_calls(self, function):
        """Params of every call made to a procedure, in call order."""
        return [
            call.args[1] if len(call.args) > 1 else call.kwargs.get('params')
            for call in self.backend.rpc.call_args_list
            if call.args[0] == function
        ]

    def messages_of(self, response):
        return [str(message) for message in get_messages(response.wsgi_request)]
