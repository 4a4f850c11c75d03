# core/middleware.py
from .backend import BackendClient


class BackendClientMiddleware:
    """
    Attach a backend client built from the current session to every request.

    Views read it as request.backend and hand it on explicitly.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.backend = BackendClient.for_session(request.session)
        return self.get_response(request)
