import logging
import time

from django.conf import settings

logger = logging.getLogger('backend.requests')


class RequestLoggingMiddleware:
    """Logs method, path, status and duration of each request when DEBUG is on"""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not settings.DEBUG:
            return self.get_response(request)
        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info(f"{request.method} {request.get_full_path()} {response.status_code} {elapsed_ms:.0f}ms")
        return response
