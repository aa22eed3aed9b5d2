"""
Request Timing Middleware
Logs the time taken for each HTTP request.
"""

import logging
import time

from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

SKIPPED_PREFIXES = ("/static/", "/admin/")


class RequestTimingMiddleware(MiddlewareMixin):
    """
    Middleware that logs request timing information.

    Output format:
    METHOD /path/ - XXX.XXms - STATUS
    """

    def process_request(self, request):
        """Store the start time when request begins."""
        request._start_time = time.monotonic()

    def process_response(self, request, response):
        """Calculate and log the request duration."""
        if not hasattr(request, "_start_time"):
            return response

        # Skip static files and admin requests for cleaner output
        if request.path.startswith(SKIPPED_PREFIXES):
            return response

        duration_ms = (time.monotonic() - request._start_time) * 1000
        if duration_ms < 100:
            duration_str = f"{duration_ms:6.2f}ms"
        else:
            duration_str = f"{duration_ms:6.1f}ms"

        status = response.status_code
        if status >= 500:
            log = logger.error
        elif status >= 400:
            log = logger.warning
        else:
            log = logger.info
        log(f"{request.method:4s} {request.path:40s} {duration_str} {status}")

        return response
