"""
Error Taxonomy

Every failure the booking and payment core can report maps to one of the
classes below. Each carries the HTTP status the API should answer with and a
short machine-readable code. Server-side faults (configuration, upstream,
storage) expose only a generic message to clients; the detail goes to logs.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class RestPodError(Exception):
    """Base class for errors raised by the domain services"""

    status_code = status.HTTP_400_BAD_REQUEST
    code = 'error'
    default_detail = 'Request could not be processed'
    expose_detail = True

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def public_detail(self) -> str:
        return self.detail if self.expose_detail else self.default_detail


class ValidationError(RestPodError):
    """Malformed or missing input; user-correctable"""

    code = 'validation_error'
    default_detail = 'Invalid input'


class NotFoundError(RestPodError):
    """Unknown booking or location"""

    status_code = status.HTTP_404_NOT_FOUND
    code = 'not_found'
    default_detail = 'Not found'


class ConflictError(RestPodError):
    """Slot unavailable, or booking already in a terminal state"""

    status_code = status.HTTP_409_CONFLICT
    code = 'conflict'
    default_detail = 'Booking cannot change state'


class VerificationError(RestPodError):
    """Payment signature mismatch. Never detailed to the client."""

    code = 'verification_failed'
    default_detail = 'Payment verification failed'
    expose_detail = False


class ConfigurationError(RestPodError):
    """Provider credentials missing on the server"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = 'configuration_error'
    default_detail = 'Payment system not configured'
    expose_detail = False


class UpstreamError(RestPodError):
    """Payment provider network or HTTP failure"""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = 'upstream_error'
    default_detail = 'Failed to create payment order'
    expose_detail = False


class StorageError(RestPodError):
    """Persistence failure"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = 'storage_error'
    default_detail = 'Failed to process booking'
    expose_detail = False


def api_exception_handler(exc, context):  # type: ignore
    """DRF exception handler rendering RestPodError as structured JSON."""

    if isinstance(exc, RestPodError):
        view = context.get('view')
        if exc.status_code >= 500:
            logger.error(
                f"{exc.__class__.__name__} in {view.__class__.__name__}: {exc.detail}"
            )
        return Response(
            {'error': exc.public_detail, 'code': exc.code},
            status=exc.status_code,
        )
    return exception_handler(exc, context)
