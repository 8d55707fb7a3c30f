"""REST framework exception handler with database error mapping"""
import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

UNIQUE_MARKERS = ('unique', 'duplicate key')
FOREIGN_KEY_MARKERS = ('foreign key',)


class BusinessRuleError(Exception):
    """A request that breaks a business rule; rendered as a 400 (or given status)"""

    def __init__(self, message, status_code=status.HTTP_400_BAD_REQUEST, error='Error', extra=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error = error
        self.extra = extra or {}


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, BusinessRuleError):
        payload = {'error': exc.error, 'message': exc.message}
        payload.update(exc.extra)
        return Response(payload, status=exc.status_code)

    if isinstance(exc, IntegrityError):
        text = str(exc).lower()
        if any(marker in text for marker in UNIQUE_MARKERS):
            return Response(
                {'error': 'Error', 'message': 'A record with this value already exists'},
                status=status.HTTP_409_CONFLICT,
            )
        if any(marker in text for marker in FOREIGN_KEY_MARKERS):
            return Response(
                {'error': 'Error', 'message': 'Referenced record does not exist'},
                status=status.HTTP_400_BAD_REQUEST,
            )

    if isinstance(exc, DjangoValidationError):
        messages = exc.message_dict if hasattr(exc, 'error_dict') else exc.messages
        return Response({'error': 'Error', 'message': messages}, status=status.HTTP_400_BAD_REQUEST)

    view = context.get('view')
    logger.error(f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}", exc_info=True)
    return Response(
        {
            'error': 'Internal Server Error',
            'message': str(exc) if settings.DEBUG else 'An unexpected error occurred',
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
