"""
API error envelope.

Every error leaves the API as ``{"error": ...}``; validation failures add
``details`` and unhandled exceptions add ``message`` and ``timestamp``.
"""
import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import APIException, MethodNotAllowed, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class MissingFieldsError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Missing required fields'
    default_code = 'missing_fields'

    def __init__(self, fields):
        self.fields = list(fields)
        verb = 'is' if len(self.fields) == 1 else 'are'
        super().__init__(f"Missing required fields: {', '.join(self.fields)} {verb} required")


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    request = context.get('request')

    if response is None:
        logger.error(
            "Unhandled error on %s %s",
            getattr(request, 'method', '?'),
            getattr(request, 'path', '?'),
            exc_info=exc,
        )
        set_rollback()
        return Response({
            'error': 'Internal server error',
            'message': str(exc),
            'timestamp': timezone.now().isoformat(),
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, MethodNotAllowed):
        response.data = {'error': f"Method {getattr(request, 'method', '')} not allowed"}
    elif isinstance(exc, ValidationError):
        response.data = {'error': 'Validation failed', 'details': response.data}
    elif isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {'error': str(response.data['detail'])}
    return response
