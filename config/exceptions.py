"""
API exception handler.

Every error leaves the API as {"error": "<message>"}:
- django ValidationError and DRF validation/parse errors -> 400
- authentication failures -> 401, permission failures -> 403
- Http404 / get_object_or_404 -> 404
- anything else -> logged, 500 with a generic message
"""

import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _validation_message(exc):
    if hasattr(exc, 'message_dict'):
        return '; '.join(
            f'{field}: {" ".join(messages)}' if field != '__all__' else ' '.join(messages)
            for field, messages in exc.message_dict.items()
        )
    return ' '.join(exc.messages)


def _flatten_detail(detail):
    if isinstance(detail, dict):
        return '; '.join(f'{key}: {_flatten_detail(value)}' for key, value in detail.items())
    if isinstance(detail, (list, tuple)):
        return ' '.join(_flatten_detail(item) for item in detail)
    return str(detail)


def api_exception_handler(exc, context):
    if isinstance(exc, DjangoValidationError):
        return Response({'error': _validation_message(exc)}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, Http404):
        message = str(exc) or 'Not found'
        return Response({'error': message}, status=status.HTTP_404_NOT_FOUND)

    response = exception_handler(exc, context)
    if response is not None:
        detail = response.data.get('detail', response.data) if isinstance(response.data, dict) else response.data
        response.data = {'error': _flatten_detail(detail)}
        return response

    view = context.get('view')
    logger.exception(f'Unhandled error in {view.__class__.__name__ if view else "API"}: {exc}')

    body = {'error': 'Internal server error'}
    if settings.DEBUG:
        body['detail'] = repr(exc)
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
