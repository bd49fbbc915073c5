"""
Central API error formatting.

Every exception escaping a DRF view ends up in
:func:`api_exception_handler`, which turns it into exactly one JSON
response.  The body shape depends on the deployment mode chosen at
start-up (``APP_CONFIG.env``): development responses include the error
name and the stack trace, production responses never do and replace the
message of unexpected errors with a generic one.
"""
from __future__ import annotations

import logging
import traceback
from typing import Any, Iterable

from django.conf import settings
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404, JsonResponse
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from medrecords.config import AppConfig

from .errors import AppError, FieldIssue

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = 'Something went wrong'
VALIDATION_MESSAGE = 'Invalid input data'


def flatten_validation_detail(detail: Any, prefix: str = '') -> list[FieldIssue]:
    """Flatten DRF's nested ``ValidationError.detail`` into dotted paths.

    ``{'images': [{'url': ['Enter a valid URL.']}]}`` becomes
    ``[FieldIssue('images.0.url', 'Enter a valid URL.')]``.
    """
    issues: list[FieldIssue] = []
    if isinstance(detail, dict):
        for key, value in detail.items():
            path = f'{prefix}.{key}' if prefix else str(key)
            if key == 'non_field_errors' and prefix == '':
                path = ''
            issues.extend(flatten_validation_detail(value, path))
    elif isinstance(detail, (list, tuple)):
        if all(not isinstance(item, (dict, list, tuple)) for item in detail):
            issues.extend(FieldIssue(prefix, str(item)) for item in detail)
        else:
            for index, item in enumerate(detail):
                if item in ({}, [], None):
                    continue
                path = f'{prefix}.{index}' if prefix else str(index)
                issues.extend(flatten_validation_detail(item, path))
    else:
        issues.append(FieldIssue(prefix, str(detail)))
    return issues


def _detail_message(detail: Any, fallback: str) -> str:
    if isinstance(detail, (list, tuple)) and detail:
        detail = detail[0]
    if isinstance(detail, dict):
        detail = detail.get('detail') or next(iter(detail.values()), None)
    text = str(detail) if detail is not None else ''
    return text or fallback


class ErrorResponseFormatter:
    """Render any exception as the API's JSON error envelope."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def normalize(self, exc: BaseException) -> AppError:
        if isinstance(exc, AppError):
            return exc
        if isinstance(exc, exceptions.ValidationError):
            return AppError(
                VALIDATION_MESSAGE,
                status.HTTP_400_BAD_REQUEST,
                flatten_validation_detail(exc.detail),
            )
        if isinstance(exc, exceptions.APIException):
            return AppError(_detail_message(exc.detail, exc.default_detail), exc.status_code)
        if isinstance(exc, Http404):
            return AppError('Resource not found', status.HTTP_404_NOT_FOUND)
        if isinstance(exc, DjangoPermissionDenied):
            return AppError('You do not have permission to perform this action', status.HTTP_403_FORBIDDEN)
        return AppError(str(exc) or 'Unknown error', status.HTTP_500_INTERNAL_SERVER_ERROR, is_operational=False)

    def body(self, error: AppError, original: BaseException) -> dict[str, Any]:
        if self.config.is_production and not error.is_operational:
            return {'success': False, 'status': 'error', 'message': GENERIC_MESSAGE}
        payload: dict[str, Any] = {
            'success': False,
            'status': error.category,
            'message': error.message,
        }
        if error.field_errors:
            payload['errors'] = [issue.as_dict() for issue in error.field_errors]
        if not self.config.is_production:
            payload['error'] = {
                'name': type(original).__name__,
                'isOperational': error.is_operational,
                'statusCode': error.status_code,
            }
            payload['stack'] = _format_stack(original)
        return payload

    def format(self, exc: BaseException, context: dict | None = None) -> Response:
        """Build the response for ``exc``.  Never raises."""
        try:
            error = self.normalize(exc)
            if not error.is_operational:
                logger.error('unhandled error: %s', exc, exc_info=exc)
            # DRF sets headers (WWW-Authenticate, Retry-After) and rolls back atomic requests.
            drf_response = drf_exception_handler(exc, context or {})
            response = Response(self.body(error, exc), status=error.status_code)
            if drf_response is not None:
                for header, value in drf_response.items():
                    if header.lower() in {'www-authenticate', 'retry-after', 'allow'}:
                        response[header] = value
            return response
        except Exception:
            logger.exception('error formatter failed while handling %r', exc)
            return Response(
                {'success': False, 'status': 'error', 'message': GENERIC_MESSAGE},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )


def _format_stack(exc: BaseException) -> list[str]:
    lines: Iterable[str] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return [line.rstrip('\n') for line in lines]


def api_exception_handler(exc, context):
    return ErrorResponseFormatter(settings.APP_CONFIG).format(exc, context)


# ---------------------------------------------------------------------
# Django-level fallbacks (requests that never reach a DRF view)
# ---------------------------------------------------------------------
def not_found_view(request, exception=None):
    return JsonResponse(
        {'success': False, 'status': 'fail', 'message': f'Route {request.path} not found'},
        status=404,
    )


def server_error_view(request):
    return JsonResponse({'success': False, 'status': 'error', 'message': GENERIC_MESSAGE}, status=500)
