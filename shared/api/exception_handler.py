"""Error envelope for the REST API.

All failures leave the API as ``{"success": false, "message": ..., ...}``.
Domain errors carry their own status and context; DRF errors are wrapped
in the same envelope; anything unexpected becomes a 500 whose detail is
only exposed when DEBUG is on.
"""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.db import OperationalError  # type: ignore
from rest_framework import exceptions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.exceptions import DomainError, StoreUnavailable

logger = logging.getLogger(__name__)


def _drf_message(exc: exceptions.APIException, data) -> tuple[str, dict]:
    if isinstance(exc, exceptions.ValidationError):
        return "Validation failed.", {"errors": data}
    if isinstance(data, dict) and "detail" in data:
        extra = {key: value for key, value in data.items() if key != "detail"}
        return str(data["detail"]), extra
    return str(exc.detail), {}


def domain_exception_handler(exc, context):  # type: ignore
    if isinstance(exc, OperationalError):
        exc = StoreUnavailable()

    if isinstance(exc, DomainError):
        view = context.get("view")
        logger.info(
            f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'api'}: {exc.message}"
        )
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        message, extra = _drf_message(exc, response.data)
        response.data = {"success": False, "message": message, **extra}
        return response

    logger.error(f"Unhandled API error: {exc}", exc_info=exc)
    payload = {"success": False, "message": "Internal server error"}
    if settings.DEBUG:
        payload["error"] = str(exc)
    return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
