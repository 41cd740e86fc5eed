"""
Action result → HTTP response.

The body is always the result envelope; only the status code varies:

    success            → 200 (or the route's success status, e.g. 201)
    VALIDATION_ERROR   → 422
    *_NOT_FOUND        → 404
    INVALID_STATUS     → 409
    anything else      → 500
"""

from typing import Any, Mapping

from fastapi import status
from fastapi.responses import JSONResponse

from tracker.services.results import (
    INVALID_STATUS,
    PROJECT_NOT_FOUND,
    USER_NOT_FOUND,
    VALIDATION_ERROR,
    ActionError,
    ActionResult,
)

_ERROR_STATUS = {
    VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    PROJECT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    INVALID_STATUS: status.HTTP_409_CONFLICT,
}

NO_STORE = {"Cache-Control": "no-store"}


def http_status_for(result: ActionResult[Any], success_status: int = status.HTTP_200_OK) -> int:
    if isinstance(result, ActionError):
        return _ERROR_STATUS.get(result.code or "", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return success_status


def to_response(
    result: ActionResult[Any],
    *,
    success_status: int = status.HTTP_200_OK,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=http_status_for(result, success_status),
        content=result.to_dict(),
        headers=dict(headers) if headers else None,
    )
