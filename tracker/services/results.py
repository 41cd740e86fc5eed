"""
Typed results returned by every action.

An action never raises across its boundary (except UnauthorizedError):
expected failures and unexpected persistence errors alike come back as
an ActionError carrying a stable code. The HTTP layer serializes either
variant as

    {"success": true,  "data": ...}
    {"success": false, "error": "...", "code": "..."}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar, Union

from fastapi.encoders import jsonable_encoder

T = TypeVar("T")

# ── Error codes ─────────────────────────────────────────────
VALIDATION_ERROR = "VALIDATION_ERROR"
PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
USER_NOT_FOUND = "USER_NOT_FOUND"
INVALID_STATUS = "INVALID_STATUS"
UNAUTHORIZED = "UNAUTHORIZED"

# Per-operation fallbacks for unexpected failures
GET_PROJECTS_ERROR = "GET_PROJECTS_ERROR"
GET_PROJECT_ERROR = "GET_PROJECT_ERROR"
CREATE_PROJECT_ERROR = "CREATE_PROJECT_ERROR"
UPDATE_PROJECT_ERROR = "UPDATE_PROJECT_ERROR"
COMPLETE_PROJECT_ERROR = "COMPLETE_PROJECT_ERROR"
ABANDON_PROJECT_ERROR = "ABANDON_PROJECT_ERROR"
REVIVE_PROJECT_ERROR = "REVIVE_PROJECT_ERROR"
DELETE_PROJECT_ERROR = "DELETE_PROJECT_ERROR"
GET_STATS_ERROR = "GET_STATS_ERROR"
GET_ANALYTICS_ERROR = "GET_ANALYTICS_ERROR"
UPDATE_PROFILE_ERROR = "UPDATE_PROFILE_ERROR"
DELETE_PROJECTS_ERROR = "DELETE_PROJECTS_ERROR"
DELETE_ACCOUNT_ERROR = "DELETE_ACCOUNT_ERROR"
EXPORT_DATA_ERROR = "EXPORT_DATA_ERROR"


@dataclass(frozen=True, slots=True)
class ActionSuccess(Generic[T]):
    data: T
    success: Literal[True] = True

    def to_dict(self) -> dict[str, Any]:
        return {"success": True, "data": jsonable_encoder(self.data, by_alias=True)}


@dataclass(frozen=True, slots=True)
class ActionError:
    error: str
    code: str | None = None
    success: Literal[False] = False

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.error, "code": self.code}


ActionResult = Union[ActionSuccess[T], ActionError]


def success(data: T) -> ActionSuccess[T]:
    return ActionSuccess(data=data)


def error(message: str, code: str | None = None) -> ActionError:
    return ActionError(error=message, code=code)
