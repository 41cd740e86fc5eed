"""
Input validation for project and account actions.

Each operation has one validation function that returns a tagged result
instead of raising:

    Valid(value)     — the normalized pydantic input
    Invalid(errors)  — a list of FieldError(field, message)

Actions turn Invalid into a VALIDATION_ERROR result whose message is the
first field error.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel, ValidationError

from tracker.schemas.account import ProfileUpdateInput
from tracker.schemas.project import (
    AbandonProjectInput,
    CompleteProjectInput,
    ProjectCreateInput,
    ProjectListQuery,
    ProjectUpdateInput,
    ReviveProjectInput,
)

V = TypeVar("V")
ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True, slots=True)
class Valid(Generic[V]):
    value: V


@dataclass(frozen=True, slots=True)
class Invalid:
    errors: tuple[FieldError, ...]

    @property
    def message(self) -> str:
        first = self.errors[0]
        return f"{first.field}: {first.message}" if first.field else first.message


Validated = Union[Valid[V], Invalid]


def _clean_message(message: str) -> str:
    # pydantic prefixes messages raised from custom validators
    return message.removeprefix("Value error, ")


def _field_name(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc)


def validate_model(schema: type[ModelT], payload: Mapping[str, Any] | None) -> Validated[ModelT]:
    """Validate `payload` against `schema`, collecting every field error."""
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        return Invalid((FieldError("body", "must be a JSON object"),))

    try:
        return Valid(schema.model_validate(dict(payload)))
    except ValidationError as exc:
        return Invalid(tuple(
            FieldError(_field_name(err["loc"]), _clean_message(err["msg"]))
            for err in exc.errors()
        ))


def validate_project_id(raw: Any) -> Validated[uuid.UUID]:
    if isinstance(raw, uuid.UUID):
        return Valid(raw)
    try:
        return Valid(uuid.UUID(str(raw)))
    except ValueError:
        return Invalid((FieldError("id", "Invalid project ID"),))


# ── One entry point per operation ───────────────────────────
def validate_create(payload: Mapping[str, Any] | None) -> Validated[ProjectCreateInput]:
    return validate_model(ProjectCreateInput, payload)


def validate_update(payload: Mapping[str, Any] | None) -> Validated[ProjectUpdateInput]:
    return validate_model(ProjectUpdateInput, payload)


def validate_complete(payload: Mapping[str, Any] | None) -> Validated[CompleteProjectInput]:
    return validate_model(CompleteProjectInput, payload)


def validate_abandon(payload: Mapping[str, Any] | None) -> Validated[AbandonProjectInput]:
    return validate_model(AbandonProjectInput, payload)


def validate_revive(payload: Mapping[str, Any] | None) -> Validated[ReviveProjectInput]:
    return validate_model(ReviveProjectInput, payload)


def validate_list_query(payload: Mapping[str, Any] | None) -> Validated[ProjectListQuery]:
    return validate_model(ProjectListQuery, payload)


def validate_profile(payload: Mapping[str, Any] | None) -> Validated[ProfileUpdateInput]:
    return validate_model(ProfileUpdateInput, payload)
