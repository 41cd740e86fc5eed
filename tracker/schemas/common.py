"""
Shared pydantic building blocks.

  • CamelModel — camelCase on the wire, snake_case in Python. Inputs are
    accepted in either spelling.
  • UtcDatetime — output timestamps always carry UTC, even when the
    backend returned a naive value.
  • InputDatetime — accepts a date ("2024-01-01") or a datetime;
    naive values are taken as UTC.
  • OptionalUrl — a valid absolute URL, or "" / null meaning "no URL".
  • optional_text(n) — free text up to n chars; blank means null.
"""

from __future__ import annotations

import datetime
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    StringConstraints,
    TypeAdapter,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from tracker.core.timeutils import as_utc

_URL_ADAPTER = TypeAdapter(AnyUrl)


class CamelModel(BaseModel):
    """Base for every schema exchanged with the presentation layer."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _coerce_input_datetime(value: Any) -> Any:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time.min)
    if isinstance(value, str) and len(value.strip()) == 10:
        # Date-only string, e.g. "2024-01-01" → midnight
        return datetime.datetime.combine(
            datetime.date.fromisoformat(value.strip()), datetime.time.min,
        )
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_url(value: str | None) -> str | None:
    if value is None:
        return None
    # Validate, but keep the caller's spelling (AnyUrl would append "/").
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        raise ValueError("must be a valid URL") from None
    return value


UtcDatetime = Annotated[datetime.datetime, AfterValidator(as_utc)]

InputDatetime = Annotated[
    datetime.datetime,
    BeforeValidator(_coerce_input_datetime),
    AfterValidator(as_utc),
]

OptionalUrl = Annotated[
    str | None,
    BeforeValidator(_blank_to_none),
    AfterValidator(_check_url),
]


def optional_text(max_length: int) -> Any:
    """Optional free text of at most `max_length` chars; blank means null."""
    return Annotated[
        Annotated[str, StringConstraints(max_length=max_length)] | None,
        BeforeValidator(_blank_to_none),
    ]
