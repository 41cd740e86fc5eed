"""
Pydantic v2 schemas for the account (profile / settings) actions.
"""

from __future__ import annotations

import uuid
from typing import Annotated

from pydantic import ConfigDict, StringConstraints, model_validator

from tracker.schemas.common import CamelModel, OptionalUrl, UtcDatetime, optional_text
from tracker.schemas.project import ProjectRead

Location = optional_text(100)


class ProfileUpdateInput(CamelModel):
    """Partial profile update; only keys present are applied."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)] | None = None
    location: Location = None
    website: OptionalUrl = None

    @model_validator(mode="after")
    def _name_not_null(self) -> ProfileUpdateInput:
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("name cannot be null")
        return self


class UserRead(CamelModel):
    id: uuid.UUID
    email: str
    name: str
    location: str | None = None
    website: str | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class DeletedProjects(CamelModel):
    deleted: int


class DeletedAccount(CamelModel):
    id: uuid.UUID


class UserDataExport(CamelModel):
    """Everything stored about a user, for download."""

    user: UserRead
    projects: list[ProjectRead]
    exported_at: UtcDatetime
