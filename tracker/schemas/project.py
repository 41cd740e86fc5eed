"""
Pydantic v2 schemas for project actions.

Separation:
  • *Input models — what the CLIENT sends. extra="forbid" so unknown keys
    (e.g. a hand-crafted `status` on update) are rejected, not ignored.
  • *Read models  — what the SERVER returns: the hydrated aggregate.
"""

from __future__ import annotations

import uuid
from typing import Annotated, Literal

from pydantic import ConfigDict, Field, StringConstraints, field_validator, model_validator

from tracker.models.project import AbandonmentReason, ProjectStatus
from tracker.schemas.common import (
    CamelModel,
    InputDatetime,
    OptionalUrl,
    UtcDatetime,
    optional_text,
)

MAX_TAGS = 10

ProjectName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
TagLabel = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
Description = optional_text(2000)
Retrospective = optional_text(5000)
LessonsLearned = optional_text(2000)
RevivalNote = optional_text(1000)

_INPUT_CONFIG = ConfigDict(extra="forbid")


def _dedupe_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    seen: set[str] = set()
    unique: list[str] = []
    for label in tags:
        if label not in seen:
            seen.add(label)
            unique.append(label)
    return unique


# ── Inputs ──────────────────────────────────────────────────
class ProjectCreateInput(CamelModel):
    """Payload for creating a project."""

    model_config = _INPUT_CONFIG

    name: ProjectName
    description: Description = None
    image_url: OptionalUrl = None
    repository_url: OptionalUrl = None
    live_url: OptionalUrl = None
    start_date: InputDatetime
    status: ProjectStatus = ProjectStatus.ACTIVE
    is_public: bool = False
    tags: list[TagLabel] = Field(default_factory=list, max_length=MAX_TAGS)

    @field_validator("status")
    @classmethod
    def _not_created_abandoned(cls, value: ProjectStatus) -> ProjectStatus:
        if value is ProjectStatus.ABANDONED:
            raise ValueError("a project can only be abandoned with a main reason")
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags_as_empty(cls, value):  # type: ignore[no-untyped-def]
        return [] if value is None else value

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, value: list[str]) -> list[str]:
        return _dedupe_tags(value) or []


class ProjectUpdateInput(CamelModel):
    """
    Partial update. Only keys present in the payload are applied
    (see model_fields_set); `tags`, when present, replaces the whole set.

    status is not editable here — transitions own it.
    """

    model_config = _INPUT_CONFIG

    name: ProjectName | None = None
    description: Description = None
    image_url: OptionalUrl = None
    repository_url: OptionalUrl = None
    live_url: OptionalUrl = None
    start_date: InputDatetime | None = None
    end_date: InputDatetime | None = None
    is_public: bool | None = None
    tags: Annotated[list[TagLabel], Field(max_length=MAX_TAGS)] | None = None

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, value: list[str] | None) -> list[str] | None:
        return _dedupe_tags(value)

    @model_validator(mode="after")
    def _required_fields_not_null(self) -> ProjectUpdateInput:
        for field in ("name", "start_date", "is_public", "end_date"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        if "tags" in self.model_fields_set and self.tags is None:
            self.tags = []
        return self


class CompleteProjectInput(CamelModel):
    """Payload for marking a project completed."""

    model_config = _INPUT_CONFIG

    end_date: InputDatetime | None = None


class AbandonProjectInput(CamelModel):
    """Payload for abandoning a project with a retrospective."""

    model_config = _INPUT_CONFIG

    main_reason: AbandonmentReason
    secondary_reasons: list[AbandonmentReason] | None = None
    retrospective: Retrospective = None
    lessons_learned: LessonsLearned = None

    @model_validator(mode="after")
    def _secondary_excludes_main(self) -> AbandonProjectInput:
        if self.secondary_reasons is not None:
            unique = list(dict.fromkeys(self.secondary_reasons))
            self.secondary_reasons = [r for r in unique if r is not self.main_reason]
        return self


class ReviveProjectInput(CamelModel):
    """Payload for reviving a completed or abandoned project."""

    model_config = _INPUT_CONFIG

    note: RevivalNote = None


ProjectSort = Literal["updated", "newest", "oldest", "name", "name-desc"]


class ProjectListQuery(CamelModel):
    """Optional filters for the project list."""

    model_config = _INPUT_CONFIG

    search: Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)] | None = None
    tag: TagLabel | None = None
    status: ProjectStatus | None = None
    sort: ProjectSort = "updated"


# ── Reads ───────────────────────────────────────────────────
class ProjectTagRead(CamelModel):
    id: uuid.UUID
    label: str


class ProjectAbandonmentRead(CamelModel):
    id: uuid.UUID
    main_reason: AbandonmentReason
    secondary_reasons: list[AbandonmentReason] | None = None
    retrospective: str | None = None
    lessons_learned: str | None = None
    created_at: UtcDatetime


class ProjectRevivalRead(CamelModel):
    id: uuid.UUID
    revived_at: UtcDatetime
    note: str | None = None


class ProjectRead(CamelModel):
    """A project with its tags, abandonment record and revival history."""

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: str | None = None
    image_url: str | None = None
    repository_url: str | None = None
    live_url: str | None = None
    status: ProjectStatus
    start_date: UtcDatetime
    end_date: UtcDatetime | None = None
    abandoned_at: UtcDatetime | None = None
    is_public: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime
    tags: list[ProjectTagRead] = Field(default_factory=list)
    abandonment: ProjectAbandonmentRead | None = None
    revivals: list[ProjectRevivalRead] = Field(default_factory=list)


class DeletedProject(CamelModel):
    id: uuid.UUID
