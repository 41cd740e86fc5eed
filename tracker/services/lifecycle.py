"""
Project status state machine.

    ACTIVE ──complete──▶ COMPLETED ──revive──▶ ACTIVE
      │                     ▲
    abandon              complete
      ▼                     │
    ABANDONED ──────────────┘
      │  ▲
      │  └─abandon (overwrites the abandonment record)
      └──revive──▶ ACTIVE

Edges not drawn (e.g. COMPLETED → ABANDONED, reviving an ACTIVE project)
are rejected with InvalidTransition; callers map it to INVALID_STATUS.

The functions mutate an already-loaded Project aggregate in memory; the
caller owns the transaction. Every edge keeps end_date / abandoned_at
consistent with the new status and bumps updated_at.
"""

from __future__ import annotations

import datetime
import enum

from tracker.models.project import (
    AbandonmentReason,
    Project,
    ProjectAbandonment,
    ProjectRevival,
    ProjectStatus,
)


class Transition(str, enum.Enum):
    COMPLETE = "complete"
    ABANDON = "abandon"
    REVIVE = "revive"


ALLOWED_SOURCES: dict[Transition, frozenset[ProjectStatus]] = {
    Transition.COMPLETE: frozenset({ProjectStatus.ACTIVE, ProjectStatus.ABANDONED}),
    Transition.ABANDON: frozenset({ProjectStatus.ACTIVE, ProjectStatus.ABANDONED}),
    Transition.REVIVE: frozenset({ProjectStatus.COMPLETED, ProjectStatus.ABANDONED}),
}

_REJECTION_MESSAGES: dict[Transition, str] = {
    Transition.COMPLETE: "Only an active or abandoned project can be completed",
    Transition.ABANDON: "A completed project must be revived before it can be abandoned",
    Transition.REVIVE: "Only an abandoned or completed project can be revived",
}


class InvalidTransition(Exception):
    """Raised when a transition is attempted from a status that forbids it."""

    def __init__(self, transition: Transition, status: ProjectStatus) -> None:
        self.transition = transition
        self.status = status
        super().__init__(_REJECTION_MESSAGES[transition])


def can_apply(transition: Transition, status: ProjectStatus) -> bool:
    return status in ALLOWED_SOURCES[transition]


def _ensure_allowed(transition: Transition, project: Project) -> None:
    if not can_apply(transition, project.status):
        raise InvalidTransition(transition, project.status)


def complete(
    project: Project,
    *,
    now: datetime.datetime,
    end_date: datetime.datetime | None = None,
) -> None:
    """ACTIVE/ABANDONED → COMPLETED. Drops any abandonment record."""
    _ensure_allowed(Transition.COMPLETE, project)

    project.status = ProjectStatus.COMPLETED
    project.end_date = end_date or now
    project.abandoned_at = None
    project.abandonment = None  # delete-orphan removes the row
    project.updated_at = now


def abandon(
    project: Project,
    *,
    now: datetime.datetime,
    main_reason: AbandonmentReason,
    secondary_reasons: list[AbandonmentReason] | None = None,
    retrospective: str | None = None,
    lessons_learned: str | None = None,
) -> None:
    """ACTIVE/ABANDONED → ABANDONED. Upserts the abandonment record."""
    _ensure_allowed(Transition.ABANDON, project)

    project.status = ProjectStatus.ABANDONED
    project.abandoned_at = now
    project.end_date = None
    project.updated_at = now

    secondary = [reason.value for reason in secondary_reasons] if secondary_reasons is not None else None

    record = project.abandonment
    if record is None:
        project.abandonment = ProjectAbandonment(
            main_reason=main_reason,
            secondary_reasons=secondary,
            retrospective=retrospective,
            lessons_learned=lessons_learned,
            created_at=now,
        )
    else:
        record.main_reason = main_reason
        record.secondary_reasons = secondary
        record.retrospective = retrospective
        record.lessons_learned = lessons_learned


def revive(
    project: Project,
    *,
    now: datetime.datetime,
    note: str | None = None,
) -> None:
    """COMPLETED/ABANDONED → ACTIVE. Appends a revival record."""
    _ensure_allowed(Transition.REVIVE, project)

    project.status = ProjectStatus.ACTIVE
    project.abandoned_at = None
    project.end_date = None
    project.updated_at = now
    project.revivals.append(ProjectRevival(revived_at=now, note=note))
