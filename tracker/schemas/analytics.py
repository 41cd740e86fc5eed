"""
Pydantic v2 response schemas for project statistics and analytics.

All percentages are whole numbers (0–100), rounded half up.
"""

from __future__ import annotations

from tracker.models.project import AbandonmentReason
from tracker.schemas.common import CamelModel


class ProjectStats(CamelModel):
    """Counts per status plus the completion rate."""

    total: int
    active: int
    completed: int
    abandoned: int
    completion_rate: int


class MonthlyActivity(CamelModel):
    """One calendar month of the trailing activity window."""

    month: str
    year: int
    created: int
    completed: int
    abandoned: int


class AbandonmentReasonStat(CamelModel):
    reason: AbandonmentReason
    count: int
    percentage: int


class TagStat(CamelModel):
    name: str
    count: int


class TagSuccessRate(CamelModel):
    """Completion rate for a tag used on at least two projects."""

    name: str
    total: int
    completed: int
    rate: int


class KeyMetrics(CamelModel):
    projects_started_this_year: int
    projects_completed_this_year: int
    revival_success_rate: int
    avg_time_to_abandon_days: int | None = None


class ProjectAnalytics(CamelModel):
    """Everything the analytics view renders."""

    stats: ProjectStats
    monthly_activity: list[MonthlyActivity]
    abandonment_reasons: list[AbandonmentReasonStat]
    top_tags: list[TagStat]
    tag_success_rates: list[TagSuccessRate]
    key_metrics: KeyMetrics
