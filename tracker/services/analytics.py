"""
Deterministic project analytics.

Two actions:
  • get_project_stats     — counts per status via SQL GROUP BY.
  • get_project_analytics — loads the caller's whole project set (personal
    scale, no pagination) and hands it to compute_analytics().

compute_analytics() is a pure function of (projects, now): no I/O, no
clock reads, so every number is reproducible in tests.

ROUNDING:
  Percentages and day averages are rounded half up with Decimal
  (ROUND_HALF_UP), never with Python's banker's round().
"""

from __future__ import annotations

import datetime
import logging
import uuid
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from tracker.core.timeutils import as_utc, month_start, shift_month, utcnow
from tracker.models.project import Project, ProjectStatus
from tracker.repositories.projects import ProjectRepository
from tracker.schemas.analytics import (
    AbandonmentReasonStat,
    KeyMetrics,
    MonthlyActivity,
    ProjectAnalytics,
    ProjectStats,
    TagStat,
    TagSuccessRate,
)
from tracker.services.projects import require_user
from tracker.services.results import (
    GET_ANALYTICS_ERROR,
    GET_STATS_ERROR,
    ActionResult,
    error,
    success,
)

logger = logging.getLogger(__name__)

_MONTH_LABELS = (
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
)
TRAILING_MONTHS = 6
TOP_TAGS_LIMIT = 10
TAG_SUCCESS_LIMIT = 6
# A single project would always score 0% or 100%.
TAG_SUCCESS_MIN_PROJECTS = 2

_SECONDS_PER_DAY = Decimal(86400)


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> int:
    """part / whole as a whole-number percentage; 0 when whole is 0."""
    if whole == 0:
        return 0
    return round_half_up(Decimal(part) * 100 / Decimal(whole))


def _in_window(
    value: datetime.datetime | None,
    start: datetime.datetime,
    end: datetime.datetime,
) -> bool:
    return value is not None and start <= as_utc(value) < end


# ── Building blocks ─────────────────────────────────────────
def build_stats(counts: Mapping[ProjectStatus, int]) -> ProjectStats:
    active = counts.get(ProjectStatus.ACTIVE, 0)
    completed = counts.get(ProjectStatus.COMPLETED, 0)
    abandoned = counts.get(ProjectStatus.ABANDONED, 0)
    total = active + completed + abandoned
    return ProjectStats(
        total=total,
        active=active,
        completed=completed,
        abandoned=abandoned,
        completion_rate=percentage(completed, total),
    )


def monthly_activity(
    projects: Sequence[Project],
    now: datetime.datetime,
) -> list[MonthlyActivity]:
    """Created / completed / abandoned counts for the last 6 calendar months, oldest first."""
    months: list[MonthlyActivity] = []
    for offset in range(TRAILING_MONTHS - 1, -1, -1):
        year, month = shift_month(now.year, now.month, -offset)
        start = month_start(year, month)
        end = month_start(*shift_month(year, month, 1))

        months.append(MonthlyActivity(
            month=_MONTH_LABELS[month - 1],
            year=year,
            created=sum(1 for p in projects if _in_window(p.created_at, start, end)),
            completed=sum(1 for p in projects if _in_window(p.end_date, start, end)),
            abandoned=sum(1 for p in projects if _in_window(p.abandoned_at, start, end)),
        ))
    return months


def abandonment_reasons(projects: Iterable[Project]) -> list[AbandonmentReasonStat]:
    """Share of each main reason among projects carrying an abandonment record."""
    counts = Counter(p.abandonment.main_reason for p in projects if p.abandonment is not None)
    total = sum(counts.values())
    stats = [
        AbandonmentReasonStat(reason=reason, count=count, percentage=percentage(count, total))
        for reason, count in counts.items()
    ]
    return sorted(stats, key=lambda s: s.count, reverse=True)


def top_tags(projects: Iterable[Project]) -> list[TagStat]:
    counts = Counter(tag.label for p in projects for tag in p.tags)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [TagStat(name=name, count=count) for name, count in ranked[:TOP_TAGS_LIMIT]]


def tag_success_rates(projects: Iterable[Project]) -> list[TagSuccessRate]:
    totals: Counter[str] = Counter()
    completed: Counter[str] = Counter()
    for project in projects:
        for tag in project.tags:
            totals[tag.label] += 1
            if project.status is ProjectStatus.COMPLETED:
                completed[tag.label] += 1

    rates = [
        TagSuccessRate(
            name=label,
            total=total,
            completed=completed[label],
            rate=percentage(completed[label], total),
        )
        for label, total in totals.items()
        if total >= TAG_SUCCESS_MIN_PROJECTS
    ]
    rates.sort(key=lambda r: r.rate, reverse=True)
    return rates[:TAG_SUCCESS_LIMIT]


def key_metrics(projects: Sequence[Project], now: datetime.datetime) -> KeyMetrics:
    start_of_year = month_start(now.year, 1)

    started = sum(1 for p in projects if as_utc(p.created_at) >= start_of_year)
    finished = sum(
        1 for p in projects if p.end_date is not None and as_utc(p.end_date) >= start_of_year
    )

    revived = [p for p in projects if p.revivals]
    revived_then_completed = sum(1 for p in revived if p.status is ProjectStatus.COMPLETED)

    abandoned = [p for p in projects if p.abandoned_at is not None and p.start_date is not None]
    avg_days: int | None = None
    if abandoned:
        total_days = sum(
            (
                Decimal(str((as_utc(p.abandoned_at) - as_utc(p.start_date)).total_seconds()))
                / _SECONDS_PER_DAY
                for p in abandoned
            ),
            Decimal(0),
        )
        avg_days = round_half_up(total_days / len(abandoned))

    return KeyMetrics(
        projects_started_this_year=started,
        projects_completed_this_year=finished,
        revival_success_rate=percentage(revived_then_completed, len(revived)),
        avg_time_to_abandon_days=avg_days,
    )


def compute_analytics(
    projects: Sequence[Project],
    now: datetime.datetime,
) -> ProjectAnalytics:
    """Every aggregate of the analytics view, from hydrated projects."""
    now = as_utc(now)
    return ProjectAnalytics(
        stats=build_stats(Counter(p.status for p in projects)),
        monthly_activity=monthly_activity(projects, now),
        abandonment_reasons=abandonment_reasons(projects),
        top_tags=top_tags(projects),
        tag_success_rates=tag_success_rates(projects),
        key_metrics=key_metrics(projects, now),
    )


# ── Actions ─────────────────────────────────────────────────
async def get_project_stats(
    session: AsyncSession,
    user_id: uuid.UUID | None,
) -> ActionResult[ProjectStats]:
    owner = require_user(user_id)
    try:
        counts = await ProjectRepository(session).status_counts(owner)
        return success(build_stats(counts))
    except Exception as exc:
        logger.exception("Failed to compute project stats")
        return error(str(exc) or "Unable to load statistics", GET_STATS_ERROR)


async def get_project_analytics(
    session: AsyncSession,
    user_id: uuid.UUID | None,
    now: datetime.datetime | None = None,
) -> ActionResult[ProjectAnalytics]:
    owner = require_user(user_id)
    try:
        projects = await ProjectRepository(session).list_for_user(owner)
        return success(compute_analytics(projects, now or utcnow()))
    except Exception as exc:
        logger.exception("Failed to compute project analytics")
        return error(str(exc) or "Unable to load analytics", GET_ANALYTICS_ERROR)
