"""Repository returning fully hydrated Project aggregates."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tracker.models.project import Project, ProjectStatus, ProjectTag

# Every read returns the project with all of its relations loaded, so
# nothing downstream ever triggers an (unsupported) async lazy load.
_AGGREGATE_LOADS = (
    selectinload(Project.tags),
    selectinload(Project.abandonment),
    selectinload(Project.revivals),
)

_ORDERINGS = {
    "updated": (Project.updated_at.desc(), Project.created_at.desc()),
    "newest": (Project.created_at.desc(),),
    "oldest": (Project.created_at.asc(),),
    "name": (func.lower(Project.name).asc(),),
    "name-desc": (func.lower(Project.name).desc(),),
}


class ProjectRepository:
    """Data access for projects, always scoped to an owning user."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        *,
        search: str | None = None,
        tag: str | None = None,
        status: ProjectStatus | None = None,
        sort: str = "updated",
    ) -> list[Project]:
        stmt = (
            select(Project)
            .where(Project.user_id == user_id)
            .options(*_AGGREGATE_LOADS)
            .order_by(*_ORDERINGS[sort])
            .execution_options(populate_existing=True)
        )
        if search:
            stmt = stmt.where(
                Project.name.icontains(search, autoescape=True)
                | Project.description.icontains(search, autoescape=True)
            )
        if tag:
            stmt = stmt.where(Project.tags.any(ProjectTag.label == tag))
        if status is not None:
            stmt = stmt.where(Project.status == status)

        result = await self.session.scalars(stmt)
        return list(result.all())

    async def get_for_user(
        self, project_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[Project]:
        """The project if it exists AND belongs to user_id, else None."""
        result = await self.session.scalars(
            select(Project)
            .where(Project.id == project_id, Project.user_id == user_id)
            .options(*_AGGREGATE_LOADS)
            .execution_options(populate_existing=True)
        )
        return result.one_or_none()

    def add(self, project: Project) -> None:
        self.session.add(project)

    async def delete(self, project: Project) -> None:
        await self.session.delete(project)

    async def delete_all_for_user(self, user_id: uuid.UUID) -> int:
        # Children go with ON DELETE CASCADE.
        result = await self.session.execute(
            delete(Project)
            .where(Project.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)

    async def status_counts(self, user_id: uuid.UUID) -> dict[ProjectStatus, int]:
        result = await self.session.execute(
            select(Project.status, func.count())
            .where(Project.user_id == user_id)
            .group_by(Project.status)
        )
        return {status: int(count) for status, count in result.all()}
