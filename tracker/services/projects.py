"""
Project actions — the domain boundary called by the HTTP layer.

Contract for every action:
  1. `user_id` is an explicit argument. None → UnauthorizedError, raised
     before storage is touched (the only exception that escapes).
  2. Input is validated into a normalized pydantic value, or the action
     returns VALIDATION_ERROR.
  3. Ownership is checked by loading the project scoped to the user;
     "doesn't exist" and "not yours" are both PROJECT_NOT_FOUND.
  4. Mutations commit once; on any unexpected failure the session is
     rolled back and the per-operation *_ERROR code is returned with the
     underlying message.
  5. Successful mutations return the freshly reloaded aggregate.

No read path caches anything: lists, stats and analytics are recomputed
from storage on every call, so a mutation is visible to the next read.
"""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tracker.auth.errors import UnauthorizedError
from tracker.core.timeutils import utcnow
from tracker.models.project import Project, ProjectStatus, ProjectTag
from tracker.repositories.projects import ProjectRepository
from tracker.schemas.project import DeletedProject, ProjectRead
from tracker.services import lifecycle
from tracker.services.results import (
    ABANDON_PROJECT_ERROR,
    COMPLETE_PROJECT_ERROR,
    CREATE_PROJECT_ERROR,
    DELETE_PROJECT_ERROR,
    GET_PROJECT_ERROR,
    GET_PROJECTS_ERROR,
    INVALID_STATUS,
    PROJECT_NOT_FOUND,
    REVIVE_PROJECT_ERROR,
    UPDATE_PROJECT_ERROR,
    VALIDATION_ERROR,
    ActionResult,
    error,
    success,
)
from tracker.services.validation import (
    Invalid,
    validate_abandon,
    validate_complete,
    validate_create,
    validate_list_query,
    validate_project_id,
    validate_revive,
    validate_update,
)

logger = logging.getLogger(__name__)

Payload = Mapping[str, Any] | None

_NOT_FOUND_MESSAGE = "Project not found"

# Plain columns copied from an update payload when present.
_UPDATABLE_COLUMNS = (
    "name",
    "description",
    "image_url",
    "repository_url",
    "live_url",
    "start_date",
    "end_date",
    "is_public",
)


def require_user(user_id: uuid.UUID | None) -> uuid.UUID:
    """Fail closed when the identity collaborator returned nothing."""
    if user_id is None:
        raise UnauthorizedError()
    return user_id


def _build_tags(labels: list[str]) -> list[ProjectTag]:
    return [ProjectTag(label=label, position=i) for i, label in enumerate(labels)]


def _replace_tags(project: Project, labels: list[str]) -> None:
    """Swap the tag set for `labels`, keeping rows whose label survives."""
    existing = {tag.label: tag for tag in project.tags}
    replacement: list[ProjectTag] = []
    for position, label in enumerate(labels):
        tag = existing.get(label) or ProjectTag(label=label)
        tag.position = position
        replacement.append(tag)
    project.tags = replacement


def _to_read(project: Project) -> ProjectRead:
    return ProjectRead.model_validate(project)


async def _failed(
    session: AsyncSession,
    exc: Exception,
    code: str,
    fallback: str,
) -> ActionResult[Any]:
    await session.rollback()
    logger.exception("%s: %s", code, fallback)
    return error(str(exc) or fallback, code)


# ── Reads ───────────────────────────────────────────────────
async def get_projects(
    session: AsyncSession,
    user_id: uuid.UUID | None,
    filters: Payload = None,
) -> ActionResult[list[ProjectRead]]:
    """All of the caller's projects, most recently updated first."""
    owner = require_user(user_id)

    checked = validate_list_query(filters)
    if isinstance(checked, Invalid):
        return error(checked.message, VALIDATION_ERROR)
    query = checked.value

    try:
        projects = await ProjectRepository(session).list_for_user(
            owner,
            search=query.search or None,
            tag=query.tag,
            status=query.status,
            sort=query.sort,
        )
        return success([_to_read(p) for p in projects])
    except Exception as exc:
        return await _failed(session, exc, GET_PROJECTS_ERROR, "Unable to load projects")


async def get_project(
    session: AsyncSession,
    user_id: uuid.UUID | None,
    project_id: Any,
) -> ActionResult[ProjectRead]:
    owner = require_user(user_id)

    checked_id = validate_project_id(project_id)
    if isinstance(checked_id, Invalid):
        return error(checked_id.message, VALIDATION_ERROR)

    try:
        project = await ProjectRepository(session).get_for_user(checked_id.value, owner)
        if project is None:
            return error(_NOT_FOUND_MESSAGE, PROJECT_NOT_FOUND)
        return success(_to_read(project))
    except Exception as exc:
        return await _failed(session, exc, GET_PROJECT_ERROR, "Unable to load project")


# ── Create / update / delete ────────────────────────────────
async def create_project(
    session: AsyncSession,
    user_id: uuid.UUID | None,
    payload: Payload,
) -> ActionResult[ProjectRead]:
    """
    Insert a project and its tags, then return the hydrated aggregate.

    A project created as COMPLETED gets end_date = now. ABANDONED is
    rejected at validation: only the abandon transition records a reason.
    """
    owner = require_user(user_id)

    checked = validate_create(payload)
    if isinstance(checked, Invalid):
        return error(checked.message, VALIDATION_ERROR)
    data = checked.value

    repo = ProjectRepository(session)
    try:
        now = utcnow()
        project = Project(
            id=uuid.uuid4(),
            user_id=owner,
            name=data.name,
            description=data.description,
            image_url=data.image_url,
            repository_url=data.repository_url,
            live_url=data.live_url,
            status=data.status,
            start_date=data.start_date,
            end_date=now if data.status is ProjectStatus.COMPLETED else None,
            abandoned_at=None,
            is_public=data.is_public,
            created_at=now,
            updated_at=now,
        )
        project.tags = _build_tags(data.tags)
        repo.add(project)
        await session.commit()

        created = await repo.get_for_user(project.id, owner)
        logger.info("Created project %s for user %s", project.id, owner)
        return success(_to_read(created))
    except Exception as exc:
        return await _failed(session, exc, CREATE_PROJECT_ERROR, "Unable to create project")


async def update_project(
    session: AsyncSession,
    user_id: uuid.UUID | None,
    project_id: Any,
    payload: Payload,
) -> ActionResult[ProjectRead]:
    """
    Apply only the fields present in `payload`.

    `tags`, when present (even as []), replaces the entire tag set.
    `end_date` may only be edited on a COMPLETED project.
    """
    owner = require_user(user_id)

    checked_id = validate_project_id(project_id)
    if isinstance(checked_id, Invalid):
        return error(checked_id.message, VALIDATION_ERROR)
    checked = validate_update(payload)
    if isinstance(checked, Invalid):
        return error(checked.message, VALIDATION_ERROR)
    data = checked.value
    provided = data.model_fields_set

    repo = ProjectRepository(session)
    try:
        project = await repo.get_for_user(checked_id.value, owner)
        if project is None:
            return error(_NOT_FOUND_MESSAGE, PROJECT_NOT_FOUND)

        if "end_date" in provided and project.status is not ProjectStatus.COMPLETED:
            return error("Only a completed project has an end date", INVALID_STATUS)

        for column in _UPDATABLE_COLUMNS:
            if column in provided:
                setattr(project, column, getattr(data, column))
        if "tags" in provided:
            _replace_tags(project, data.tags or [])
        project.updated_at = utcnow()

        await session.commit()
        updated = await repo.get_for_user(project.id, owner)
        return success(_to_read(updated))
    except Exception as exc:
        return await _failed(session, exc, UPDATE_PROJECT_ERROR, "Unable to update project")


async def delete_project(
    session: AsyncSession,
    user_id: uuid.UUID | None,
    project_id: Any,
) -> ActionResult[DeletedProject]:
    """Delete a project; tags, abandonment and revivals go with it."""
    owner = require_user(user_id)

    checked_id = validate_project_id(project_id)
    if isinstance(checked_id, Invalid):
        return error(checked_id.message, VALIDATION_ERROR)

    repo = ProjectRepository(session)
    try:
        project = await repo.get_for_user(checked_id.value, owner)
        if project is None:
            return error(_NOT_FOUND_MESSAGE, PROJECT_NOT_FOUND)

        await repo.delete(project)
        await session.commit()
        logger.info("Deleted project %s for user %s", checked_id.value, owner)
        return success(DeletedProject(id=checked_id.value))
    except Exception as exc:
        return await _failed(session, exc, DELETE_PROJECT_ERROR, "Unable to delete project")


# ── Status transitions ──────────────────────────────────────
async def _transition(
    session: AsyncSession,
    owner: uuid.UUID,
    project_id: uuid.UUID,
    apply: Callable[[Project, datetime.datetime], None],
    failure_code: str,
    failure_message: str,
) -> ActionResult[ProjectRead]:
    """Load → check ownership → mutate via lifecycle → commit → reload."""
    repo = ProjectRepository(session)
    try:
        project = await repo.get_for_user(project_id, owner)
        if project is None:
            return error(_NOT_FOUND_MESSAGE, PROJECT_NOT_FOUND)

        previous = project.status
        try:
            apply(project, utcnow())
        except lifecycle.InvalidTransition as exc:
            await session.rollback()
            return error(str(exc), INVALID_STATUS)

        await session.commit()
        logger.info(
            "Project %s: %s → %s", project_id, previous.value, project.status.value,
        )
        reloaded = await repo.get_for_user(project_id, owner)
        return success(_to_read(reloaded))
    except Exception as exc:
        return await _failed(session, exc, failure_code, failure_message)


async def complete_project(
    session: AsyncSession,
    user_id: uuid.UUID | None,
    project_id: Any,
    payload: Payload = None,
) -> ActionResult[ProjectRead]:
    """Mark a project completed; end_date defaults to now."""
    owner = require_user(user_id)

    checked_id = validate_project_id(project_id)
    if isinstance(checked_id, Invalid):
        return error(checked_id.message, VALIDATION_ERROR)
    checked = validate_complete(payload)
    if isinstance(checked, Invalid):
        return error(checked.message, VALIDATION_ERROR)
    data = checked.value

    return await _transition(
        session,
        owner,
        checked_id.value,
        lambda project, now: lifecycle.complete(project, now=now, end_date=data.end_date),
        COMPLETE_PROJECT_ERROR,
        "Unable to mark the project as completed",
    )


async def abandon_project(
    session: AsyncSession,
    user_id: uuid.UUID | None,
    project_id: Any,
    payload: Payload,
) -> ActionResult[ProjectRead]:
    """Abandon a project, recording why (main reason is mandatory)."""
    owner = require_user(user_id)

    checked_id = validate_project_id(project_id)
    if isinstance(checked_id, Invalid):
        return error(checked_id.message, VALIDATION_ERROR)
    checked = validate_abandon(payload)
    if isinstance(checked, Invalid):
        return error(checked.message, VALIDATION_ERROR)
    data = checked.value

    return await _transition(
        session,
        owner,
        checked_id.value,
        lambda project, now: lifecycle.abandon(
            project,
            now=now,
            main_reason=data.main_reason,
            secondary_reasons=data.secondary_reasons,
            retrospective=data.retrospective,
            lessons_learned=data.lessons_learned,
        ),
        ABANDON_PROJECT_ERROR,
        "Unable to abandon the project",
    )


async def revive_project(
    session: AsyncSession,
    user_id: uuid.UUID | None,
    project_id: Any,
    payload: Payload = None,
) -> ActionResult[ProjectRead]:
    """Bring a completed or abandoned project back to ACTIVE."""
    owner = require_user(user_id)

    checked_id = validate_project_id(project_id)
    if isinstance(checked_id, Invalid):
        return error(checked_id.message, VALIDATION_ERROR)
    checked = validate_revive(payload)
    if isinstance(checked, Invalid):
        return error(checked.message, VALIDATION_ERROR)
    data = checked.value

    return await _transition(
        session,
        owner,
        checked_id.value,
        lambda project, now: lifecycle.revive(project, now=now, note=data.note),
        REVIVE_PROJECT_ERROR,
        "Unable to revive the project",
    )
