"""
Account actions — profile edits, bulk deletion and data export.

Same contract as the project actions: explicit user_id, tagged results,
rollback + per-operation code on unexpected failures.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.core.timeutils import utcnow
from tracker.models.user import User
from tracker.repositories.projects import ProjectRepository
from tracker.schemas.account import (
    DeletedAccount,
    DeletedProjects,
    UserDataExport,
    UserRead,
)
from tracker.schemas.project import ProjectRead
from tracker.services.projects import Payload, require_user
from tracker.services.results import (
    DELETE_ACCOUNT_ERROR,
    DELETE_PROJECTS_ERROR,
    EXPORT_DATA_ERROR,
    UPDATE_PROFILE_ERROR,
    USER_NOT_FOUND,
    VALIDATION_ERROR,
    ActionResult,
    error,
    success,
)
from tracker.services.validation import Invalid, validate_profile

logger = logging.getLogger(__name__)

_USER_NOT_FOUND_MESSAGE = "User not found"


async def update_profile(
    session: AsyncSession,
    user_id: uuid.UUID | None,
    payload: Payload,
) -> ActionResult[UserRead]:
    """Apply the profile fields present in `payload`."""
    owner = require_user(user_id)

    checked = validate_profile(payload)
    if isinstance(checked, Invalid):
        return error(checked.message, VALIDATION_ERROR)
    data = checked.value

    try:
        user = await session.get(User, owner)
        if user is None:
            return error(_USER_NOT_FOUND_MESSAGE, USER_NOT_FOUND)

        for field in data.model_fields_set:
            setattr(user, field, getattr(data, field))
        user.updated_at = utcnow()

        await session.commit()
        return success(UserRead.model_validate(user))
    except Exception as exc:
        await session.rollback()
        logger.exception("Failed to update profile for user %s", owner)
        return error(str(exc) or "Unable to update profile", UPDATE_PROFILE_ERROR)


async def delete_all_projects(
    session: AsyncSession,
    user_id: uuid.UUID | None,
) -> ActionResult[DeletedProjects]:
    owner = require_user(user_id)
    try:
        deleted = await ProjectRepository(session).delete_all_for_user(owner)
        await session.commit()
        logger.info("Deleted %d projects for user %s", deleted, owner)
        return success(DeletedProjects(deleted=deleted))
    except Exception as exc:
        await session.rollback()
        logger.exception("Failed to delete projects for user %s", owner)
        return error(str(exc) or "Unable to delete projects", DELETE_PROJECTS_ERROR)


async def delete_account(
    session: AsyncSession,
    user_id: uuid.UUID | None,
) -> ActionResult[DeletedAccount]:
    """
    Remove the user row. Sessions, projects and everything under the
    projects go with it through ON DELETE CASCADE.
    """
    owner = require_user(user_id)
    try:
        result = await session.execute(
            delete(User)
            .where(User.id == owner)
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            await session.rollback()
            return error(_USER_NOT_FOUND_MESSAGE, USER_NOT_FOUND)

        await session.commit()
        logger.info("Deleted account %s", owner)
        return success(DeletedAccount(id=owner))
    except Exception as exc:
        await session.rollback()
        logger.exception("Failed to delete account %s", owner)
        return error(str(exc) or "Unable to delete account", DELETE_ACCOUNT_ERROR)


async def export_user_data(
    session: AsyncSession,
    user_id: uuid.UUID | None,
) -> ActionResult[UserDataExport]:
    """The profile and every hydrated project, oldest first."""
    owner = require_user(user_id)
    try:
        user = await session.get(User, owner)
        if user is None:
            return error(_USER_NOT_FOUND_MESSAGE, USER_NOT_FOUND)

        projects = await ProjectRepository(session).list_for_user(owner, sort="oldest")
        return success(UserDataExport(
            user=UserRead.model_validate(user),
            projects=[ProjectRead.model_validate(p) for p in projects],
            exported_at=utcnow(),
        ))
    except Exception as exc:
        logger.exception("Failed to export data for user %s", owner)
        return error(str(exc) or "Unable to export data", EXPORT_DATA_ERROR)
