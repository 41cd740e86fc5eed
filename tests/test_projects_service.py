"""Project actions against a real (SQLite) database."""
import datetime
import uuid

import pytest
from sqlalchemy import text

from tracker.auth.errors import UnauthorizedError
from tracker.models.project import AbandonmentReason, ProjectStatus
from tracker.services import projects as actions
from tracker.services.results import (
    COMPLETE_PROJECT_ERROR,
    CREATE_PROJECT_ERROR,
    INVALID_STATUS,
    PROJECT_NOT_FOUND,
    VALIDATION_ERROR,
    ActionError,
    ActionSuccess,
)

UTC = datetime.timezone.utc


async def create(session, user_id, **overrides):
    payload = {"name": "Side quest", "startDate": "2024-01-01", **overrides}
    result = await actions.create_project(session, user_id, payload)
    assert isinstance(result, ActionSuccess), result
    return result.data


def assert_dates_match_status(project):
    if project.status is ProjectStatus.ACTIVE:
        assert project.end_date is None and project.abandoned_at is None
    elif project.status is ProjectStatus.COMPLETED:
        assert project.end_date is not None and project.abandoned_at is None
    else:
        assert project.abandoned_at is not None and project.end_date is None


@pytest.mark.asyncio
async def test_actions_require_a_user(db_session):
    with pytest.raises(UnauthorizedError):
        await actions.get_projects(db_session, None)
    with pytest.raises(UnauthorizedError):
        await actions.create_project(db_session, None, {"name": "X", "startDate": "2024-01-01"})


@pytest.mark.asyncio
async def test_create_applies_defaults(db_session, user):
    result = await actions.create_project(db_session, user.id, {"name": "X", "startDate": "2024-01-01"})

    assert isinstance(result, ActionSuccess)
    project = result.data
    assert project.status is ProjectStatus.ACTIVE
    assert project.is_public is False
    assert project.tags == []
    assert project.user_id == user.id
    assert project.start_date == datetime.datetime(2024, 1, 1, tzinfo=UTC)


@pytest.mark.asyncio
async def test_create_then_get_returns_normalized_input(db_session, user):
    created = await create(
        db_session,
        user.id,
        description="A tool",
        imageUrl="",
        repositoryUrl="https://github.com/ada/tool",
        isPublic=True,
        tags=["Python", "CLI", "Python"],
    )

    result = await actions.get_project(db_session, user.id, str(created.id))

    assert isinstance(result, ActionSuccess)
    fetched = result.data
    assert fetched.name == "Side quest"
    assert fetched.description == "A tool"
    assert fetched.image_url is None
    assert fetched.repository_url == "https://github.com/ada/tool"
    assert fetched.is_public is True
    assert [t.label for t in fetched.tags] == ["Python", "CLI"]


@pytest.mark.asyncio
async def test_create_as_completed_sets_end_date(db_session, user):
    completed = await create(db_session, user.id, status="COMPLETED")

    assert completed.status is ProjectStatus.COMPLETED
    assert_dates_match_status(completed)


@pytest.mark.asyncio
async def test_create_as_abandoned_is_rejected(db_session, user):
    result = await actions.create_project(
        db_session, user.id, {"name": "X", "startDate": "2024-01-01", "status": "ABANDONED"},
    )
    listing = await actions.get_projects(db_session, user.id)

    assert isinstance(result, ActionError)
    assert result.code == VALIDATION_ERROR
    assert result.error.startswith("status:")
    assert listing.data == []


@pytest.mark.asyncio
async def test_create_invalid_payload(db_session, user):
    result = await actions.create_project(db_session, user.id, {"name": ""})

    assert isinstance(result, ActionError)
    assert result.code == VALIDATION_ERROR


@pytest.mark.asyncio
async def test_other_users_project_is_not_found(db_session, user, other_user):
    created = await create(db_session, user.id)

    for result in (
        await actions.get_project(db_session, other_user.id, created.id),
        await actions.update_project(db_session, other_user.id, created.id, {"name": "Mine"}),
        await actions.complete_project(db_session, other_user.id, created.id),
        await actions.delete_project(db_session, other_user.id, created.id),
    ):
        assert isinstance(result, ActionError)
        assert result.code == PROJECT_NOT_FOUND

    still_there = await actions.get_project(db_session, user.id, created.id)
    assert isinstance(still_there, ActionSuccess)
    assert still_there.data.name == "Side quest"


@pytest.mark.asyncio
async def test_unknown_and_malformed_ids(db_session, user):
    missing = await actions.get_project(db_session, user.id, uuid.uuid4())
    malformed = await actions.get_project(db_session, user.id, "not-an-id")

    assert missing.code == PROJECT_NOT_FOUND
    assert malformed.code == VALIDATION_ERROR


@pytest.mark.asyncio
async def test_list_is_scoped_and_recently_updated_first(db_session, user, other_user):
    first = await create(db_session, user.id, name="First")
    await create(db_session, user.id, name="Second")
    await create(db_session, other_user.id, name="Someone else's")

    await actions.update_project(db_session, user.id, first.id, {"description": "touched"})
    result = await actions.get_projects(db_session, user.id)

    assert isinstance(result, ActionSuccess)
    assert [p.name for p in result.data] == ["First", "Second"]


@pytest.mark.asyncio
async def test_list_filters(db_session, user):
    await create(db_session, user.id, name="Rust game", tags=["Rust"])
    await create(db_session, user.id, name="Blog", description="Written in rust", tags=["Web"])
    done = await create(db_session, user.id, name="Zine", tags=["Print"])
    await actions.complete_project(db_session, user.id, done.id)

    by_search = await actions.get_projects(db_session, user.id, {"search": "RUST"})
    by_tag = await actions.get_projects(db_session, user.id, {"tag": "Web"})
    by_status = await actions.get_projects(db_session, user.id, {"status": "COMPLETED"})
    by_name = await actions.get_projects(db_session, user.id, {"sort": "name"})

    assert {p.name for p in by_search.data} == {"Rust game", "Blog"}
    assert [p.name for p in by_tag.data] == ["Blog"]
    assert [p.name for p in by_status.data] == ["Zine"]
    assert [p.name for p in by_name.data] == ["Blog", "Rust game", "Zine"]


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(db_session, user):
    await create(db_session, user.id, name="100% done")
    await create(db_session, user.id, name="1000 things")

    result = await actions.get_projects(db_session, user.id, {"search": "100%"})

    assert [p.name for p in result.data] == ["100% done"]


@pytest.mark.asyncio
async def test_update_applies_only_present_fields(db_session, user):
    created = await create(db_session, user.id, description="keep me", liveUrl="https://x.dev")

    result = await actions.update_project(db_session, user.id, created.id, {"name": "Renamed", "liveUrl": ""})

    assert isinstance(result, ActionSuccess)
    updated = result.data
    assert updated.name == "Renamed"
    assert updated.description == "keep me"
    assert updated.live_url is None
    assert updated.created_at == created.created_at
    assert updated.updated_at >= created.updated_at


@pytest.mark.asyncio
async def test_unchanged_update_keeps_tag_identities(db_session, user):
    created = await create(db_session, user.id, tags=["A", "B"])

    result = await actions.update_project(db_session, user.id, created.id, {"tags": ["A", "B"]})

    assert [t.id for t in result.data.tags] == [t.id for t in created.tags]
    assert result.data.created_at == created.created_at


@pytest.mark.asyncio
async def test_tag_replacement_is_not_a_union(db_session, user):
    created = await create(db_session, user.id)

    first = await actions.update_project(db_session, user.id, created.id, {"tags": ["A", "B"]})
    second = await actions.update_project(db_session, user.id, created.id, {"tags": []})
    fetched = await actions.get_project(db_session, user.id, created.id)

    assert [t.label for t in first.data.tags] == ["A", "B"]
    assert second.data.tags == []
    assert fetched.data.tags == []


@pytest.mark.asyncio
async def test_update_cannot_change_status(db_session, user):
    created = await create(db_session, user.id)

    result = await actions.update_project(db_session, user.id, created.id, {"status": "COMPLETED"})

    assert result.code == VALIDATION_ERROR


@pytest.mark.asyncio
async def test_end_date_editable_only_when_completed(db_session, user):
    created = await create(db_session, user.id)

    rejected = await actions.update_project(db_session, user.id, created.id, {"endDate": "2024-02-01"})
    await actions.complete_project(db_session, user.id, created.id)
    accepted = await actions.update_project(db_session, user.id, created.id, {"endDate": "2024-02-01"})

    assert rejected.code == INVALID_STATUS
    assert accepted.data.end_date == datetime.datetime(2024, 2, 1, tzinfo=UTC)


@pytest.mark.asyncio
async def test_abandon_then_complete_clears_abandonment(db_session, user):
    created = await create(db_session, user.id)

    abandoned = await actions.abandon_project(
        db_session,
        user.id,
        created.id,
        {"mainReason": "BURNOUT", "secondaryReasons": ["TIME"], "lessonsLearned": "Rest"},
    )
    assert abandoned.data.status is ProjectStatus.ABANDONED
    assert abandoned.data.abandonment.main_reason is AbandonmentReason.BURNOUT
    assert abandoned.data.abandonment.secondary_reasons == [AbandonmentReason.TIME]
    assert_dates_match_status(abandoned.data)

    completed = await actions.complete_project(db_session, user.id, created.id)
    fetched = await actions.get_project(db_session, user.id, created.id)

    assert completed.data.status is ProjectStatus.COMPLETED
    assert fetched.data.abandonment is None
    assert_dates_match_status(fetched.data)


@pytest.mark.asyncio
async def test_re_abandon_updates_single_record(db_session, user):
    created = await create(db_session, user.id)

    first = await actions.abandon_project(db_session, user.id, created.id, {"mainReason": "TIME"})
    second = await actions.abandon_project(db_session, user.id, created.id, {"mainReason": "SCOPE"})

    assert second.data.abandonment.id == first.data.abandonment.id
    assert second.data.abandonment.main_reason is AbandonmentReason.SCOPE


@pytest.mark.asyncio
async def test_abandon_requires_main_reason(db_session, user):
    created = await create(db_session, user.id)

    result = await actions.abandon_project(db_session, user.id, created.id, {})

    assert result.code == VALIDATION_ERROR


@pytest.mark.asyncio
async def test_abandon_completed_project_is_invalid(db_session, user):
    created = await create(db_session, user.id)
    await actions.complete_project(db_session, user.id, created.id)

    result = await actions.abandon_project(db_session, user.id, created.id, {"mainReason": "TIME"})
    fetched = await actions.get_project(db_session, user.id, created.id)

    assert result.code == INVALID_STATUS
    assert fetched.data.status is ProjectStatus.COMPLETED


@pytest.mark.asyncio
async def test_revive_from_active_is_invalid(db_session, user):
    created = await create(db_session, user.id)

    result = await actions.revive_project(db_session, user.id, created.id)

    assert isinstance(result, ActionError)
    assert result.code == INVALID_STATUS


@pytest.mark.asyncio
async def test_revive_keeps_history_and_abandonment(db_session, user):
    created = await create(db_session, user.id)
    await actions.abandon_project(db_session, user.id, created.id, {"mainReason": "MOTIVATION"})

    revived = await actions.revive_project(db_session, user.id, created.id, {"note": "Back at it"})

    assert revived.data.status is ProjectStatus.ACTIVE
    assert_dates_match_status(revived.data)
    assert [r.note for r in revived.data.revivals] == ["Back at it"]
    assert revived.data.abandonment.main_reason is AbandonmentReason.MOTIVATION


@pytest.mark.asyncio
async def test_complete_twice_is_invalid(db_session, user):
    created = await create(db_session, user.id)
    await actions.complete_project(db_session, user.id, created.id, {"endDate": "2024-06-30"})

    result = await actions.complete_project(db_session, user.id, created.id)

    assert result.code == INVALID_STATUS


@pytest.mark.asyncio
async def test_delete_removes_project_and_children(db_session, user):
    created = await create(db_session, user.id, tags=["A"])
    await actions.abandon_project(db_session, user.id, created.id, {"mainReason": "TIME"})

    deleted = await actions.delete_project(db_session, user.id, created.id)
    fetched = await actions.get_project(db_session, user.id, created.id)

    assert deleted.data.id == created.id
    assert fetched.code == PROJECT_NOT_FOUND


@pytest.mark.asyncio
async def test_persistence_failure_returns_create_error_and_rolls_back(db_session, user):
    # No users row for this id: the projects.user_id foreign key rejects the insert.
    result = await actions.create_project(
        db_session, uuid.uuid4(), {"name": "Orphan", "startDate": "2024-01-01"},
    )

    assert isinstance(result, ActionError)
    assert result.code == CREATE_PROJECT_ERROR
    assert "FOREIGN KEY" in result.error

    listing = await actions.get_projects(db_session, user.id)
    assert isinstance(listing, ActionSuccess)
    assert listing.data == []


@pytest.mark.asyncio
async def test_persistence_failure_during_transition_returns_complete_error(db_session, user):
    created = await create(db_session, user.id)
    await db_session.execute(text(
        "CREATE TRIGGER projects_frozen BEFORE UPDATE ON projects "
        "BEGIN SELECT RAISE(ABORT, 'projects are frozen'); END"
    ))
    await db_session.commit()

    result = await actions.complete_project(db_session, user.id, created.id)
    fetched = await actions.get_project(db_session, user.id, created.id)

    assert isinstance(result, ActionError)
    assert result.code == COMPLETE_PROJECT_ERROR
    assert "projects are frozen" in result.error
    assert fetched.data.status is ProjectStatus.ACTIVE
    assert fetched.data.end_date is None
