"""Validation layer: normalized values in, field errors out, never exceptions."""
import datetime
import uuid

import pytest

from tracker.models.project import AbandonmentReason, ProjectStatus
from tracker.services.validation import (
    Invalid,
    Valid,
    validate_abandon,
    validate_create,
    validate_list_query,
    validate_profile,
    validate_project_id,
    validate_revive,
    validate_update,
)

UTC = datetime.timezone.utc


def test_create_applies_defaults():
    result = validate_create({"name": "X", "startDate": "2024-01-01"})

    assert isinstance(result, Valid)
    data = result.value
    assert data.status is ProjectStatus.ACTIVE
    assert data.is_public is False
    assert data.tags == []
    assert data.start_date == datetime.datetime(2024, 1, 1, tzinfo=UTC)


def test_create_strips_name_and_normalizes_blank_urls():
    result = validate_create({
        "name": "  Side quest  ",
        "startDate": "2024-03-05T10:30:00Z",
        "imageUrl": "",
        "repositoryUrl": "https://github.com/ada/side-quest",
        "liveUrl": "   ",
        "description": "",
    })

    assert isinstance(result, Valid)
    data = result.value
    assert data.name == "Side quest"
    assert data.image_url is None
    assert data.live_url is None
    assert data.repository_url == "https://github.com/ada/side-quest"
    assert data.description is None


def test_create_accepts_snake_case_keys():
    result = validate_create({"name": "X", "start_date": "2024-01-01", "is_public": True})

    assert isinstance(result, Valid)
    assert result.value.is_public is True


@pytest.mark.parametrize(
    ("payload", "field"),
    [
        ({"startDate": "2024-01-01"}, "name"),
        ({"name": "   ", "startDate": "2024-01-01"}, "name"),
        ({"name": "x" * 101, "startDate": "2024-01-01"}, "name"),
        ({"name": "X"}, "startDate"),
        ({"name": "X", "startDate": "not a date"}, "startDate"),
        ({"name": "X", "startDate": "2024-01-01", "liveUrl": "not a url"}, "liveUrl"),
        ({"name": "X", "startDate": "2024-01-01", "description": "d" * 2001}, "description"),
        ({"name": "X", "startDate": "2024-01-01", "tags": ["t" * 51]}, "tags.0"),
        ({"name": "X", "startDate": "2024-01-01", "tags": [""]}, "tags.0"),
    ],
)
def test_create_rejects_constraint_violations(payload, field):
    result = validate_create(payload)

    assert isinstance(result, Invalid)
    assert result.errors[0].field == field
    assert result.message.startswith(f"{field}: ")


def test_create_rejects_more_than_ten_tags():
    tags = [f"tag-{i}" for i in range(11)]

    result = validate_create({"name": "X", "startDate": "2024-01-01", "tags": tags})

    assert isinstance(result, Invalid)
    assert result.errors[0].field == "tags"


def test_create_deduplicates_tags_in_order():
    result = validate_create({
        "name": "X",
        "startDate": "2024-01-01",
        "tags": ["React", " Python ", "React"],
    })

    assert isinstance(result, Valid)
    assert result.value.tags == ["React", "Python"]


def test_create_rejects_unknown_keys():
    result = validate_create({"name": "X", "startDate": "2024-01-01", "owner": "someone"})

    assert isinstance(result, Invalid)
    assert result.errors[0].field == "owner"


def test_non_object_payload_is_invalid():
    result = validate_create(["name", "X"])  # type: ignore[arg-type]

    assert isinstance(result, Invalid)
    assert result.message == "body: must be a JSON object"


def test_update_tracks_only_provided_fields():
    result = validate_update({"description": "new"})

    assert isinstance(result, Valid)
    assert result.value.model_fields_set == {"description"}


def test_update_rejects_status():
    result = validate_update({"status": "COMPLETED"})

    assert isinstance(result, Invalid)
    assert result.errors[0].field == "status"


def test_update_rejects_null_name():
    result = validate_update({"name": None})

    assert isinstance(result, Invalid)
    assert "name cannot be null" in result.message


def test_update_null_tags_means_clear():
    result = validate_update({"tags": None})

    assert isinstance(result, Valid)
    assert result.value.tags == []
    assert "tags" in result.value.model_fields_set


def test_abandon_requires_main_reason():
    result = validate_abandon({"retrospective": "ran out of steam"})

    assert isinstance(result, Invalid)
    assert result.errors[0].field == "mainReason"


def test_abandon_rejects_unknown_reason():
    result = validate_abandon({"mainReason": "BORED"})

    assert isinstance(result, Invalid)
    assert result.errors[0].field == "mainReason"


def test_abandon_normalizes_secondary_reasons():
    result = validate_abandon({
        "mainReason": "BURNOUT",
        "secondaryReasons": ["TIME", "BURNOUT", "TIME", "SCOPE"],
    })

    assert isinstance(result, Valid)
    assert result.value.main_reason is AbandonmentReason.BURNOUT
    assert result.value.secondary_reasons == [AbandonmentReason.TIME, AbandonmentReason.SCOPE]


def test_abandon_limits_retrospective_length():
    result = validate_abandon({"mainReason": "TIME", "retrospective": "r" * 5001})

    assert isinstance(result, Invalid)
    assert result.errors[0].field == "retrospective"


def test_revive_accepts_missing_body():
    result = validate_revive(None)

    assert isinstance(result, Valid)
    assert result.value.note is None


def test_revive_limits_note_length():
    assert isinstance(validate_revive({"note": "n" * 1001}), Invalid)


def test_list_query_rejects_unknown_sort():
    result = validate_list_query({"sort": "random"})

    assert isinstance(result, Invalid)
    assert result.errors[0].field == "sort"


def test_list_query_defaults_to_updated():
    result = validate_list_query({})

    assert isinstance(result, Valid)
    assert result.value.sort == "updated"
    assert result.value.status is None


def test_project_id_must_be_a_uuid():
    project_id = uuid.uuid4()

    assert validate_project_id(str(project_id)) == Valid(project_id)
    invalid = validate_project_id("42")
    assert isinstance(invalid, Invalid)
    assert invalid.message == "id: Invalid project ID"


def test_profile_website_must_be_url():
    assert isinstance(validate_profile({"website": "nope"}), Invalid)
    valid = validate_profile({"website": "", "location": "Lisbon"})
    assert isinstance(valid, Valid)
    assert valid.value.website is None
    assert valid.value.location == "Lisbon"


def test_create_rejects_abandoned_initial_status():
    result = validate_create({"name": "X", "startDate": "2024-01-01", "status": "ABANDONED"})

    assert isinstance(result, Invalid)
    assert result.message == "status: a project can only be abandoned with a main reason"


def test_create_accepts_completed_initial_status():
    result = validate_create({"name": "X", "startDate": "2024-01-01", "status": "COMPLETED"})

    assert isinstance(result, Valid)
    assert result.value.status is ProjectStatus.COMPLETED
