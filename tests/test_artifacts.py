from datetime import datetime, timezone

import pytest

from artifacts import (
    ACADEMIES,
    BUSINESS_IDEAS,
    ArtifactError,
    academy_artifact,
    business_artifact,
    dedupe_by_id,
    list_saved,
    remove_artifact,
    save_artifact,
    toggle_in_list,
    toggle_saved,
)
from auth import get_user_by_id, register_user

NOW = datetime(2026, 3, 1, 10, 30, tzinfo=timezone.utc)


def test_business_artifact_shape() -> None:
    artifact = business_artifact("deep-dive", "Cloud Kitchen", "<h2>Report</h2>", now=NOW)
    assert artifact == {
        "id": str(int(NOW.timestamp() * 1000)),
        "type": "deep-dive",
        "title": "Cloud Kitchen",
        "description": "Deep Dive Report",
        "data": "<h2>Report</h2>",
        "savedAt": NOW.isoformat(),
    }
    with pytest.raises(ValueError):
        business_artifact("pitch", "x", {})


def test_academy_artifact_uses_place_id() -> None:
    artifact = academy_artifact({"place_id": "abc", "name": "Ace Academy", "formatted_address": "MG Road", "sport": "Tennis"}, now=NOW)
    assert artifact["id"] == "abc"
    assert artifact["address"] == "MG Road"
    assert artifact["sport"] == "Tennis"


def test_dedupe_keeps_first_occurrence() -> None:
    items = [{"id": 1, "v": "a"}, {"id": "1", "v": "b"}, {"id": 2}]
    assert dedupe_by_id(items) == [{"id": 1, "v": "a"}, {"id": 2}]


def test_toggle_in_list_flips_membership() -> None:
    items, saved = toggle_in_list([], {"id": "x"})
    assert saved and items == [{"id": "x"}]
    items, saved = toggle_in_list(items, {"id": "x"})
    assert not saved and items == []


def test_toggle_saved_persists_on_user(db) -> None:
    user = register_user(db, "Sam", "sam@example.com", "secret1")
    academy = academy_artifact({"place_id": "p1", "name": "Ace"}, now=NOW)

    assert toggle_saved(db, user.id, ACADEMIES, academy) is True
    assert toggle_saved(db, str(user.id), ACADEMIES, academy) is False
    assert toggle_saved(db, user.id, ACADEMIES, academy) is True
    assert [a["id"] for a in list_saved(get_user_by_id(db, user.id), ACADEMIES)] == ["p1"]


def test_save_is_idempotent_and_remove_reports_change(db) -> None:
    user = register_user(db, "Ira", "ira@example.com", "secret1")
    idea = business_artifact("analysis", "Pet Cafe", {"ideaTitle": "Pet Cafe"}, now=NOW)

    save_artifact(db, user.id, BUSINESS_IDEAS, idea)
    assert len(save_artifact(db, user.id, BUSINESS_IDEAS, idea)) == 1

    assert remove_artifact(db, user.id, BUSINESS_IDEAS, idea["id"]) is True
    assert remove_artifact(db, user.id, BUSINESS_IDEAS, idea["id"]) is False
    assert list_saved(get_user_by_id(db, user.id), BUSINESS_IDEAS) == []


def test_unknown_user_or_field(db) -> None:
    with pytest.raises(ArtifactError):
        toggle_saved(db, "00000000-0000-0000-0000-000000000000", ACADEMIES, {"id": "x"})
    user = register_user(db, "Om", "om@example.com", "secret1")
    with pytest.raises(ValueError):
        save_artifact(db, user.id, "saved_videos", {"id": "x"})
