from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from models import User

logger = logging.getLogger(__name__)

ACADEMIES = "saved_academies"
BUSINESS_IDEAS = "saved_business_ideas"
SAVED_FIELDS = (ACADEMIES, BUSINESS_IDEAS)

BUSINESS_DESCRIPTIONS = {"analysis": "Business Analysis", "deep-dive": "Deep Dive Report"}


class ArtifactError(LookupError):
    pass


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


def business_artifact(kind: str, title: str, data: Any, now: datetime | None = None) -> dict[str, Any]:
    if kind not in BUSINESS_DESCRIPTIONS:
        raise ValueError(f"Unknown business artifact type: {kind}")
    moment = _now(now)
    return {
        "id": str(int(moment.timestamp() * 1000)),
        "type": kind,
        "title": title,
        "description": BUSINESS_DESCRIPTIONS[kind],
        "data": data,
        "savedAt": moment.isoformat(),
    }


def academy_artifact(academy: dict[str, Any], now: datetime | None = None) -> dict[str, Any]:
    return {
        "id": academy.get("place_id") or academy.get("id"),
        "name": academy.get("name", ""),
        "address": academy.get("formatted_address") or academy.get("address", ""),
        "sport": academy.get("sport", ""),
        "savedAt": _now(now).isoformat(),
    }


def dedupe_by_id(items: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
    seen: set[str] = set()
    unique = []
    for item in items or []:
        key = str(item.get("id"))
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


def contains(items: list[dict[str, Any]] | None, artifact_id: Any) -> bool:
    return any(str(item.get("id")) == str(artifact_id) for item in items or [])


def toggle_in_list(items: list[dict[str, Any]] | None, artifact: dict[str, Any]) -> tuple[list[dict[str, Any]], bool]:
    """Return the new list and whether ``artifact`` is saved afterwards."""
    current = dedupe_by_id(items)
    if contains(current, artifact["id"]):
        return [item for item in current if str(item.get("id")) != str(artifact["id"])], False
    return current + [artifact], True


def add_to_list(items: list[dict[str, Any]] | None, artifact: dict[str, Any]) -> list[dict[str, Any]]:
    current = dedupe_by_id(items)
    if contains(current, artifact["id"]):
        return current
    return current + [artifact]


def _locked_user(db: Session, user_id: str | uuid.UUID) -> User:
    # Row lock so concurrent saves from two tabs cannot overwrite each other.
    user = db.scalar(select(User).where(User.id == uuid.UUID(str(user_id))).with_for_update())
    if user is None:
        raise ArtifactError(f"User {user_id} not found")
    return user


def _check_field(field: str) -> None:
    if field not in SAVED_FIELDS:
        raise ValueError(f"Unknown saved artifact list: {field}")


def toggle_saved(db: Session, user_id: str | uuid.UUID, field: str, artifact: dict[str, Any]) -> bool:
    """Save or unsave ``artifact`` in one locked read-modify-write."""
    _check_field(field)
    user = _locked_user(db, user_id)
    updated, saved = toggle_in_list(getattr(user, field), artifact)
    setattr(user, field, updated)
    db.flush()
    logger.info("%s %s for user %s", "Saved" if saved else "Removed", field, user.id)
    return saved


def save_artifact(db: Session, user_id: str | uuid.UUID, field: str, artifact: dict[str, Any]) -> list[dict[str, Any]]:
    _check_field(field)
    user = _locked_user(db, user_id)
    updated = add_to_list(getattr(user, field), artifact)
    setattr(user, field, updated)
    db.flush()
    return updated


def remove_artifact(db: Session, user_id: str | uuid.UUID, field: str, artifact_id: Any) -> bool:
    _check_field(field)
    user = _locked_user(db, user_id)
    current = dedupe_by_id(getattr(user, field))
    remaining = [item for item in current if str(item.get("id")) != str(artifact_id)]
    setattr(user, field, remaining)
    db.flush()
    return len(remaining) != len(current)


def list_saved(user: User, field: str) -> list[dict[str, Any]]:
    _check_field(field)
    return dedupe_by_id(getattr(user, field))
