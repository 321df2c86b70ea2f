from __future__ import annotations

import json
import logging
from typing import Any, MutableMapping

logger = logging.getLogger(__name__)

BUSINESS_IDEA_KEY = "jurniq_target_business_idea"
ACADEMY_KEY = "jurniq_target_academy_id"


class HandoffStore:
    """One-shot messages between pages, kept in a string-keyed store.

    ``take`` removes the entry before parsing it, so a payload is consumed at
    most once even when it turns out to be malformed.
    """

    def __init__(self, storage: MutableMapping[str, Any]) -> None:
        self.storage = storage

    def put(self, key: str, payload: Any) -> None:
        self.storage[key] = json.dumps(payload, default=str)

    def has(self, key: str) -> bool:
        return key in self.storage

    def take(self, key: str) -> Any:
        raw = self.storage.pop(key, None)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding malformed hand-off payload under %s", key)
            return None


def business_view_for(idea: Any) -> tuple[str, dict[str, Any]] | None:
    """Map a saved business idea to the view that renders it."""
    if not isinstance(idea, dict):
        return None
    if idea.get("type") == "analysis":
        return "analysis", {"analysis": idea.get("data")}
    if idea.get("type") == "deep-dive":
        return "deep-dive", {"title": idea.get("title", ""), "report": idea.get("data")}
    return None
