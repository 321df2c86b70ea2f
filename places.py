"""Place search behind a small lookup interface.

Used for sports academies and for schools and colleges on the fee structure
page. ``PlacesLookup`` queries the Google Places text search and details
endpoints; without an API key the app falls back to ``NullLookup`` and shows
no results.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

logger = logging.getLogger(__name__)

TEXT_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"
DETAILS_URL = "https://maps.googleapis.com/maps/api/place/details/json"
REQUEST_TIMEOUT = 15
RESULT_FIELDS = ("place_id", "name", "formatted_address", "rating", "user_ratings_total")
DETAIL_FIELDS = (
    "place_id",
    "name",
    "formatted_address",
    "international_phone_number",
    "website",
    "rating",
    "user_ratings_total",
    "reviews",
    "business_status",
)
MAX_REVIEWS = 5


def institution_search_query(kind: str, name: str, location: str) -> str:
    """Text query for a school or college; colleges are searched as universities."""
    type_query = "university" if kind.lower() == "college" else "school"
    return f"{type_query} {name.strip()} in {location.strip()}"


class PlaceLookup(Protocol):
    def search(self, query: str) -> list[dict[str, Any]]:
        ...

    def details(self, place_id: str) -> dict[str, Any] | None:
        ...


class NullLookup:
    def search(self, query: str) -> list[dict[str, Any]]:
        logger.info("Place search disabled; no results for %r", query)
        return []

    def details(self, place_id: str) -> dict[str, Any] | None:
        return None


class PlacesLookup:
    def __init__(self, api_key: str, limit: int = 10) -> None:
        self.api_key = api_key
        self.limit = limit

    def search(self, query: str) -> list[dict[str, Any]]:
        try:
            response = requests.get(
                TEXT_SEARCH_URL,
                params={"query": query, "key": self.api_key},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError):
            logger.exception("Places search failed for %r", query)
            return []

        status = body.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            logger.warning("Places search for %r returned %s", query, status)
            return []
        return [
            {field: place.get(field) for field in RESULT_FIELDS}
            for place in body.get("results", [])[: self.limit]
            if place.get("place_id")
        ]

    def details(self, place_id: str) -> dict[str, Any] | None:
        try:
            response = requests.get(
                DETAILS_URL,
                params={"place_id": place_id, "fields": ",".join(DETAIL_FIELDS), "key": self.api_key},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError):
            logger.exception("Places details failed for %s", place_id)
            return None

        if body.get("status") != "OK" or not isinstance(body.get("result"), dict):
            logger.warning("Places details for %s returned %s", place_id, body.get("status"))
            return None
        place = body["result"]
        found = {field: place.get(field) for field in DETAIL_FIELDS}
        found["reviews"] = [
            {"author": review.get("author_name"), "rating": review.get("rating"), "text": review.get("text")}
            for review in (place.get("reviews") or [])[:MAX_REVIEWS]
        ]
        return found


def build_lookup(api_key: str | None) -> PlaceLookup:
    if api_key:
        return PlacesLookup(api_key)
    return NullLookup()
