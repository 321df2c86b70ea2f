import requests

import places
from places import NullLookup, PlacesLookup, build_lookup, institution_search_query


class FakeResponse:
    def __init__(self, body, status_code: int = 200):
        self._body = body
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._body


def test_build_lookup_without_key_is_null() -> None:
    assert isinstance(build_lookup(None), NullLookup)
    assert isinstance(build_lookup("key"), PlacesLookup)
    assert NullLookup().search("cricket academy in Pune") == []


def test_search_keeps_known_fields_and_limit(monkeypatch) -> None:
    calls = []
    results = [
        {"place_id": f"p{i}", "name": f"Academy {i}", "formatted_address": "Pune", "rating": 4.5, "icon": "x"}
        for i in range(4)
    ]
    results.insert(1, {"name": "No id"})

    def fake_get(url, params, timeout):
        calls.append(params)
        return FakeResponse({"status": "OK", "results": results})

    monkeypatch.setattr(places.requests, "get", fake_get)
    found = PlacesLookup("key", limit=3).search("cricket academy in Pune")

    assert calls == [{"query": "cricket academy in Pune", "key": "key"}]
    assert [p["place_id"] for p in found] == ["p0", "p1"]
    assert set(found[0]) == set(places.RESULT_FIELDS)
    assert found[0]["user_ratings_total"] is None


def test_search_failures_return_empty(monkeypatch) -> None:
    monkeypatch.setattr(places.requests, "get", lambda *a, **k: FakeResponse({"status": "REQUEST_DENIED"}))
    assert PlacesLookup("key").search("q") == []

    monkeypatch.setattr(places.requests, "get", lambda *a, **k: FakeResponse({}, status_code=500))
    assert PlacesLookup("key").search("q") == []

    def unreachable(*args, **kwargs):
        raise requests.Timeout("slow")

    monkeypatch.setattr(places.requests, "get", unreachable)
    assert PlacesLookup("key").search("q") == []


def test_institution_queries() -> None:
    assert institution_search_query("College", " Fergusson ", "Pune ") == "university Fergusson in Pune"
    assert institution_search_query("School", "DPS", "Noida") == "school DPS in Noida"
    assert NullLookup().details("p1") is None


def test_details_trims_reviews(monkeypatch) -> None:
    calls = []
    place = {
        "place_id": "p1",
        "name": "Sunrise School",
        "formatted_address": "Pune",
        "international_phone_number": "+91 20 1234 5678",
        "website": "https://sunrise.test",
        "rating": 4.2,
        "reviews": [{"author_name": f"Parent {i}", "rating": 5, "text": "Good", "time": 1} for i in range(7)],
        "icon": "x",
    }

    def fake_get(url, params, timeout):
        calls.append((url, params))
        return FakeResponse({"status": "OK", "result": place})

    monkeypatch.setattr(places.requests, "get", fake_get)
    found = PlacesLookup("key").details("p1")

    url, params = calls[0]
    assert url == places.DETAILS_URL
    assert params["place_id"] == "p1"
    assert params["fields"].split(",") == list(places.DETAIL_FIELDS)
    assert "icon" not in found
    assert found["website"] == "https://sunrise.test"
    assert len(found["reviews"]) == places.MAX_REVIEWS
    assert found["reviews"][0] == {"author": "Parent 0", "rating": 5, "text": "Good"}


def test_details_failures_return_none(monkeypatch) -> None:
    monkeypatch.setattr(places.requests, "get", lambda *a, **k: FakeResponse({"status": "NOT_FOUND"}))
    assert PlacesLookup("key").details("p1") is None

    def broken(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(places.requests, "get", broken)
    assert PlacesLookup("key").details("p1") is None
