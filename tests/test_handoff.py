from handoff import ACADEMY_KEY, BUSINESS_IDEA_KEY, HandoffStore, business_view_for


def test_take_consumes_payload_once() -> None:
    store = HandoffStore({})
    store.put(ACADEMY_KEY, {"id": "p1", "name": "Ace"})
    assert store.has(ACADEMY_KEY)

    assert store.take(ACADEMY_KEY) == {"id": "p1", "name": "Ace"}
    assert store.take(ACADEMY_KEY) is None
    assert not store.has(ACADEMY_KEY)


def test_malformed_payload_is_discarded() -> None:
    storage = {BUSINESS_IDEA_KEY: "{not json"}
    store = HandoffStore(storage)
    assert store.take(BUSINESS_IDEA_KEY) is None
    assert BUSINESS_IDEA_KEY not in storage


def test_business_view_for_saved_types() -> None:
    assert business_view_for({"type": "analysis", "data": {"ideaTitle": "X"}}) == ("analysis", {"analysis": {"ideaTitle": "X"}})
    assert business_view_for({"type": "deep-dive", "title": "Y", "data": "<p>r</p>"}) == (
        "deep-dive",
        {"title": "Y", "report": "<p>r</p>"},
    )
    assert business_view_for({"type": "pitch"}) is None
    assert business_view_for(None) is None
