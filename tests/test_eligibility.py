from eligibility import (
    DEFAULT_CRITERIA,
    OPEN_CATEGORY,
    TOO_OLD,
    TOO_YOUNG,
    academy_search_query,
    bracket_bound,
    cities_for,
    criteria_for,
    evaluate_eligibility,
    sanitize_age_input,
    sorted_brackets,
)


def test_bracket_bound_uses_last_number() -> None:
    assert bracket_bound("Under-14") == 14
    assert bracket_bound("Group IV (10-12)") == 12
    assert bracket_bound("Open") == 99


def test_brackets_sort_by_upper_bound() -> None:
    trophies = criteria_for("Swimming")["trophies"]
    assert sorted_brackets(trophies) == ["Group IV (10-12)", "Group III (13-14)", "Group II (15-17)", "Open"]


def test_cricket_age_lands_in_first_matching_bracket() -> None:
    verdict = evaluate_eligibility("Cricket", 15)
    assert verdict.eligible
    assert verdict.category == "Under-16"
    assert verdict.competitions == "Vijay Merchant Trophy, Harris Shield"
    assert verdict.message == "You are eligible for Cricket training!"


def test_bracket_upper_bound_is_inclusive() -> None:
    assert evaluate_eligibility("Football", 13).category == "Under-13"
    assert evaluate_eligibility("Football", 14).category == "Under-15"


def test_adult_falls_into_open_category() -> None:
    verdict = evaluate_eligibility("Cricket", 30)
    assert verdict.category == OPEN_CATEGORY
    assert verdict.competitions == "Ranji Trophy, IPL, Duleep Trophy"


def test_too_young_and_too_old() -> None:
    young = evaluate_eligibility("Cricket", 5)
    assert young.status == TOO_YOUNG
    assert not young.eligible
    assert "from age 6" in young.message

    old = evaluate_eligibility("Football", 36)
    assert old.status == TOO_OLD
    assert "(Max: 35)" in old.message
    assert old.category is None


def test_age_limits_are_inclusive() -> None:
    assert evaluate_eligibility("Football", 5).eligible
    assert evaluate_eligibility("Football", 35).eligible


def test_unlisted_sport_uses_default_criteria() -> None:
    assert criteria_for("Kabaddi") is DEFAULT_CRITERIA
    verdict = evaluate_eligibility("Kabaddi", 17)
    assert verdict.category == "Under-19"
    assert verdict.competitions == "Senior Level"


def test_sanitize_age_keeps_two_digits() -> None:
    assert sanitize_age_input("1a2b3") == "12"
    assert sanitize_age_input(None) == ""
    assert sanitize_age_input("-7") == "7"


def test_cities_are_sorted_and_unknown_state_is_empty() -> None:
    cities = cities_for("Goa")
    assert cities == sorted(cities)
    assert "Panaji" in cities
    assert cities_for("Atlantis") == []


def test_search_query_mentions_category_when_known() -> None:
    assert academy_search_query("Tennis", "Pune", "Maharashtra", "Under-14") == "Tennis academy for Under-14 in Pune, Maharashtra"
    assert academy_search_query("Tennis", "Pune", "Maharashtra") == "Tennis academy in Pune, Maharashtra"
