import pytest

from flows import CAREER_FORM, CAREER_PATH, CAREER_PATH_GOAL_STEP, CHILD_ABILITY, QUIZ_SETUP
from questionnaire import PHASE_INPUT, PHASE_RESULT, PHASE_SUBMITTING, FormSession, Navigator, validate_step


def filled_career_path() -> FormSession:
    session = FormSession.start(CAREER_PATH)
    session.set("name", "Asha")
    session.set("class_level", "12th")
    session.set("stream", "Science")
    session.set("marks", "88")
    return session


def test_next_blocks_on_missing_required_fields() -> None:
    session = FormSession.start(CAREER_PATH)
    navigator = Navigator(session)

    assert navigator.next() is False
    assert session.current_step_index == 0
    assert session.errors["name"] == "Please enter your name."
    assert session.errors["marks"] == "Please enter your marks."


def test_stream_only_required_for_stream_levels() -> None:
    session = FormSession.start(CAREER_PATH)
    session.set("name", "Ravi")
    session.set("marks", "70")
    session.set("class_level", "10th")

    assert session.branch_flags["requires_stream"] is False
    assert validate_step(CAREER_PATH, 0, session.answers) == {}

    session.set("class_level", "11th")
    assert validate_step(CAREER_PATH, 0, session.answers)["stream"] == "Please enter your stream."


def test_setting_a_value_clears_its_error() -> None:
    session = FormSession.start(CAREER_PATH)
    Navigator(session).next()
    assert "name" in session.errors

    session.set("name", "Asha")
    assert "name" not in session.errors


def test_toggle_respects_limit_silently() -> None:
    session = filled_career_path()
    for interest in ("Technology", "Arts", "Science"):
        assert session.toggle("interests", interest) is True

    assert session.toggle("interests", "Sports") is False
    assert session.selection("interests") == ["Technology", "Arts", "Science"]
    assert session.errors == {}

    assert session.toggle("interests", "Technology") is True
    assert "Technology" not in session.selection("interests")


def test_full_walkthrough_reaches_submitting() -> None:
    session = filled_career_path()
    navigator = Navigator(session)
    assert navigator.next()
    session.toggle("interests", "Technology")
    assert navigator.next()
    session.toggle("strengths", "Problem Solving")
    session.toggle("environment", "Office/Corporate")
    assert navigator.next()
    session.set("goal", "Job")

    assert navigator.next()
    assert session.phase == PHASE_SUBMITTING
    assert navigator.next() is False

    navigator.complete()
    assert session.phase == PHASE_RESULT


def test_back_from_result_returns_to_input_on_same_step() -> None:
    session = filled_career_path()
    navigator = Navigator(session)
    session.phase = PHASE_RESULT
    session.current_step_index = 3

    navigator.back()
    assert session.phase == PHASE_INPUT
    assert session.current_step_index == 3

    navigator.back()
    assert session.current_step_index == 2


def test_back_then_next_keeps_answers() -> None:
    session = filled_career_path()
    navigator = Navigator(session)
    assert navigator.next()
    session.toggle("interests", "Technology")
    session.toggle("interests", "Design")
    assert navigator.next()
    before = {name: (list(value) if isinstance(value, list) else value) for name, value in session.answers.items()}

    navigator.back()
    navigator.back()
    assert session.current_step_index == 0
    assert navigator.next()
    assert navigator.next()

    assert session.current_step_index == 2
    assert session.answers == before
    assert session.errors == {}


def test_goto_skips_validation_and_leaves_errors_alone() -> None:
    session = FormSession.start(CAREER_PATH)
    navigator = Navigator(session)
    assert navigator.next() is False
    errors = dict(session.errors)

    navigator.goto(3)
    assert session.current_step_index == 3
    assert session.phase == PHASE_INPUT
    assert session.errors == errors
    assert session.answers["name"] == ""


def test_change_path_reopens_goal_step_with_answers_kept() -> None:
    session = filled_career_path()
    navigator = Navigator(session)
    navigator.next()
    session.toggle("interests", "Technology")
    navigator.next()
    session.toggle("strengths", "Problem Solving")
    session.toggle("environment", "Office/Corporate")
    navigator.next()
    session.set("goal", "Job")
    navigator.next()
    navigator.complete()

    navigator.goto(CAREER_PATH_GOAL_STEP)
    assert CAREER_PATH.steps[session.current_step_index].key == "goal"
    assert session.phase == PHASE_INPUT
    assert session.generation == 0
    assert session.get("name") == "Asha"
    assert session.selection("interests") == ["Technology"]

    session.set("goal", "Higher Studies")
    assert navigator.next()
    assert session.phase == PHASE_SUBMITTING
    assert session.payload()["goal"] == "Higher Studies"


def test_back_never_goes_below_first_step() -> None:
    navigator = Navigator(FormSession.start(CAREER_FORM))
    navigator.back()
    assert navigator.session.current_step_index == 0


def test_goto_out_of_range_raises() -> None:
    navigator = Navigator(FormSession.start(CAREER_PATH))
    with pytest.raises(IndexError):
        navigator.goto(4)
    navigator.goto(2)
    assert navigator.session.current_step_index == 2


def test_reset_restores_defaults_and_bumps_generation() -> None:
    session = filled_career_path()
    navigator = Navigator(session)
    navigator.next()

    navigator.reset()
    assert session.generation == 1
    assert session.current_step_index == 0
    assert session.answers["class_level"] == "12th"
    assert session.answers["name"] == ""
    assert session.answers["interests"] == []


def test_cascade_clears_downstream_answers() -> None:
    session = FormSession.start(QUIZ_SETUP)
    session.set("class_level", "Class 12")
    session.set("stream", "Science")
    session.set("sub_stream", "PCM")

    session.set("stream", "Commerce")
    assert session.get("sub_stream") == ""

    session.set("stream", "Science")
    session.set("sub_stream", "PCB")
    session.set("class_level", "Class 11")
    assert session.get("stream") == ""
    assert session.get("sub_stream") == ""


def test_setting_same_value_does_not_cascade() -> None:
    session = FormSession.start(CHILD_ABILITY)
    session.set("sector", "Healthcare")
    session.set("job", "Doctor")
    session.set("sector", "Healthcare")
    assert session.get("job") == "Doctor"


def test_payload_drops_inactive_branch_fields() -> None:
    session = filled_career_path()
    session.set("class_level", "10th")

    payload = session.payload()
    assert "stream" not in payload
    assert session.answers["stream"] == "Science"


def test_number_bounds_are_validated() -> None:
    session = FormSession.start(CAREER_FORM)
    session.set("full_name", "Kiran")
    session.set("class_level", "Class 9")
    session.set("marks", 120)
    errors = validate_step(CAREER_FORM, 0, session.answers)
    assert errors == {"marks": "Marks must be at most 100."}

    session.set("marks", 39)
    assert validate_step(CAREER_FORM, 0, session.answers) == {"marks": "Marks must be at least 40."}
    session.set("marks", 40)
    assert validate_step(CAREER_FORM, 0, session.answers) == {}


def test_career_form_requires_a_name() -> None:
    session = FormSession.start(CAREER_FORM)
    session.set("class_level", "Class 9")
    errors = validate_step(CAREER_FORM, 0, session.answers)
    assert errors == {"full_name": "Please enter your full name."}
