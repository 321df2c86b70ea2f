import pytest

from quiz import (
    ANSWERED,
    NOT_ANSWERED,
    NOT_VISITED,
    QUESTION_SECONDS,
    SKIPPED,
    BusinessQuizSession,
    ChildTestSession,
    QuizSession,
    answer_summary,
    answers_for_analysis,
    answers_for_child_analysis,
    estimate_iq,
    format_duration,
    round_half_up,
    score_answers,
)


def make_questions(count: int = 4) -> list[dict]:
    return [
        {"question": f"Question number {i} about patterns", "options": ["A", "B", "C", "D"], "correctAnswerIndex": i % 4}
        for i in range(count)
    ]


def test_rounding_and_duration_helpers() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(66.66) == 67
    assert format_duration(125.9) == "2 min 5 sec"
    assert format_duration(-3) == "0 min 0 sec"


def test_iq_estimate_maps_percentage_to_70_150() -> None:
    assert estimate_iq(0) == 70
    assert estimate_iq(50) == 110
    assert estimate_iq(100) == 150


def test_score_counts_correct_incorrect_and_skipped() -> None:
    questions = make_questions(4)
    result = score_answers(questions, [0, 3, None, ""], elapsed_seconds=61)

    assert result.correct == 1
    assert result.incorrect == 1
    assert result.skipped == 2
    assert result.score == 5
    assert result.total == 20
    assert result.percentage == 25.0
    assert result.accuracy == 50
    assert result.time_taken == "1 min 1 sec"
    assert result.passed is False


def test_pass_threshold_is_inclusive() -> None:
    questions = make_questions(10)
    answers = [q["correctAnswerIndex"] for q in questions[:3]] + [None] * 7
    result = score_answers(questions, answers)
    assert result.percentage == pytest.approx(30.0)
    assert result.passed is True


def test_nothing_attempted_has_zero_accuracy() -> None:
    result = score_answers(make_questions(3), [])
    assert result.accuracy == 0
    assert result.skipped == 3


def test_open_questions_count_any_answer_as_correct() -> None:
    questions = [{"question": "Describe a hobby"}]
    assert score_answers(questions, ["Painting"]).correct == 1
    assert answers_for_analysis(questions, ["Painting"]) == [
        {"question": "Describe a hobby", "answer": "Painting", "correct": True}
    ]


def test_analysis_rows_use_option_text() -> None:
    questions = make_questions(2)
    rows = answers_for_child_analysis(questions, [2, ""])
    assert rows == [
        {"question": "Question number 0 about patterns", "answer": "C"},
        {"question": "Question number 1 about patterns", "answer": "Not Answered"},
    ]


def test_answer_summary_lines() -> None:
    questions = make_questions(3)
    summary = answer_summary(questions, [0, 0, None])
    assert summary.splitlines() == [
        "User Answers Analysis:",
        "Q1: Correct (Question number 0 about patter...)",
        "Q2: Incorrect",
        "Q3: Skipped",
    ]


def test_quiz_session_statuses_follow_navigation() -> None:
    quiz = QuizSession(make_questions(3), now=0)
    assert quiz.statuses == [NOT_VISITED] * 3

    quiz.select_option(0)
    assert quiz.move_next(now=5) is False
    assert quiz.statuses[0] == ANSWERED

    assert quiz.move_next(now=8) is False
    assert quiz.statuses[1] == NOT_ANSWERED

    quiz.select_option(1)
    quiz.clear_response()
    assert quiz.statuses[2] == NOT_ANSWERED
    assert quiz.move_next(now=10) is True
    assert quiz.finished


def test_timer_auto_skips_each_expired_question() -> None:
    quiz = QuizSession(make_questions(3), now=0)
    assert quiz.seconds_left(now=12) == QUESTION_SECONDS - 12

    assert quiz.sync_timer(now=QUESTION_SECONDS * 2 + 1) is False
    assert quiz.statuses[:2] == [SKIPPED, SKIPPED]
    assert quiz.current == 2
    assert quiz.seconds_left(now=QUESTION_SECONDS * 2 + 1) == QUESTION_SECONDS - 1

    assert quiz.sync_timer(now=QUESTION_SECONDS * 3) is True
    result = quiz.result()
    assert result.skipped == 3
    assert result.time_taken == "1 min 30 sec"


def test_answered_question_is_not_marked_skipped_on_timeout() -> None:
    quiz = QuizSession(make_questions(2), now=0)
    quiz.select_option(0)
    quiz.sync_timer(now=QUESTION_SECONDS)
    assert quiz.statuses[0] == ANSWERED
    assert quiz.current == 1


def test_child_test_session_moves_freely() -> None:
    test = ChildTestSession(make_questions(3))
    test.answer(1)
    test.next()
    test.next()
    test.next()
    assert test.current == 2
    assert test.is_last
    test.previous()
    test.previous()
    test.previous()
    assert test.current == 0
    assert test.formatted_answers()[0]["answer"] == "B"
    assert test.formatted_answers()[1]["answer"] == "Not Answered"


def test_business_quiz_collects_pairs() -> None:
    quiz = BusinessQuizSession([{"question": "Budget?", "options": ["Low", "High"]}, {"question": "Team?", "options": ["Solo"]}])
    assert quiz.answer("Low") is False
    assert quiz.answer("Solo") is True
    assert quiz.finished
    assert quiz.pairs == [{"question": "Budget?", "answer": "Low"}, {"question": "Team?", "answer": "Solo"}]
    assert quiz.answer("again") is True
    assert len(quiz.pairs) == 2
