from __future__ import annotations

import math
import time
from dataclasses import asdict, dataclass
from typing import Any

NOT_VISITED = "not-visited"
NOT_ANSWERED = "not-answered"
ANSWERED = "answered"
SKIPPED = "skipped"

QUESTION_SECONDS = 30
POINTS_PER_QUESTION = 5
PASS_PERCENTAGE = 30
IQ_BASE = 70
IQ_SPAN = 80


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_duration(seconds: float) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60} min {seconds % 60} sec"


def is_skipped(answer: Any) -> bool:
    return answer is None or answer == ""


def is_correct(question: dict[str, Any], answer: Any) -> bool:
    if is_skipped(answer):
        return False
    expected = question.get("correctAnswerIndex")
    # Open questions carry no key; any written answer counts.
    if expected is None:
        return True
    return answer == expected


def estimate_iq(percentage: float) -> int:
    return round_half_up(IQ_BASE + (percentage / 100) * IQ_SPAN)


@dataclass
class QuizResult:
    score: int
    total: int
    percentage: float
    accuracy: int
    correct: int
    incorrect: int
    skipped: int
    time_taken: str

    @property
    def passed(self) -> bool:
        return self.percentage >= PASS_PERCENTAGE

    @property
    def iq(self) -> int:
        return estimate_iq(self.percentage)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def score_answers(questions: list[dict[str, Any]], answers: list[Any], elapsed_seconds: float = 0) -> QuizResult:
    correct = 0
    skipped = 0
    for index, question in enumerate(questions):
        answer = answers[index] if index < len(answers) else None
        if is_skipped(answer):
            skipped += 1
        elif is_correct(question, answer):
            correct += 1
    incorrect = len(questions) - correct - skipped
    score = correct * POINTS_PER_QUESTION
    total = len(questions) * POINTS_PER_QUESTION
    percentage = (score / total) * 100 if total else 0.0
    attempted = correct + incorrect
    accuracy = round_half_up(correct / attempted * 100) if attempted else 0
    return QuizResult(
        score=score,
        total=total,
        percentage=percentage,
        accuracy=accuracy,
        correct=correct,
        incorrect=incorrect,
        skipped=skipped,
        time_taken=format_duration(elapsed_seconds),
    )


def answer_text(question: dict[str, Any], answer: Any) -> Any:
    options = question.get("options")
    if isinstance(answer, int) and not isinstance(answer, bool) and options and 0 <= answer < len(options):
        return options[answer]
    return answer


def answers_for_analysis(questions: list[dict[str, Any]], answers: list[Any]) -> list[dict[str, Any]]:
    rows = []
    for index, question in enumerate(questions):
        answer = answers[index] if index < len(answers) else None
        rows.append(
            {
                "question": question.get("question", ""),
                "answer": "Skipped" if is_skipped(answer) else answer_text(question, answer),
                "correct": is_correct(question, answer) if question.get("correctAnswerIndex") is not None else True,
            }
        )
    return rows


def answers_for_child_analysis(questions: list[dict[str, Any]], answers: list[Any]) -> list[dict[str, Any]]:
    rows = []
    for index, question in enumerate(questions):
        answer = answers[index] if index < len(answers) else None
        rows.append(
            {
                "question": question.get("question", ""),
                "answer": "Not Answered" if is_skipped(answer) else answer_text(question, answer),
            }
        )
    return rows


def answer_summary(questions: list[dict[str, Any]], answers: list[Any]) -> str:
    lines = ["User Answers Analysis:"]
    for index, question in enumerate(questions):
        answer = answers[index] if index < len(answers) else None
        if is_skipped(answer):
            lines.append(f"Q{index + 1}: Skipped")
        elif is_correct(question, answer):
            lines.append(f"Q{index + 1}: Correct ({str(question.get('question', ''))[:30]}...)")
        else:
            lines.append(f"Q{index + 1}: Incorrect")
    return "\n".join(lines)


class QuizSession:
    """Timed, one-question-at-a-time aptitude test.

    Each question gets ``QUESTION_SECONDS``; when it runs out the question
    is skipped and the next one starts. Times are monotonic seconds.
    """

    def __init__(self, questions: list[dict[str, Any]], now: float | None = None) -> None:
        self.questions = list(questions)
        self.answers: list[Any] = [None] * len(self.questions)
        self.statuses: list[str] = [NOT_VISITED] * len(self.questions)
        self.current = 0
        self.finished = False
        self.started_at = time.monotonic() if now is None else now
        self.question_started_at = self.started_at
        self.finished_at: float | None = None

    @property
    def question(self) -> dict[str, Any]:
        return self.questions[self.current]

    def seconds_left(self, now: float | None = None) -> int:
        now = time.monotonic() if now is None else now
        return max(0, QUESTION_SECONDS - int(now - self.question_started_at))

    def select_option(self, value: Any) -> None:
        self.answers[self.current] = value
        self.statuses[self.current] = ANSWERED

    def clear_response(self) -> None:
        self.answers[self.current] = None
        self.statuses[self.current] = NOT_ANSWERED

    def move_next(self, auto_skip: bool = False, now: float | None = None) -> bool:
        """Leave the current question. Returns True once the quiz is finished."""
        now = time.monotonic() if now is None else now
        if self.finished:
            return True
        if self.statuses[self.current] == NOT_VISITED:
            if auto_skip:
                self.statuses[self.current] = SKIPPED
            else:
                self.statuses[self.current] = NOT_ANSWERED if self.answers[self.current] is None else ANSWERED
        if self.current < len(self.questions) - 1:
            self.current += 1
            self.question_started_at = now
            return False
        self.finished = True
        self.finished_at = now
        return True

    def sync_timer(self, now: float | None = None) -> bool:
        """Apply every auto-skip that is due by ``now``."""
        now = time.monotonic() if now is None else now
        while not self.finished and now - self.question_started_at >= QUESTION_SECONDS:
            deadline = self.question_started_at + QUESTION_SECONDS
            self.move_next(auto_skip=True, now=deadline)
        return self.finished

    def elapsed(self, now: float | None = None) -> float:
        end = self.finished_at if self.finished_at is not None else (time.monotonic() if now is None else now)
        return end - self.started_at

    def result(self, now: float | None = None) -> QuizResult:
        return score_answers(self.questions, self.answers, self.elapsed(now))


class ChildTestSession:
    """Untimed test with free back and forth between questions."""

    def __init__(self, questions: list[dict[str, Any]]) -> None:
        self.questions = list(questions)
        self.answers: list[Any] = [""] * len(self.questions)
        self.current = 0

    def answer(self, value: Any) -> None:
        self.answers[self.current] = value

    def next(self) -> None:
        self.current = min(self.current + 1, len(self.questions) - 1)

    def previous(self) -> None:
        self.current = max(self.current - 1, 0)

    @property
    def is_last(self) -> bool:
        return self.current >= len(self.questions) - 1

    def formatted_answers(self) -> list[dict[str, Any]]:
        return answers_for_child_analysis(self.questions, self.answers)


class BusinessQuizSession:
    """Sequential quiz whose answers are collected as question/answer pairs."""

    def __init__(self, questions: list[dict[str, Any]]) -> None:
        self.questions = list(questions)
        self.pairs: list[dict[str, str]] = []

    @property
    def current(self) -> int:
        return len(self.pairs)

    @property
    def finished(self) -> bool:
        return self.current >= len(self.questions)

    def answer(self, option: str) -> bool:
        if self.finished:
            return True
        self.pairs.append({"question": self.questions[self.current].get("question", ""), "answer": option})
        return self.finished
