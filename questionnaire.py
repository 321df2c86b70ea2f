"""Declarative multi-step forms.

A ``FlowSpec`` describes the steps and fields of a guided questionnaire.
``FormSession`` holds the answers a user has given so far and ``Navigator``
moves the session between steps, validating only the step being left.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

PHASE_INPUT = "input"
PHASE_SUBMITTING = "submitting"
PHASE_RESULT = "result"

BranchRule = Callable[[Mapping[str, Any]], bool]
StepValidator = Callable[[Mapping[str, Any], Mapping[str, bool]], dict[str, str]]


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: str = "text"  # text | number | single | multi
    label: str = ""
    required: bool = True
    limit: int | None = None
    required_when: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    options: tuple[str, ...] = ()
    message: str | None = None

    def is_active(self, flags: Mapping[str, bool]) -> bool:
        if self.required_when is None:
            return True
        return bool(flags.get(self.required_when))

    def is_required(self, flags: Mapping[str, bool]) -> bool:
        if self.required_when is not None:
            return self.is_active(flags)
        return self.required

    def required_message(self) -> str:
        if self.message:
            return self.message
        label = self.label or self.name.replace("_", " ")
        if self.kind == "multi":
            return f"Please select at least one {label.lower()}."
        if self.kind == "single":
            return f"Please select your {label.lower()}."
        return f"Please enter your {label.lower()}."


@dataclass(frozen=True)
class StepSpec:
    key: str
    title: str
    fields: tuple[FieldSpec, ...] = ()
    validator: StepValidator | None = None


@dataclass(frozen=True)
class FlowSpec:
    name: str
    steps: tuple[StepSpec, ...]
    defaults: Mapping[str, Any] = field(default_factory=dict)
    branch_rules: Mapping[str, BranchRule] = field(default_factory=dict)
    cascades: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def field_spec(self, name: str) -> FieldSpec | None:
        for step in self.steps:
            for spec in step.fields:
                if spec.name == name:
                    return spec
        return None

    def default_for(self, name: str) -> Any:
        if name in self.defaults:
            return copy.deepcopy(self.defaults[name])
        spec = self.field_spec(name)
        if spec is not None and spec.kind == "multi":
            return []
        return ""

    def initial_answers(self) -> dict[str, Any]:
        answers: dict[str, Any] = {}
        for step in self.steps:
            for spec in step.fields:
                answers[spec.name] = self.default_for(spec.name)
        for name, value in self.defaults.items():
            answers.setdefault(name, copy.deepcopy(value))
        return answers

    def compute_flags(self, answers: Mapping[str, Any]) -> dict[str, bool]:
        return {name: bool(rule(answers)) for name, rule in self.branch_rules.items()}


def _validate_field(spec: FieldSpec, value: Any, flags: Mapping[str, bool]) -> str | None:
    if not spec.is_active(flags):
        return None
    if is_blank(value):
        return spec.required_message() if spec.is_required(flags) else None

    if spec.kind == "number":
        try:
            number = float(value)
        except (TypeError, ValueError):
            return "Please enter a valid number."
        if spec.minimum is not None and number < spec.minimum:
            return f"{spec.label or spec.name} must be at least {spec.minimum:g}."
        if spec.maximum is not None and number > spec.maximum:
            return f"{spec.label or spec.name} must be at most {spec.maximum:g}."
    elif spec.kind == "single" and spec.options and value not in spec.options:
        return "Please choose one of the listed options."
    elif spec.kind == "multi" and spec.limit is not None and len(value) > spec.limit:
        return f"Select up to {spec.limit}."
    return None


def validate_step(
    flow: FlowSpec,
    step_index: int,
    answers: Mapping[str, Any],
    flags: Mapping[str, bool] | None = None,
) -> dict[str, str]:
    """Return ``{field: message}`` for the given step; empty when it passes."""
    flags = flow.compute_flags(answers) if flags is None else flags
    step = flow.steps[step_index]
    errors: dict[str, str] = {}
    for spec in step.fields:
        message = _validate_field(spec, answers.get(spec.name), flags)
        if message:
            errors[spec.name] = message
    if step.validator is not None:
        for name, message in step.validator(answers, flags).items():
            errors.setdefault(name, message)
    return errors


@dataclass
class FormSession:
    flow: FlowSpec
    current_step_index: int = 0
    answers: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    branch_flags: dict[str, bool] = field(default_factory=dict)
    phase: str = PHASE_INPUT
    generation: int = 0

    @classmethod
    def start(cls, flow: FlowSpec, **prefill: Any) -> "FormSession":
        session = cls(flow=flow, answers=flow.initial_answers())
        session.answers.update(prefill)
        session.recompute_flags()
        return session

    @property
    def step(self) -> StepSpec:
        return self.flow.steps[self.current_step_index]

    @property
    def step_count(self) -> int:
        return self.flow.step_count

    @property
    def is_last_step(self) -> bool:
        return self.current_step_index >= self.flow.step_count - 1

    def get(self, name: str, default: Any = None) -> Any:
        return self.answers.get(name, default)

    def selection(self, name: str) -> list[Any]:
        value = self.answers.get(name)
        if isinstance(value, list):
            return value
        return []

    def recompute_flags(self) -> dict[str, bool]:
        self.branch_flags = self.flow.compute_flags(self.answers)
        return self.branch_flags

    def clear_error(self, name: str) -> None:
        self.errors.pop(name, None)

    def _cascade(self, name: str, seen: set[str] | None = None) -> None:
        seen = seen if seen is not None else {name}
        for downstream in self.flow.cascades.get(name, ()):
            if downstream in seen:
                continue
            seen.add(downstream)
            self.answers[downstream] = self.flow.default_for(downstream)
            self.clear_error(downstream)
            self._cascade(downstream, seen)

    def set(self, name: str, value: Any) -> None:
        previous = self.answers.get(name)
        self.answers[name] = value
        self.clear_error(name)
        if previous != value:
            self._cascade(name)
        self.recompute_flags()

    def toggle(self, name: str, value: Any, limit: int | None = None) -> bool:
        """Add or remove ``value`` from a multi-select answer.

        Adding past ``limit`` is ignored without an error. Returns whether the
        selection changed.
        """
        if limit is None:
            spec = self.flow.field_spec(name)
            limit = spec.limit if spec is not None else None
        current = list(self.selection(name))
        if value in current:
            current.remove(value)
        elif limit is not None and len(current) >= limit:
            return False
        else:
            current.append(value)
        self.answers[name] = current
        self.clear_error(name)
        self._cascade(name)
        self.recompute_flags()
        return True

    def payload(self) -> dict[str, Any]:
        """Answers with branch-gated fields dropped when their flag is off."""
        self.recompute_flags()
        data = copy.deepcopy(self.answers)
        for step in self.flow.steps:
            for spec in step.fields:
                if not spec.is_active(self.branch_flags):
                    data.pop(spec.name, None)
        return data


class Navigator:
    def __init__(self, session: FormSession) -> None:
        self.session = session

    def next(self) -> bool:
        session = self.session
        if session.phase != PHASE_INPUT:
            return False
        session.recompute_flags()
        errors = validate_step(session.flow, session.current_step_index, session.answers, session.branch_flags)
        if errors:
            session.errors.update(errors)
            return False
        if session.is_last_step:
            session.phase = PHASE_SUBMITTING
        else:
            session.current_step_index += 1
        return True

    def back(self) -> None:
        session = self.session
        if session.phase != PHASE_INPUT:
            session.phase = PHASE_INPUT
            return
        session.current_step_index = max(0, session.current_step_index - 1)

    def goto(self, step_index: int) -> None:
        session = self.session
        if not 0 <= step_index < session.step_count:
            raise IndexError(f"Step {step_index} is outside {session.flow.name} (0..{session.step_count - 1})")
        session.current_step_index = step_index
        session.phase = PHASE_INPUT

    def reset(self) -> None:
        session = self.session
        session.current_step_index = 0
        session.answers = session.flow.initial_answers()
        session.errors = {}
        session.phase = PHASE_INPUT
        session.generation += 1
        session.recompute_flags()

    def begin_submit(self) -> int:
        self.session.phase = PHASE_SUBMITTING
        return self.session.generation

    def complete(self) -> None:
        self.session.phase = PHASE_RESULT

    def fail(self) -> None:
        self.session.phase = PHASE_INPUT
