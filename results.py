from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from runner import DEFAULT_FAILURE_MESSAGE, TaskRunner

logger = logging.getLogger(__name__)

LIST = "list"
DETAIL = "detail"
SKILLS = "skills"
INTERVIEW = "interview"
ROADMAP = "roadmap"
JOBS = "jobs"
DEEP_DIVE = "deep_dive"
FEES = "fees"
LEAF_STATES = {SKILLS, INTERVIEW, ROADMAP, JOBS, DEEP_DIVE, FEES}

Loader = Callable[[str], Awaitable[Any]]


class DetailNavigator:
    """Drill-down over a list of results: list, detail, then a leaf view.

    Every remote result is remembered per (item position, view) for as long as
    the owning form session keeps its generation, so revisiting a leaf does
    not call the generator again. Two items sharing a title keep separate
    entries. Failed loads are never remembered.
    """

    def __init__(self, runner: TaskRunner, items: list[dict[str, Any]] | None = None, title_key: str = "title") -> None:
        self.runner = runner
        self.items: list[dict[str, Any]] = list(items or [])
        self.title_key = title_key
        self.state = LIST
        self.selected: dict[str, Any] | None = None
        self.index: int | None = None
        self._memo: dict[tuple[int, str], Any] = {}
        self._generation = runner.session.generation

    def _sync_generation(self) -> None:
        current = self.runner.session.generation
        if current != self._generation:
            self._memo.clear()
            self._generation = current
            self.state = LIST
            self.selected = None
            self.index = None

    @property
    def title(self) -> str | None:
        if self.selected is None:
            return None
        return str(self.selected.get(self.title_key, ""))

    def select(self, index: int) -> dict[str, Any]:
        self._sync_generation()
        self.selected = self.items[index]
        self.index = index
        self.state = DETAIL
        return self.selected

    def cached(self, view: str) -> Any:
        if self.index is None:
            return None
        return self._memo.get((self.index, view))

    async def _load(self, view: str, loader: Loader, status: str, failure_message: str) -> Any:
        title = self.title or ""
        key = (self.index if self.index is not None else -1, view)
        if key in self._memo:
            return self._memo[key]
        result = await self.runner.run(
            f"{view}:{key[0]}:{title}",
            lambda: loader(title),
            status=status,
            failure_message=failure_message,
        )
        if result is not None:
            self._memo[key] = result
        return result

    async def open(
        self,
        index: int,
        loader: Loader,
        *,
        status: str = "Loading details...",
        failure_message: str = DEFAULT_FAILURE_MESSAGE,
    ) -> Any:
        """Select an item and load its detail record."""
        previous = self.state, self.selected, self.index
        self.select(index)
        result = await self._load(DETAIL, loader, status, failure_message)
        if result is None:
            self.state, self.selected, self.index = previous
        return result

    async def enter(
        self,
        view: str,
        loader: Loader,
        *,
        status: str = "Loading...",
        failure_message: str = DEFAULT_FAILURE_MESSAGE,
    ) -> Any:
        if view not in LEAF_STATES:
            raise ValueError(f"Unknown result view: {view}")
        self._sync_generation()
        if self.selected is None:
            raise RuntimeError("Select a result before opening one of its views")
        result = await self._load(view, loader, status, failure_message)
        if result is not None:
            self.state = view
        return result

    def back(self) -> None:
        if self.state in LEAF_STATES:
            self.state = DETAIL
        elif self.state == DETAIL:
            self.state = LIST
            self.selected = None
            self.index = None

    def save(self, saver: Callable[[dict[str, Any], Any], Any]) -> Any:
        """Persist the current item; navigation is left as it is."""
        if self.selected is None:
            return None
        return saver(self.selected, self.cached(self.state))
