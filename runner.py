from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, MutableMapping

from questionnaire import PHASE_SUBMITTING, FormSession, Navigator

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Failed to generate recommendations. Please try again."

Operation = Callable[[], Awaitable[Any]]
ImageFetcher = Callable[[str], Awaitable[str | None]]


def is_empty_result(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, str)):
        return len(value) == 0
    return False


@dataclass
class ViewState:
    view: str
    loading: bool = False
    status_text: str = ""
    alert: str | None = None
    payload: Any = None

    def reset(self, view: str) -> None:
        self.view = view
        self.loading = False
        self.status_text = ""
        self.alert = None
        self.payload = None


class TaskRunner:
    """Runs one remote call for a form session and routes the outcome.

    The session generation is captured when a run starts. If the session was
    reset while the call was in flight, the outcome is dropped: view, payload
    and alert stay as the reset left them. The loading flag is cleared unless
    a newer run has started since.
    """

    def __init__(self, session: FormSession, state: ViewState, navigator: Navigator | None = None) -> None:
        self.session = session
        self.state = state
        self.navigator = navigator
        self._runs = 0

    def reset(self, view: str) -> None:
        """Start the form over and clear whatever the last run left behind."""
        (self.navigator or Navigator(self.session)).reset()
        self.state.reset(view)

    def _is_current(self, generation: int) -> bool:
        return self.session.generation == generation

    async def run(
        self,
        task_id: str,
        operation: Operation,
        *,
        status: str = "Loading...",
        success_view: str | None = None,
        fallback_view: str | None = None,
        failure_message: str = DEFAULT_FAILURE_MESSAGE,
        is_empty: Callable[[Any], bool] = is_empty_result,
    ) -> Any:
        generation = self.session.generation
        self._runs += 1
        run_number = self._runs
        previous_view = self.state.view
        self.state.loading = True
        self.state.status_text = status
        self.state.alert = None
        logger.debug("Task %s started (generation %s)", task_id, generation)

        try:
            result = await operation()
        except Exception:
            logger.exception("Task %s failed", task_id)
            result = None

        if not self._is_current(generation):
            logger.info("Dropping stale result for task %s", task_id)
            if run_number == self._runs:
                self.state.loading = False
                self.state.status_text = ""
            return None

        self.state.loading = False
        self.state.status_text = ""
        submitting = self.session.phase == PHASE_SUBMITTING

        if is_empty(result):
            logger.warning("Task %s returned no usable result", task_id)
            self.state.alert = failure_message
            self.state.view = fallback_view or previous_view
            if self.navigator is not None and submitting:
                self.navigator.fail()
            return None

        self.state.payload = result
        self.state.view = success_view or previous_view
        if self.navigator is not None and submitting:
            self.navigator.complete()
        return result


async def _fetch_one(item: dict[str, Any], fetch: ImageFetcher, key: str, prompt_key: str) -> tuple[str, str | None]:
    title = str(item.get(key, ""))
    prompt = item.get(prompt_key) or title
    try:
        url = await fetch(prompt)
    except Exception:
        logger.warning("Image fetch failed for %s", title, exc_info=True)
        url = None
    return title, url


async def gather_images(
    items: Iterable[dict[str, Any]],
    fetch: ImageFetcher,
    *,
    key: str = "title",
    prompt_key: str = "imageTag",
) -> dict[str, str]:
    """Fetch every image and return only once all of them have settled."""
    pairs = await asyncio.gather(*(_fetch_one(item, fetch, key, prompt_key) for item in items))
    return {title: url for title, url in pairs if url}


async def stream_images(
    items: Iterable[dict[str, Any]],
    fetch: ImageFetcher,
    sink: MutableMapping[str, str],
    session: FormSession,
    *,
    key: str = "title",
    prompt_key: str = "imageTag",
    on_arrival: Callable[[str, str], None] | None = None,
) -> int:
    """Write images into ``sink`` as each one arrives, in any order.

    Arrivals after the session has been reset are discarded. Returns the
    number of images written.
    """
    generation = session.generation
    written = 0
    for next_done in asyncio.as_completed([_fetch_one(item, fetch, key, prompt_key) for item in items]):
        title, url = await next_done
        if session.generation != generation or not url:
            continue
        sink[title] = url
        written += 1
        if on_arrival is not None:
            on_arrival(title, url)
    return written
