import asyncio

from flows import CAREER_FORM
from questionnaire import PHASE_INPUT, PHASE_RESULT, FormSession, Navigator
from runner import DEFAULT_FAILURE_MESSAGE, TaskRunner, ViewState, gather_images, is_empty_result, stream_images


def submitting_runner(view: str = "form") -> tuple[TaskRunner, FormSession, ViewState]:
    session = FormSession.start(CAREER_FORM)
    navigator = Navigator(session)
    navigator.begin_submit()
    state = ViewState(view=view)
    return TaskRunner(session, state, navigator), session, state


def test_empty_result_detection() -> None:
    assert is_empty_result(None)
    assert is_empty_result([])
    assert is_empty_result({})
    assert is_empty_result("")
    assert not is_empty_result([{"title": "Pilot"}])
    assert not is_empty_result(0)


def test_success_routes_to_result_view() -> None:
    runner, session, state = submitting_runner()

    async def operation():
        return [{"title": "Architect"}]

    result = asyncio.run(runner.run("careers", operation, success_view="results"))

    assert result == [{"title": "Architect"}]
    assert state.view == "results"
    assert state.payload == result
    assert state.loading is False
    assert state.alert is None
    assert session.phase == PHASE_RESULT


def test_exception_becomes_alert_and_keeps_view() -> None:
    runner, session, state = submitting_runner()

    async def operation():
        raise RuntimeError("quota exceeded")

    result = asyncio.run(runner.run("careers", operation, success_view="results"))

    assert result is None
    assert state.view == "form"
    assert state.alert == DEFAULT_FAILURE_MESSAGE
    assert session.phase == PHASE_INPUT


def test_empty_result_uses_fallback_view_and_message() -> None:
    runner, _, state = submitting_runner(view="quiz")

    async def operation():
        return []

    asyncio.run(runner.run("ideas", operation, fallback_view="home", failure_message="No ideas found."))
    assert state.view == "home"
    assert state.alert == "No ideas found."


def test_result_after_reset_is_dropped() -> None:
    runner, session, state = submitting_runner()

    async def operation():
        Navigator(session).reset()
        return [{"title": "Chef"}]

    result = asyncio.run(runner.run("careers", operation, success_view="results"))

    assert result is None
    assert state.view == "form"
    assert state.payload is None
    assert state.loading is False
    assert state.status_text == ""


def test_reset_while_in_flight_clears_status_and_payload() -> None:
    runner, session, state = submitting_runner(view="results")
    state.payload = {"careers": []}
    state.alert = "Old failure"
    seen = []

    async def operation():
        seen.append((state.loading, state.status_text))
        runner.reset("form")
        seen.append((state.loading, state.status_text))
        return [{"title": "Chef"}]

    asyncio.run(runner.run("careers", operation, status="Finding careers...", success_view="results"))

    assert seen == [(True, "Finding careers..."), (False, "")]
    assert state == ViewState(view="form")
    assert session.phase == PHASE_INPUT
    assert session.current_step_index == 0


def test_stale_result_leaves_newer_run_loading() -> None:
    runner, session, state = submitting_runner()
    seen = []

    async def newer():
        return [{"title": "Pilot"}]

    async def scenario():
        started = asyncio.Event()
        release = asyncio.Event()

        async def older():
            started.set()
            await release.wait()
            return [{"title": "Chef"}]

        first = asyncio.create_task(runner.run("careers", older, status="First"))
        await started.wait()
        Navigator(session).reset()

        async def blocked():
            release.set()
            await first
            seen.append((state.loading, state.status_text))
            return await newer()

        return await runner.run("careers", blocked, status="Second", success_view="results")

    assert asyncio.run(scenario()) == [{"title": "Pilot"}]
    assert seen == [(True, "Second")]
    assert state.loading is False
    assert state.view == "results"


def test_gather_images_skips_failures() -> None:
    items = [{"title": "Pilot", "imageTag": "pilot in cockpit"}, {"title": "Nurse"}, {"title": "Chef"}]
    seen = []

    async def fetch(prompt):
        seen.append(prompt)
        if prompt == "Chef":
            raise ValueError("blocked")
        if prompt == "Nurse":
            return None
        return f"data:image/png;base64,{prompt}"

    images = asyncio.run(gather_images(items, fetch))

    assert images == {"Pilot": "data:image/png;base64,pilot in cockpit"}
    assert sorted(seen) == ["Chef", "Nurse", "pilot in cockpit"]


def test_stream_images_writes_in_arrival_order() -> None:
    session = FormSession.start(CAREER_FORM)
    sink: dict[str, str] = {}
    arrivals = []

    async def fetch(prompt):
        await asyncio.sleep(0.02 if prompt == "slow" else 0)
        return f"url:{prompt}"

    items = [{"title": "A", "imagePrompt": "slow"}, {"title": "B", "imagePrompt": "fast"}]
    written = asyncio.run(
        stream_images(items, fetch, sink, session, prompt_key="imagePrompt", on_arrival=lambda t, _u: arrivals.append(t))
    )

    assert written == 2
    assert arrivals == ["B", "A"]
    assert sink == {"A": "url:slow", "B": "url:fast"}


def test_stream_images_discards_arrivals_after_reset() -> None:
    session = FormSession.start(CAREER_FORM)
    sink: dict[str, str] = {}

    async def fetch(prompt):
        Navigator(session).reset()
        return f"url:{prompt}"

    written = asyncio.run(stream_images([{"title": "A"}], fetch, sink, session))
    assert written == 0
    assert sink == {}
