import asyncio
import base64
from types import SimpleNamespace

from ai import FEES_NOT_FOUND, CareerAI, extract_json, parse_count, rank_videos, strip_fences
from flows import BUSINESS_IDEA
from questionnaire import FormSession
from runner import TaskRunner, ViewState


class FakeModel:
    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    async def generate_content_async(self, prompt, generation_config=None):
        self.prompts.append((prompt, generation_config))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, str):
            return SimpleNamespace(text=reply)
        return reply


def make_ai(*replies, image=None) -> CareerAI:
    return CareerAI(model=FakeModel(*replies), image_model=image or FakeModel())


def test_strip_fences_and_extract_json() -> None:
    assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_fences("```html<p>x</p>```") == "<p>x</p>"
    assert extract_json('Here you go: {"careers": []} thanks') == {"careers": []}
    assert extract_json("[1, 2]") == [1, 2]
    assert extract_json("no json here") is None
    assert extract_json(None) is None


def test_recommend_careers_drops_items_without_title() -> None:
    ai = make_ai('{"careers": [{"title": "Data Scientist", "imageTag": "data"}, {"imageTag": "law"}, "junk"]}')
    careers = asyncio.run(ai.recommend_careers("12th", "Science", 88))
    assert careers == [{"title": "Data Scientist", "imageTag": "data"}]
    prompt, config = ai.model.prompts[0]
    assert "Marks: 88%" in prompt
    assert config == {"response_mime_type": "application/json"}


def test_transport_error_yields_empty_payloads() -> None:
    ai = make_ai(RuntimeError("quota"), RuntimeError("quota"), RuntimeError("quota"))
    assert asyncio.run(ai.jobs("Chef")) == []
    assert asyncio.run(ai.career_details("Chef")) is None
    assert asyncio.run(ai.business_deep_dive("Cafe")) is None


def test_choice_questions_are_validated() -> None:
    reply = (
        '{"questions": ['
        '{"question": "Q1", "options": ["a", "b", "c", "d"], "correctAnswerIndex": 2},'
        '{"question": "Q2", "options": ["a"], "correctAnswerIndex": 0},'
        '{"question": "Q3", "options": ["a", "b"], "correctAnswerIndex": 5},'
        '{"question": "Q4", "options": ["a", "b"]}'
        "]}"
    )
    questions = asyncio.run(make_ai(reply).quiz_questions("I am in class 10th."))
    assert [q["question"] for q in questions] == ["Q1", "Q4"]


def test_skill_details_requires_both_groups() -> None:
    ai = make_ai('{"technical": [{"name": "SQL", "explanation": "Queries"}]}')
    assert asyncio.run(ai.skill_details("Analyst")) is None

    ai = make_ai('{"technical": [{"name": "SQL"}], "soft": [{"name": "Teamwork"}, {"explanation": "?"}]}')
    assert asyncio.run(ai.skill_details("Analyst")) == {"technical": [{"name": "SQL"}], "soft": [{"name": "Teamwork"}]}


def test_child_analysis_needs_expected_keys() -> None:
    ai = make_ai('{"unexpected": true}', '{"swot": {"strengths": ["Logic"]}, "verdict": "High Potential"}')
    assert asyncio.run(ai.analyze_child_aptitude([], "5", "General")) is None
    analysis = asyncio.run(ai.analyze_child_aptitude([], "5", "Specific", "Doctor", iq_score=120))
    assert analysis["verdict"] == "High Potential"
    assert "Estimated IQ: 120" in ai.model.prompts[1][0]


def test_fee_answers_keep_not_found_apart_from_failures() -> None:
    ai = make_ai("```html\n<h3>Fees</h3>\n```", FEES_NOT_FOUND, "   ")
    assert asyncio.run(ai.academy_fees("Ace", "Pune")) == "<h3>Fees</h3>"
    assert asyncio.run(ai.academy_fees("Ace", "Pune")) == FEES_NOT_FOUND
    assert asyncio.run(ai.academy_fees("Ace", "Pune")) is None


def test_failed_reports_are_not_results() -> None:
    ai = make_ai(RuntimeError("quota"), "   ", "<h3>Overview</h3>")
    assert asyncio.run(ai.academy_overview("Ace", "Pune")) is None
    assert asyncio.run(ai.business_deep_dive("Cafe")) is None
    assert asyncio.run(ai.academy_overview("Ace", "Pune")) == "<h3>Overview</h3>"


def test_failed_deep_dive_returns_to_ideas_with_alert() -> None:
    ai = make_ai(RuntimeError("quota"))
    session = FormSession.start(BUSINESS_IDEA)
    state = ViewState(view="ideas")
    runner = TaskRunner(session, state)

    report = asyncio.run(
        runner.run(
            "deep-dive",
            lambda: ai.business_deep_dive("Cafe"),
            success_view="deep-dive",
            fallback_view="ideas",
            failure_message="Could not write the report.",
        )
    )

    assert report is None
    assert state.view == "ideas"
    assert state.alert == "Could not write the report."
    assert state.payload is None


def test_academy_roadmap_accepts_bare_array() -> None:
    ai = make_ai('[{"stage": "Beginner", "description": "Basics"}, {"description": "no stage"}]')
    assert asyncio.run(ai.academy_roadmap("Tennis", "Ace")) == [{"stage": "Beginner", "description": "Basics"}]


def test_image_returns_data_uri() -> None:
    part = SimpleNamespace(inline_data=SimpleNamespace(mime_type="image/png", data=b"\x89PNG"))
    response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])
    ai = make_ai(image=FakeModel(response))
    assert asyncio.run(ai.image("Pilot")) == "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()

    ai = make_ai(image=FakeModel(RuntimeError("no images")))
    assert asyncio.run(ai.image("Pilot")) is None


def test_parse_count_reads_suffixes() -> None:
    assert parse_count("1.2M") == 1_200_000
    assert parse_count("500K views") == 500_000
    assert parse_count("3B") == 3_000_000_000
    assert parse_count("1,234") == 1234
    assert parse_count(None) == 0
    assert parse_count("n/a") == 0


def test_rank_videos_by_views_then_likes() -> None:
    videos = [
        {"title": "a", "views": "900K", "likes": "10K"},
        {"title": "b", "views": "1.1M", "likes": "1K"},
        {"title": "c", "views": "900K", "likes": "20K"},
        {"title": "d", "views": "900K", "likes": "10K"},
    ]
    assert [v["title"] for v in rank_videos(videos)] == ["b", "c", "a", "d"]


def test_search_videos_keeps_playable_links() -> None:
    reply = (
        '{"videos": ['
        '{"title": "Photosynthesis basics", "url": "https://www.youtube.com/watch?v=a", "difficulty": "Easy", "views": "20K"},'
        '{"title": "No link", "url": ""},'
        '{"title": "Bad link", "url": "youtube.com/watch?v=b", "views": "9M"},'
        '{"title": "Light reactions", "url": "https://www.youtube.com/watch?v=c", "difficulty": "Expert", "views": "1.5M"}'
        "]}"
    )
    ai = make_ai(reply)
    videos = asyncio.run(ai.search_videos("Photosynthesis", "Class 10, Science"))
    assert [v["title"] for v in videos] == ["Light reactions", "Photosynthesis basics"]
    assert [v["difficulty"] for v in videos] == ["Medium", "Easy"]
    assert '"Photosynthesis"' in ai.model.prompts[0][0]

    assert asyncio.run(make_ai(RuntimeError("quota")).search_videos("Cells", "Class 8")) == []
