"""Gemini-backed generators for every AI feature in the app.

Each coroutine sends one prompt and asks for JSON. Transport errors and
malformed output are logged and turned into ``None`` or an empty list, so
callers only ever see a usable payload or an empty one.
"""

from __future__ import annotations

import base64
import json
import logging
import re
from typing import Any, Iterable

import google.generativeai as genai

logger = logging.getLogger(__name__)

JSON_CONFIG = {"response_mime_type": "application/json"}

FEES_NOT_FOUND = "NOT_FOUND"
# Shown in place of a failed report; never stored as a result.
OVERVIEW_FALLBACK = "<p>Could not fetch detailed overview at this time.</p>"
DEEP_DIVE_FALLBACK = "<p>Could not generate report.</p>"
VIDEO_DIFFICULTIES = ("Easy", "Medium", "Hard")

TOPIC_INSTRUCTIONS = (
    "You are an expert AI Study Assistant. Explain the topic clearly for a school student. "
    "Start with an <h3> title 'Easily Summarize this topic - {topic}', follow with short <p> paragraphs, "
    "use <h4> subheadings and <ul> lists for key points and <strong> for important terms. "
    "If the topic is visual, add a simple inline SVG diagram built from basic shapes. "
    "Return a single block of valid HTML without markdown code fences."
)


def strip_fences(text: str) -> str:
    text = (text or "").strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```html"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def extract_json(text: str | None) -> Any:
    if not text:
        return None
    cleaned = strip_fences(text)
    try:
        return json.loads(cleaned)
    except ValueError:
        pass
    # Models sometimes wrap the object in prose; fall back to the outermost braces.
    for opener, closer in (("{", "}"), ("[", "]")):
        start, end = cleaned.find(opener), cleaned.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(cleaned[start : end + 1])
            except ValueError:
                continue
    return None


def _response_text(response: Any) -> str:
    try:
        return response.text or ""
    except ValueError:
        # Blocked or empty candidates raise on .text
        return ""


def _items(data: Any, key: str | None, required: Iterable[str] = ()) -> list[dict[str, Any]]:
    if isinstance(data, dict) and key is not None:
        data = data.get(key)
    if not isinstance(data, list):
        return []
    required = tuple(required)
    return [item for item in data if isinstance(item, dict) and all(item.get(field) not in (None, "") for field in required)]


def _object(data: Any, required: Iterable[str] = ()) -> dict[str, Any] | None:
    if not isinstance(data, dict):
        return None
    if any(field not in data for field in required):
        return None
    return data


def parse_count(value: Any) -> float:
    """Read counts such as "1.2M", "500K" or "3B views" as a number."""
    text = re.sub(r"[^0-9.KMB]", "", str(value or "").upper())
    match = re.search(r"\d+(?:\.\d+)?", text)
    if match is None:
        return 0.0
    multiplier = 1_000_000 if "M" in text else 1_000 if "K" in text else 1_000_000_000 if "B" in text else 1
    return float(match.group()) * multiplier


def rank_videos(videos: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Most viewed first, ties broken by likes; equal videos keep their order."""
    return sorted(videos, key=lambda v: (parse_count(v.get("views")), parse_count(v.get("likes"))), reverse=True)


def _choice_questions(data: Any) -> list[dict[str, Any]]:
    questions = []
    for item in _items(data, "questions", ("question", "options")):
        options = item.get("options")
        if not isinstance(options, list) or len(options) < 2:
            continue
        answer = item.get("correctAnswerIndex")
        if answer is not None and not (isinstance(answer, int) and 0 <= answer < len(options)):
            continue
        questions.append(item)
    return questions


class CareerAI:
    def __init__(
        self,
        api_key: str | None = None,
        model_name: str = "gemini-1.5-flash",
        image_model_name: str = "gemini-2.0-flash-exp",
        model: Any = None,
        image_model: Any = None,
    ) -> None:
        if model is None or image_model is None:
            if api_key:
                genai.configure(api_key=api_key)
        self.model = model if model is not None else genai.GenerativeModel(model_name)
        self.image_model = image_model if image_model is not None else genai.GenerativeModel(image_model_name)

    async def _json(self, task: str, prompt: str) -> Any:
        try:
            response = await self.model.generate_content_async(prompt, generation_config=JSON_CONFIG)
        except Exception:
            logger.exception("Gemini call %s failed", task)
            return None
        data = extract_json(_response_text(response))
        if data is None:
            logger.warning("Gemini call %s returned no JSON", task)
        return data

    async def _text(self, task: str, prompt: str) -> str | None:
        try:
            response = await self.model.generate_content_async(prompt)
        except Exception:
            logger.exception("Gemini call %s failed", task)
            return None
        return strip_fences(_response_text(response)) or None

    # Career recommendations

    async def recommend_careers(self, class_level: str, stream: str, marks: Any) -> list[dict[str, Any]]:
        prompt = (
            "Based on the following student profile, suggest 5 suitable career paths: "
            f"Class: {class_level}, Stream: {stream or 'N/A'}, Marks: {marks}%. "
            "Return JSON {\"careers\": [{\"title\": ..., \"imageTag\": ...}]} where imageTag is a single simple "
            "English word for a stock photo search, e.g. coding, data, law, medical, design."
        )
        return _items(await self._json("recommend_careers", prompt), "careers", ("title",))

    async def recommend_advanced(self, profile: dict[str, Any]) -> list[dict[str, Any]]:
        prompt = (
            "A student is seeking career advice. Profile:\n"
            f"- Level: {profile.get('class_level')}, Stream: {profile.get('stream') or 'N/A'}, "
            f"Marks: {profile.get('marks') or 'N/A'}%\n"
            f"- Interests: {', '.join(profile.get('interests') or [])}\n"
            f"- Strengths: {', '.join(profile.get('strengths') or [])}\n"
            f"- Preferred environment: {', '.join(profile.get('environment') or [])}\n"
            f"- Goal: Find a {profile.get('goal')}\n"
            "Provide 3 diverse, actionable recommendations as JSON {\"recommendations\": [...]}. Each item has a "
            "concise \"title\" naming only the job or field of study, a 2-4 sentence \"description\" explaining "
            "why it fits, and an \"imageTag\"."
        )
        return _items(await self._json("recommend_advanced", prompt), "recommendations", ("title", "description"))

    async def skill_details(self, career_title: str) -> dict[str, Any] | None:
        prompt = (
            f'For a career as a "{career_title}", list the top 5 technical skills and top 3 soft skills. '
            'Return JSON {"technical": [{"name", "explanation"}], "soft": [{"name", "explanation"}]} '
            "with a one-sentence explanation each."
        )
        data = _object(await self._json("skill_details", prompt), ("technical", "soft"))
        if data is None:
            return None
        return {
            "technical": _items(data, "technical", ("name",)),
            "soft": _items(data, "soft", ("name",)),
        }

    async def interview_questions(self, career_title: str) -> list[dict[str, Any]]:
        prompt = (
            f'Generate 5 common interview questions for an entry-level position for "{career_title}". '
            'Return JSON {"questions": [{"question", "answer_explanation"}]} where answer_explanation '
            "describes how to structure a strong answer."
        )
        return _items(await self._json("interview_questions", prompt), "questions", ("question",))

    async def career_details(self, career_title: str) -> dict[str, Any] | None:
        prompt = (
            f'Provide a detailed career overview for "{career_title}". Return a JSON object with "title" '
            '(exact match), "description" (3-4 sentences) and "skills" (array of 7-8 skills).'
        )
        return _object(await self._json("career_details", prompt), ("title", "description"))

    async def roadmap(self, career_title: str) -> list[dict[str, Any]]:
        prompt = (
            f'Create a detailed, step-by-step roadmap for a beginner to become a "{career_title}". Provide 4-6 '
            'milestones as JSON {"roadmap": [{"title", "duration", "description"}]}.'
        )
        return _items(await self._json("roadmap", prompt), "roadmap", ("title",))

    async def jobs(self, career_title: str) -> list[dict[str, Any]]:
        prompt = (
            f'Generate a list of 10 fictional but realistic job opportunities for a "{career_title}". '
            'Return JSON {"jobs": [{"jobTitle", "companyName"}]}.'
        )
        return _items(await self._json("jobs", prompt), "jobs", ("jobTitle",))

    async def image(self, subject: str) -> str | None:
        prompt = f"A professional, high-quality photograph representing {subject}. Minimalist, blue and white theme."
        try:
            response = await self.image_model.generate_content_async(prompt)
        except Exception:
            logger.warning("Image generation failed for %s", subject, exc_info=True)
            return None
        for candidate in getattr(response, "candidates", None) or []:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                inline = getattr(part, "inline_data", None)
                if inline is not None and getattr(inline, "data", None):
                    data = inline.data
                    encoded = data if isinstance(data, str) else base64.b64encode(data).decode("ascii")
                    return f"data:{inline.mime_type};base64,{encoded}"
        return None

    # Aptitude quiz

    async def quiz_questions(self, student_context: str) -> list[dict[str, Any]]:
        prompt = (
            f"{student_context} Based on this, create 30 unique multiple-choice questions for a career aptitude "
            "test in 5 sets of 6 covering English, Math, Science, Social Science (or related subjects for the "
            'stream) and Aptitude. Return JSON {"questions": [{"question", "options" (4 strings), '
            '"correctAnswerIndex" (0-3)}]}.'
        )
        return _choice_questions(await self._json("quiz_questions", prompt))

    async def quiz_recommendations(
        self,
        answer_summary: str,
        score_percentage: float,
        class_level: str,
        stream: str | None,
        path_type: str,
        time_taken: str,
    ) -> list[dict[str, Any]]:
        wanted = "job and career paths" if path_type == "jobs" else "fields for higher studies"
        stream_part = f" ({stream})" if stream else ""
        prompt = (
            "Analyze the following student's aptitude test performance.\n"
            f"Profile: {class_level}{stream_part}.\n"
            f"Performance: Score {score_percentage:.1f}%, Time Taken: {time_taken}.\n\n"
            f"{answer_summary}\n\n"
            f"Based on their answering pattern and the score/time ratio, recommend the top 3 {wanted}. "
            'Return JSON {"recommendations": [{"title", "description" (2-3 sentences on why it fits), '
            '"imagePrompt" (a professional image prompt for the path)}]}.'
        )
        return _items(await self._json("quiz_recommendations", prompt), "recommendations", ("title",))

    # Child and teacher-assigned aptitude tests

    async def child_aptitude_test(self, class_level: str, test_type: str, specifics: str | None = None) -> list[dict[str, Any]]:
        if test_type == "Specific":
            prompt = (
                f"Create a 20-question aptitude test for a child in class {class_level} to assess their "
                f"suitability for the career/field of: {specifics}. Questions must be age-appropriate and test "
                "problem-solving, critical thinking and relevant knowledge."
            )
        else:
            prompt = (
                f"Create a 20-question general aptitude test for a child in class {class_level} assessing "
                "logical reasoning, verbal ability, numerical reasoning, spatial awareness and creativity."
            )
        prompt += (
            ' All questions are multiple choice with 4 options. Return JSON {"questions": [{"question", '
            '"options", "correctAnswerIndex"}]}.'
        )
        return _choice_questions(await self._json("child_aptitude_test", prompt))

    async def analyze_child_aptitude(
        self,
        answers: list[dict[str, Any]],
        class_level: str,
        test_type: str,
        specifics: str | None = None,
        iq_score: int | None = None,
    ) -> dict[str, Any] | None:
        header = (
            f"Based on the following test answers from a child in class {class_level} "
            f"(Estimated IQ: {iq_score or 'N/A'}), "
        )
        swot = '"swot": {"strengths": [], "weaknesses": [], "opportunities": [], "threats": []}'
        if test_type == "Specific":
            prompt = (
                header + f"provide a detailed aptitude analysis for the career of {specifics}: a SWOT analysis for "
                "this career, a personalised teaching plan that does not strain the student, a detailed paragraph "
                'analysis and a summary verdict such as "High Potential" or "Moderate Fit". '
                f"The answers are: {json.dumps(answers)}. Return JSON {{{swot}, \"teachingPlan\": \"...\", "
                '"analysis": "...", "verdict": "..."}.'
            )
            required = ("swot", "teachingPlan", "analysis", "verdict")
        else:
            prompt = (
                header + "analyze their performance: a detailed SWOT analysis, a personalised teaching plan that "
                "does not strain the student, and five suitable career paths with a brief reason each. "
                f"The answers are: {json.dumps(answers)}. Return JSON {{{swot}, \"teachingPlan\": \"...\", "
                '"suggestions": [{"career": "...", "reason": "..."}]}.'
            )
            required = ("swot", "teachingPlan", "suggestions")
        data = await self._json("analyze_child_aptitude", prompt)
        if not isinstance(data, dict) or not any(key in data for key in required):
            return None
        return data

    # Notes

    async def explain_topic(self, topic: str) -> str | None:
        prompt = TOPIC_INSTRUCTIONS.replace("{topic}", topic) + f"\n\nExplain the topic: {topic}"
        return await self._text("explain_topic", prompt)

    # Videos

    async def search_videos(self, topic: str, context: str) -> list[dict[str, Any]]:
        prompt = (
            f'Find 6-9 distinct educational YouTube videos about "{topic}" for a student in "{context}". '
            'Return a JSON array of objects with "title", a valid YouTube watch "url", "difficulty" '
            '("Easy", "Medium" or "Hard", estimated from the depth of the topic), "views" and "likes" as '
            'count strings such as "1.2M" or "500K". Prioritise popular content.'
        )
        videos = []
        for item in _items(await self._json("search_videos", prompt), "videos", ("title", "url")):
            if not str(item["url"]).startswith(("https://", "http://")):
                continue
            if item.get("difficulty") not in VIDEO_DIFFICULTIES:
                item = {**item, "difficulty": "Medium"}
            videos.append(item)
        return rank_videos(videos)

    # Sports academies

    async def academy_roadmap(self, sport: str, academy_name: str) -> list[dict[str, Any]]:
        prompt = (
            f"Generate a typical training roadmap for a {sport} athlete at an academy like '{academy_name}'. "
            'Return a JSON array of 3-4 objects with "stage", "description" and "competitions" keys. '
            "Keep descriptions concise."
        )
        return _items(await self._json("academy_roadmap", prompt), "roadmap", ("stage",))

    async def academy_fees(self, academy_name: str, address: str, kind: str = "academy") -> str | None:
        prompt = (
            f'Summarise the published fee structure of the {kind} named "{academy_name}" located at "{address}": '
            "admission, tuition or coaching fees and other costs. Return valid HTML only, using <h3> section titles, "
            "<ul>/<li> lists, <table> for packages and <strong> for prices. If no specific fee information is "
            f'known, respond with ONLY the text "{FEES_NOT_FOUND}".'
        )
        return await self._text("academy_fees", prompt)

    async def academy_overview(self, academy_name: str, address: str) -> str | None:
        prompt = (
            f'Give a comprehensive overview of the sports academy named "{academy_name}" located at "{address}": '
            "introduction, key facilities, coaching staff if known, achievements and reputation. Format the "
            "output in HTML using <h3>, <p>, <ul> and <li> tags."
        )
        return await self._text("academy_overview", prompt)

    # Business blaster

    async def analyze_business_idea(self, idea: str, problem: str, solution: str) -> dict[str, Any] | None:
        prompt = (
            "Perform a deep research analysis for the following business idea. "
            f"Idea: {idea}. Problem it solves: {problem}. Unique solution: {solution}. "
            'Return a JSON object with: "ideaTitle", "ideaValidation", "marketAnalysis" {"summary", '
            '"marketSizeData" {"labels": ["Year 1".."Year 5"], "data": [5 numbers in USD millions]}}, '
            '"targetAudience" {"personaName", "demographics", "painPoints", "goals"}, "competitiveLandscape" '
            '[{"competitor", "strength", "weakness"} x3], "swotAnalysis" {"strengths", "weaknesses", '
            '"opportunities", "threats"}, "uniqueSellingPropositions" [3 strings].'
        )
        return _object(await self._json("analyze_business_idea", prompt), ("ideaTitle",))

    async def business_guidance(self, idea_title: str) -> dict[str, Any] | None:
        prompt = (
            f'Create a detailed step-by-step guidance plan for the business idea: "{idea_title}". Return JSON '
            '{"title": "Your Roadmap to Success", "phases": [{"phaseTitle", "phaseDescription", "timeline", '
            '"budgetDistribution" {category: percent}, "keyTasks" [{"task", "priority", "details"}], '
            '"milestones" [..]}]} with three phases: Foundation & Research, Product Development & Branding, '
            "Launch & Growth."
        )
        data = _object(await self._json("business_guidance", prompt), ("phases",))
        if data is None or not _items(data, "phases", ("phaseTitle",)):
            return None
        return data

    async def business_quiz(self) -> list[dict[str, Any]]:
        prompt = (
            "Generate 10 multiple-choice questions designed to subtly reveal a user's ideal business sector. "
            "Use scenarios, preferences and problem-solving situations rather than direct questions, gauging "
            "affinity for Technology/Software, Fashion/Apparel, Food & Hospitality, Creative Arts, E-commerce "
            'and Service-based industries. Return JSON {"questions": [{"question", "options"}]}.'
        )
        return _choice_questions(await self._json("business_quiz", prompt))

    async def evaluate_business_quiz(self, answers: list[dict[str, str]]) -> list[dict[str, Any]]:
        prompt = (
            f"Based on these user answers: {json.dumps(answers)}, generate 10 innovative and diverse business "
            "ideas tailored to the user's profile, each with a catchy title and a one-sentence description. "
            'Return JSON {"ideas": [{"title", "description"}]}.'
        )
        return _items(await self._json("evaluate_business_quiz", prompt), "ideas", ("title",))

    async def business_deep_dive(self, idea_title: str) -> str | None:
        prompt = (
            f'Provide a deep research report for a business idea titled "{idea_title}". Cover: 1. Business Idea, '
            "2. Unique Selling Proposition, 3. Market Analysis (target audience, market size, competition), "
            "4. Future Potential and 5. a comprehensive SWOT Analysis. Use <h3> tags for each section and "
            "<ul>/<li> for lists. The output must be a single block of HTML with no markdown."
        )
        return await self._text("business_deep_dive", prompt)
