from __future__ import annotations

import html
import io
import json
import re
from datetime import datetime, timezone
from typing import Any

from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

_BLOCK_RE = re.compile(r"<(h[1-6]|p|li)[^>]*>(.*?)</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
SWOT_KEYS = ("strengths", "weaknesses", "opportunities", "threats")


def _safe_text(value: Any) -> str:
    if value is None or value == "":
        return "-"
    # Paragraph parses a small markup language; escape everything we did not write.
    return html.escape(str(value))


def _plain(fragment: str) -> str:
    return html.unescape(_TAG_RE.sub("", fragment)).strip()


def html_blocks(markup: str | None) -> list[tuple[str, str]]:
    """Flatten generated HTML into (kind, text) blocks: heading, bullet or text."""
    if not markup:
        return []
    blocks = []
    for tag, inner in _BLOCK_RE.findall(markup):
        text = _plain(inner)
        if not text:
            continue
        tag = tag.lower()
        kind = "heading" if tag.startswith("h") else "bullet" if tag == "li" else "text"
        blocks.append((kind, text))
    if not blocks:
        text = _plain(markup)
        if text:
            blocks.append(("text", text))
    return blocks


class _Report:
    def __init__(self, title: str) -> None:
        self.buffer = io.BytesIO()
        self.doc = SimpleDocTemplate(self.buffer, pagesize=A4, title=title)
        self.styles = getSampleStyleSheet()
        self.story: list[Any] = [
            Paragraph(_safe_text(title), self.styles["Title"]),
            Paragraph(f"Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M')} UTC", self.styles["BodyText"]),
            Spacer(1, 12),
        ]

    def heading(self, text: Any, level: int = 2) -> None:
        self.story.append(Paragraph(_safe_text(text), self.styles[f"Heading{level}"]))

    def text(self, text: Any) -> None:
        self.story.append(Paragraph(_safe_text(text), self.styles["BodyText"]))

    def field(self, label: str, value: Any) -> None:
        self.story.append(Paragraph(f"<b>{html.escape(label)}:</b> {_safe_text(value)}", self.styles["BodyText"]))

    def bullets(self, items: Any) -> None:
        items = [item for item in items or [] if item not in (None, "")]
        if not items:
            self.text("-")
        for item in items:
            self.text(f"- {item}")

    def swot(self, swot: dict[str, Any] | None) -> None:
        self.heading("SWOT Analysis")
        for key in SWOT_KEYS:
            self.heading(key.capitalize(), 3)
            self.bullets((swot or {}).get(key))

    def markup(self, markup: str | None) -> None:
        for kind, text in html_blocks(markup):
            if kind == "heading":
                self.heading(text, 3)
            elif kind == "bullet":
                self.text(f"- {text}")
            else:
                self.text(text)

    def spacer(self, height: int = 8) -> None:
        self.story.append(Spacer(1, height))

    def build(self) -> bytes:
        self.doc.build(self.story)
        self.buffer.seek(0)
        return self.buffer.read()


def build_business_analysis_pdf(analysis: dict[str, Any]) -> bytes:
    report = _Report(f"Business Analysis: {analysis.get('ideaTitle') or 'Your Idea'}")
    report.heading("Idea Validation")
    report.text(analysis.get("ideaValidation"))
    report.spacer()

    market = analysis.get("marketAnalysis") or {}
    report.heading("Market Analysis")
    report.text(market.get("summary"))
    size = market.get("marketSizeData") or {}
    for label, value in zip(size.get("labels") or [], size.get("data") or []):
        report.field(str(label), f"USD {value}M")
    report.spacer()

    audience = analysis.get("targetAudience") or {}
    report.heading("Target Audience")
    report.field("Persona", audience.get("personaName"))
    report.field("Demographics", audience.get("demographics"))
    report.field("Pain points", audience.get("painPoints"))
    report.field("Goals", audience.get("goals"))
    report.spacer()

    report.heading("Competitive Landscape")
    for competitor in analysis.get("competitiveLandscape") or []:
        report.heading(competitor.get("competitor"), 3)
        report.field("Strength", competitor.get("strength"))
        report.field("Weakness", competitor.get("weakness"))
    report.spacer()

    report.swot(analysis.get("swotAnalysis"))
    report.heading("Unique Selling Propositions")
    report.bullets(analysis.get("uniqueSellingPropositions"))
    return report.build()


def build_deep_dive_pdf(title: str, report_html: str | None) -> bytes:
    report = _Report(f"Deep Dive: {title}")
    report.markup(report_html)
    return report.build()


def build_child_assessment_pdf(
    child: dict[str, Any],
    result: dict[str, Any],
    analysis: dict[str, Any] | None,
) -> bytes:
    report = _Report(f"Aptitude Assessment: {child.get('name') or 'Student'}")
    report.heading("Profile")
    report.field("Name", child.get("name"))
    report.field("Class", child.get("class_level"))
    report.field("Test type", child.get("test_type"))
    if child.get("career"):
        report.field("Career focus", child.get("career"))
    report.spacer()

    report.heading("Scores")
    report.field("Score", f"{result.get('score', 0)}/{result.get('total', 0)}")
    report.field("Percentage", f"{result.get('percentage', 0):.0f}%")
    report.field("Estimated IQ", result.get("iq"))
    report.spacer()

    analysis = analysis or {}
    if analysis.get("verdict"):
        report.heading("Verdict")
        report.text(analysis.get("verdict"))
    if analysis.get("analysis"):
        report.heading("Analysis")
        report.text(analysis.get("analysis"))
    report.swot(analysis.get("swot"))
    report.heading("Teaching Plan")
    report.text(analysis.get("teachingPlan"))
    if analysis.get("suggestions"):
        report.heading("Suggested Careers")
        for suggestion in analysis["suggestions"]:
            report.field(str(suggestion.get("career") or "-"), suggestion.get("reason"))
    return report.build()


def build_assigned_test_pdf(test: Any) -> bytes:
    """Report for a completed teacher-assigned test row."""
    report = _Report(f"Test Report: {test.student_name}")
    report.field("Student", test.student_name)
    report.field("Email", test.student_email)
    report.field("Class", test.student_class)
    report.field("Test type", test.test_type)
    if test.job_details:
        report.field("Career focus", " / ".join(v for v in test.job_details.values() if v))
    report.field("Score", test.score)
    report.field("Estimated IQ", test.iq_score)
    report.field("Verdict", test.verdict)
    report.spacer()
    if test.analysis:
        report.heading("Analysis")
        report.text(test.analysis)
    if test.swot:
        report.swot(test.swot)
    if test.teaching_plan:
        report.heading("Teaching Plan")
        report.text(test.teaching_plan)
    for suggestion in test.suggestions or []:
        report.field(str(suggestion.get("career") or "-"), suggestion.get("reason"))
    return report.build()


def build_json_summary(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, indent=2, ensure_ascii=True, default=str).encode("utf-8")
