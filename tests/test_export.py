import json
from types import SimpleNamespace

from export import (
    build_assigned_test_pdf,
    build_business_analysis_pdf,
    build_child_assessment_pdf,
    build_deep_dive_pdf,
    build_json_summary,
    html_blocks,
)


def test_html_blocks_flatten_generated_markup() -> None:
    markup = "<h2>Market</h2><p>Growing <b>fast</b> &amp; wide</p><ul><li>Point one</li><li></li></ul>"
    assert html_blocks(markup) == [("heading", "Market"), ("text", "Growing fast & wide"), ("bullet", "Point one")]


def test_html_blocks_plain_text_fallback() -> None:
    assert html_blocks("Just text") == [("text", "Just text")]
    assert html_blocks(None) == []


def test_business_pdf_survives_markup_characters() -> None:
    analysis = {
        "ideaTitle": "Snacks <& more>",
        "ideaValidation": "Demand > supply",
        "marketAnalysis": {"summary": "Big", "marketSizeData": {"labels": ["2025"], "data": [12]}},
        "targetAudience": {"personaName": "Office workers"},
        "competitiveLandscape": [{"competitor": "A & B", "strength": "Brand", "weakness": "Price"}],
        "swotAnalysis": {"strengths": ["Fresh"], "threats": []},
        "uniqueSellingPropositions": ["Fast delivery"],
    }
    pdf = build_business_analysis_pdf(analysis)
    assert pdf.startswith(b"%PDF")


def test_deep_dive_and_child_reports_render() -> None:
    assert build_deep_dive_pdf("Cafe", "<h3>Plan</h3><li>Rent</li>").startswith(b"%PDF")
    pdf = build_child_assessment_pdf(
        {"name": "Meera", "class_level": "4", "test_type": "General"},
        {"score": 40, "total": 50, "percentage": 80.0, "iq": 134},
        {"verdict": "Strong", "swot": {"strengths": ["Logic"]}, "suggestions": [{"career": "Engineer", "reason": "Logic"}]},
    )
    assert pdf.startswith(b"%PDF")


def test_assigned_test_pdf_accepts_sparse_row() -> None:
    row = SimpleNamespace(
        student_name="Anu",
        student_email="anu@mail.com",
        student_class=None,
        test_type="Specific",
        job_details={"sector": "Healthcare", "job": "Doctor", "specialization": None},
        score=None,
        iq_score=None,
        verdict=None,
        analysis=None,
        swot=None,
        teaching_plan=None,
        suggestions=None,
    )
    assert build_assigned_test_pdf(row).startswith(b"%PDF")


def test_json_summary_is_indented_ascii() -> None:
    data = build_json_summary({"child": {"name": "Zoë"}, "score": 3})
    assert data.startswith(b'{\n  "child"')
    assert json.loads(data) == {"child": {"name": "Zoë"}, "score": 3}
