from __future__ import annotations

import json
from html import escape
from typing import Any, Iterable

import streamlit as st
import streamlit.components.v1 as components

from quiz import ANSWERED, NOT_ANSWERED, NOT_VISITED, SKIPPED

BRAND_BLUE = "#3BB0FF"

PALETTE_CLASSES = {
    NOT_VISITED: "jq-q-idle",
    NOT_ANSWERED: "jq-q-open",
    ANSWERED: "jq-q-done",
    SKIPPED: "jq-q-skip",
}

CASHFREE_SDK = "https://sdk.cashfree.com/js/v3/cashfree.js"


def inject_css() -> None:
    st.markdown(
        f"""
        <style>
            :root {{
                --jq-blue: {BRAND_BLUE};
                --jq-dark: #1a6fb0;
                --jq-text: #1f2a37;
                --jq-muted: #64748b;
                --jq-border: #dbe7f3;
            }}
            [data-testid="stAppViewContainer"] {{
                background: linear-gradient(180deg, #ffffff 0%, #f3f9ff 100%);
                color: var(--jq-text);
            }}
            [data-testid="stSidebar"] {{
                background: #0f3d62;
            }}
            [data-testid="stSidebar"] * {{
                color: #eef6ff !important;
            }}
            .stButton > button[kind="primary"] {{
                background: var(--jq-blue);
                border-color: var(--jq-blue);
            }}
            .jq-card {{
                background: #ffffff;
                border: 1px solid var(--jq-border);
                border-radius: 14px;
                padding: 1rem 1.1rem;
                margin-bottom: 0.8rem;
                box-shadow: 0 4px 14px rgba(15, 61, 98, 0.06);
            }}
            .jq-card h4 {{ margin: 0 0 0.35rem 0; color: var(--jq-dark); }}
            .jq-card img {{ width: 100%; border-radius: 10px; margin-bottom: 0.6rem; }}
            .jq-muted {{ color: var(--jq-muted); font-size: 0.9rem; }}
            .jq-chip {{
                display: inline-block;
                padding: 0.15rem 0.6rem;
                margin: 0 0.3rem 0.3rem 0;
                border-radius: 999px;
                background: #e8f5ff;
                color: var(--jq-dark);
                font-size: 0.82rem;
            }}
            .jq-stepper {{ display: flex; gap: 0.4rem; flex-wrap: wrap; margin-bottom: 0.4rem; }}
            .jq-step {{
                padding: 0.2rem 0.7rem;
                border-radius: 999px;
                border: 1px solid var(--jq-border);
                color: var(--jq-muted);
                font-size: 0.82rem;
            }}
            .jq-step.done {{ background: #e8f5ff; color: var(--jq-dark); }}
            .jq-step.active {{ background: var(--jq-blue); color: #ffffff; border-color: var(--jq-blue); }}
            .jq-meter-head {{ display: flex; justify-content: space-between; font-size: 0.85rem; }}
            .jq-meter-track {{ background: #e6eef6; border-radius: 999px; height: 8px; overflow: hidden; }}
            .jq-meter-fill {{ background: var(--jq-blue); height: 100%; }}
            .jq-palette {{ display: grid; grid-template-columns: repeat(6, 1fr); gap: 0.35rem; }}
            .jq-palette span {{
                text-align: center;
                border-radius: 8px;
                padding: 0.25rem 0;
                font-size: 0.8rem;
                border: 2px solid transparent;
            }}
            .jq-palette span.current {{ border-color: var(--jq-text); }}
            .jq-q-idle {{ background: #eef2f7; color: #475569; }}
            .jq-q-open {{ background: #fde2e1; color: #9b1c1c; }}
            .jq-q-done {{ background: #dcfce7; color: #166534; }}
            .jq-q-skip {{ background: #fef3c7; color: #92400e; }}
            .jq-swot h5 {{ margin: 0.3rem 0; }}
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_progress(step: int, total: int, titles: Iterable[str] | None = None) -> None:
    labels = list(titles or [])
    chips = []
    for i in range(1, total + 1):
        klass = "jq-step"
        if i < step:
            klass += " done"
        elif i == step:
            klass += " active"
        label = labels[i - 1] if i - 1 < len(labels) else f"Step {i}"
        chips.append(f"<span class='{klass}'>{escape(label)}</span>")
    st.markdown(f"<div class='jq-stepper'>{''.join(chips)}</div>", unsafe_allow_html=True)
    render_meter("Progress", step / max(1, total), f"Step {step}/{total}")


def render_meter(label: str, pct: float, value_text: str | None = None) -> None:
    pct = max(0.0, min(1.0, pct))
    pct_text = value_text or f"{int(round(pct * 100))}%"
    st.markdown(
        f"""
        <div class="jq-meter-head"><span>{escape(label)}</span><span>{escape(pct_text)}</span></div>
        <div class="jq-meter-track"><div class="jq-meter-fill" style="width: {pct * 100:.1f}%;"></div></div>
        """,
        unsafe_allow_html=True,
    )


def render_field_error(errors: dict[str, str], name: str) -> None:
    if name in errors:
        st.caption(f":red[{errors[name]}]")


def render_card(title: str, body: str | None = None, image: str | None = None, chips: Iterable[str] = ()) -> None:
    image_html = f"<img src='{escape(image, quote=True)}' alt=''/>" if image else ""
    chips_html = "".join(f"<span class='jq-chip'>{escape(str(c))}</span>" for c in chips if c)
    body_html = f"<div class='jq-muted'>{escape(body)}</div>" if body else ""
    st.markdown(
        f"<div class='jq-card'>{image_html}<h4>{escape(title)}</h4>{chips_html}{body_html}</div>",
        unsafe_allow_html=True,
    )


def render_alert(alert: str | None) -> None:
    if alert:
        st.error(alert)


def render_view_state(state: Any) -> None:
    """Status of the last run, then its alert.

    A run still marked as loading when the page draws was cut off by a rerun
    before it finished.
    """
    if state.loading:
        st.warning(f"{state.status_text or 'Loading...'} Interrupted before it finished. Please try again.")
    render_alert(state.alert)


def render_generated_html(markup: str | None, empty_text: str = "Nothing to show yet.") -> None:
    """Show model-written HTML; Streamlit strips scripts from markdown HTML."""
    if markup:
        st.markdown(markup, unsafe_allow_html=True)
    else:
        st.info(empty_text)


def render_swot(swot: dict[str, Any] | None) -> None:
    if not swot:
        return
    cols = st.columns(2)
    for idx, key in enumerate(("strengths", "weaknesses", "opportunities", "threats")):
        with cols[idx % 2]:
            st.markdown(f"**{key.capitalize()}**")
            for item in swot.get(key) or []:
                st.write(f"- {item}")


def render_quiz_palette(statuses: list[str], current: int) -> None:
    cells = []
    for idx, status in enumerate(statuses):
        klass = PALETTE_CLASSES.get(status, "jq-q-idle")
        if idx == current:
            klass += " current"
        cells.append(f"<span class='{klass}'>{idx + 1}</span>")
    st.markdown(f"<div class='jq-palette'>{''.join(cells)}</div>", unsafe_allow_html=True)
    st.caption("Grey: not visited | Red: not answered | Green: answered | Amber: skipped")


def render_checkout(payment_session_id: str, mode: str) -> None:
    """Open Cashfree's hosted checkout for an order session."""
    sdk_mode = "production" if mode.upper() == "PRODUCTION" else "sandbox"
    components.html(
        f"""
        <script src="{CASHFREE_SDK}"></script>
        <script>
            const cashfree = Cashfree({{ mode: "{sdk_mode}" }});
            cashfree.checkout({{ paymentSessionId: {json.dumps(payment_session_id)}, redirectTarget: "_top" }});
        </script>
        """,
        height=0,
    )
