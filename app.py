from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Callable
from urllib.parse import quote

import pandas as pd
import streamlit as st
from sqlalchemy import select

from access import SECTION_FEATURES, can_access_section, check_access, is_locked
from admin import delete_user, expired_users, send_renewal_emails, set_renewal_date, user_activity_logs
from ai import DEEP_DIVE_FALLBACK, FEES_NOT_FOUND, OVERVIEW_FALLBACK, VIDEO_DIFFICULTIES, CareerAI
from artifacts import (
    ACADEMIES,
    BUSINESS_IDEAS,
    academy_artifact,
    business_artifact,
    contains,
    list_saved,
    remove_artifact,
    save_artifact,
    toggle_saved,
)
from assignments import (
    AssignmentCompleted,
    AssignmentError,
    assignment_link,
    assignments_for_teacher,
    average_iq,
    complete_test,
    create_test,
    find_test_for_login,
    invitation_email,
    latest_completed,
    pending_for,
    roster,
    store_analysis,
)
from auth import (
    AccountError,
    authenticate_user,
    ensure_profile_defaults,
    get_user_by_id,
    register_user,
    set_subscription,
    update_profile,
)
from db import db_session, init_schema
from eligibility import INDIAN_STATES, SPORTS_LIST, academy_search_query, cities_for, evaluate_eligibility, sanitize_age_input
from export import (
    build_assigned_test_pdf,
    build_business_analysis_pdf,
    build_child_assessment_pdf,
    build_deep_dive_pdf,
    build_json_summary,
)
from flows import (
    CAREER_DATA,
    CAREER_FORM,
    CAREER_PATH,
    CAREER_PATH_GOAL_STEP,
    CHILD_ABILITY,
    BUSINESS_IDEA,
    FEE_STRUCTURE,
    NOTES_BROWSER,
    QUIZ_SETUP,
    SPORTS,
    TEACHER_TEST,
    hierarchy_path,
    jobs_for_sector,
    quiz_context,
    specializations_for,
    specific_career_label,
)
from handoff import ACADEMY_KEY, BUSINESS_IDEA_KEY, HandoffStore, business_view_for
from mailer import Mailer, MailerError
from models import AuditLog, User
from notes import children, notes_for
from payments import PLANS, PaymentError, confirm_order, create_order, latest_order, subscription_status
from places import build_lookup, institution_search_query
from questionnaire import PHASE_SUBMITTING, FieldSpec, FlowSpec, FormSession, Navigator
from quiz import (
    QUESTION_SECONDS,
    BusinessQuizSession,
    ChildTestSession,
    QuizSession,
    answer_summary,
    answers_for_analysis,
    answers_for_child_analysis,
    score_answers,
)
from results import DETAIL, FEES, INTERVIEW, JOBS, LIST, ROADMAP, SKILLS, DetailNavigator
from runner import TaskRunner, ViewState, gather_images, stream_images
from seed import seed_all
from settings import configure_logging, load_settings
from teacher_notes import NoteReviewError, approve_review, my_uploads, pending_reviews, reject_review, submit_note
from ui import (
    inject_css,
    render_card,
    render_checkout,
    render_field_error,
    render_generated_html,
    render_meter,
    render_progress,
    render_quiz_palette,
    render_swot,
    render_view_state,
)

SETTINGS = load_settings()
configure_logging(SETTINGS.log_level)
logger = logging.getLogger(__name__)

st.set_page_config(page_title="JurniQ Careers", layout="wide")
inject_css()

PAGES = {
    "home": "Home",
    "career-form": "Find Your Career",
    "career-path": "Career Path",
    "quiz": "Aptitude Quiz",
    "sport": "Sports Academies",
    "business": "Business Blaster",
    "notes": "Study Notes",
    "videos": "Videos",
    "child-ability": "Child Ability",
    "fee-structure": "Fee Structure",
    "teach-ability": "Teach Ability",
    "teacher-notes": "Teacher Notes",
    "test": "Take Assigned Test",
    "dashboard": "Dashboard",
    "subscription": "Subscription",
    "contact": "Contact Us",
    "admin": "Admin",
    "login": "Login / Register",
}

# Dashboard feature cards open these pages.
FEATURE_PAGES = {
    "career-path": "career-path",
    "quiz": "quiz",
    "sport": "sport",
    "business": "business",
    "notes": "notes",
    "videos": "videos",
    "child-ability": "child-ability",
    "fee-structure": "fee-structure",
    "teach-ability": "teach-ability",
    "teacher-notes": "teacher-notes",
}

SECTION_PLAN_NAMES = {"parents-section": "Parent", "teacher-section": "Teacher"}

FEATURE_LABELS = {
    "career-path": "Career Path",
    "sport": "Sports Academies",
    "notes": "Study Notes",
    "business": "Business Blaster",
    "videos": "Videos",
    "quiz": "Aptitude Quiz",
    "child-ability": "Child Ability",
    "fee-structure": "Fee Structure",
    "teach-ability": "Teach Ability",
    "teacher-notes": "Teacher Notes",
}

ANALYSIS_MISSING = "Analysis not available."


@st.cache_resource
def bootstrap() -> None:
    init_schema()
    with db_session() as db:
        seed_all(db)


def get_ai() -> CareerAI:
    # A fresh client per script run; async transports are bound to the loop that created them.
    return CareerAI(
        api_key=SETTINGS.gemini_api_key,
        model_name=SETTINGS.gemini_model,
        image_model_name=SETTINGS.gemini_image_model,
    )


def run_async(coro: Any) -> Any:
    return asyncio.run(coro)


def handoff() -> HandoffStore:
    return HandoffStore(st.session_state)


def log_action(user_id: str | None, action: str, details: dict[str, Any]) -> None:
    with db_session() as db:
        db.add(AuditLog(user_id=uuid.UUID(user_id) if user_id else None, action=action, details_json=details))


def _profile_dict(user: User) -> dict[str, Any]:
    return {
        "id": str(user.id),
        "role": user.role,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "profile_pic": user.profile_pic,
        "is_subscribed": user.is_subscribed,
        "subscription_model": user.subscription_model,
        "saved_academies": list_saved(user, ACADEMIES),
        "saved_business_ideas": list_saved(user, BUSINESS_IDEAS),
    }


def get_current_user() -> dict[str, Any] | None:
    auth_payload = st.session_state.get("auth_user")
    if not auth_payload:
        return None
    with db_session() as db:
        user = get_user_by_id(db, auth_payload["id"])
        if not user:
            st.session_state.pop("auth_user", None)
            return None
        ensure_profile_defaults(user)
        return _profile_dict(user)


def _query_get(key: str, default: str | None = None) -> str | None:
    value = st.query_params.get(key, default)
    if isinstance(value, list):
        return value[0] if value else default
    return value


def _query_set(**kwargs: str | None) -> None:
    for key, value in kwargs.items():
        current = _query_get(key)
        if value is None:
            if current is not None and key in st.query_params:
                del st.query_params[key]
        elif current != value:
            st.query_params[key] = value


def navigate(page: str) -> None:
    st.session_state["page"] = page
    _query_set(page=page)
    st.rerun()


def require_feature(user: dict[str, Any] | None, feature: str) -> bool:
    decision = check_access(user, feature)
    if decision.allowed:
        return True
    label = FEATURE_LABELS.get(feature, feature)
    if decision.redirect == "login":
        st.warning(f"Please log in to use {label}.")
        if st.button("Go to login", key=f"gate_login_{feature}"):
            navigate("login")
    else:
        st.info(f"{label} is part of a paid plan. Upgrade to unlock it.")
        if st.button("See plans", key=f"gate_plans_{feature}"):
            navigate("subscription")
    return False


# Form widgets


def flow_state(prefix: str, flow: FlowSpec, view: str = "form") -> dict[str, Any]:
    if prefix not in st.session_state:
        session = FormSession.start(flow)
        navigator = Navigator(session)
        state = ViewState(view=view)
        st.session_state[prefix] = {
            "session": session,
            "navigator": navigator,
            "view": state,
            "runner": TaskRunner(session, state, navigator),
        }
    return st.session_state[prefix]


def reset_flow(fs: dict[str, Any], view: str = "form", keep: tuple[str, ...] = ()) -> None:
    fs["runner"].reset(view)
    for key in list(fs):
        if key not in {"session", "navigator", "view", "runner", *keep}:
            fs.pop(key)


def _widget_key(prefix: str, session: FormSession, name: str) -> str:
    return f"{prefix}:{session.generation}:{name}"


def _drop_stale_widgets(prefix: str, session: FormSession) -> None:
    for step in session.flow.steps:
        for spec in step.fields:
            key = _widget_key(prefix, session, spec.name)
            if spec.kind != "multi" and key in st.session_state and st.session_state[key] != session.get(spec.name):
                del st.session_state[key]


def _on_value_change(prefix: str, session: FormSession, name: str, transform: Callable[[Any], Any] | None) -> None:
    value = st.session_state.get(_widget_key(prefix, session, name))
    session.set(name, transform(value) if transform else value)
    _drop_stale_widgets(prefix, session)


def _on_toggle(session: FormSession, name: str, option: str, key: str) -> None:
    session.toggle(name, option)
    if st.session_state.get(key) != (option in session.selection(name)):
        # Over the limit: let the checkbox redraw from the session.
        del st.session_state[key]


def render_field(
    prefix: str,
    session: FormSession,
    spec: FieldSpec,
    options: list[Any] | None = None,
    labels: dict[str, str] | None = None,
    transform: Callable[[Any], Any] | None = None,
) -> None:
    if not spec.is_active(session.branch_flags):
        return
    key = _widget_key(prefix, session, spec.name)
    value = session.get(spec.name)
    args = (prefix, session, spec.name, transform)

    if spec.kind == "multi":
        opts = list(options if options is not None else spec.options)
        hint = f" (choose up to {spec.limit})" if spec.limit else ""
        st.markdown(f"**{spec.label}**{hint}")
        selected = session.selection(spec.name)
        cols = st.columns(3)
        for idx, option in enumerate(opts):
            option_key = f"{key}:{option}"
            with cols[idx % 3]:
                st.checkbox(
                    option,
                    value=option in selected,
                    key=option_key,
                    on_change=_on_toggle,
                    args=(session, spec.name, option, option_key),
                )
    elif spec.kind == "single":
        opts = list(options if options is not None else spec.options)
        st.selectbox(
            spec.label,
            opts,
            index=opts.index(value) if value in opts else None,
            placeholder=f"Select {spec.label.lower()}",
            format_func=(lambda v: labels.get(v, v)) if labels else str,
            key=key,
            on_change=_on_value_change,
            args=args,
        )
    elif spec.kind == "number":
        st.number_input(
            spec.label,
            min_value=spec.minimum,
            max_value=spec.maximum,
            value=value if value not in (None, "") else spec.minimum,
            step=1,
            key=key,
            on_change=_on_value_change,
            args=args,
        )
    else:
        st.text_input(spec.label, value=str(value or ""), key=key, on_change=_on_value_change, args=args)
    render_field_error(session.errors, spec.name)


def render_flow_inputs(
    prefix: str,
    fs: dict[str, Any],
    options: dict[str, list[Any]] | None = None,
    transforms: dict[str, Callable[[Any], Any]] | None = None,
    submit_label: str = "Submit",
) -> bool:
    """Draw the current step; True when the last step was just submitted."""
    session: FormSession = fs["session"]
    navigator: Navigator = fs["navigator"]
    options = options or {}
    transforms = transforms or {}
    if session.step_count > 1:
        render_progress(session.current_step_index + 1, session.step_count, [s.title for s in session.flow.steps])
    st.subheader(session.step.title)
    for spec in session.step.fields:
        render_field(prefix, session, spec, options.get(spec.name), transform=transforms.get(spec.name))

    back_col, next_col = st.columns(2)
    if session.current_step_index > 0 and back_col.button("Back", key=f"{prefix}:back"):
        navigator.back()
        st.rerun()
    label = submit_label if session.is_last_step else "Next"
    if next_col.button(label, type="primary", key=f"{prefix}:next"):
        if not navigator.next():
            st.rerun()
        if session.phase == PHASE_SUBMITTING:
            return True
        st.rerun()
    return False


# Result views


def render_skills(skills: dict[str, Any]) -> None:
    for group, title in (("technical", "Technical skills"), ("soft", "Soft skills")):
        st.markdown(f"**{title}**")
        for skill in skills.get(group) or []:
            st.write(f"- **{skill.get('name')}**: {skill.get('explanation', '')}")


def render_interview(questions: list[dict[str, Any]]) -> None:
    for item in questions:
        with st.expander(item.get("question", "Question")):
            st.write(item.get("answer_explanation", ""))


def render_roadmap(steps: list[dict[str, Any]]) -> None:
    for idx, step in enumerate(steps, start=1):
        st.markdown(f"**{idx}. {step.get('title', '')}**" + (f" ({step['duration']})" if step.get("duration") else ""))
        st.write(step.get("description", ""))


def render_jobs(jobs: list[dict[str, Any]]) -> None:
    frame = pd.DataFrame(jobs).rename(columns={"jobTitle": "Job title", "companyName": "Company"})
    st.dataframe(frame, use_container_width=True, hide_index=True)


def render_fees(fees: str | None, subject: str = "academy") -> None:
    if fees is None:
        st.warning("Could not load fee details right now. Please try again.")
    elif fees.strip() == FEES_NOT_FOUND:
        st.info(f"Fee details are not published for this {subject}. Contact them directly.")
    else:
        render_generated_html(fees)


def render_detail_nav(prefix: str, nav: DetailNavigator) -> bool:
    """Back button for a drill-down; True when navigation changed."""
    if nav.state != LIST and st.button("Back", key=f"{prefix}:nav_back:{nav.state}"):
        nav.back()
        return True
    return False


def enter_view(nav: DetailNavigator, view: str, loader: Callable[[str], Any], status: str) -> None:
    with st.spinner(status):
        run_async(nav.enter(view, loader, status=status, failure_message="Could not load this section. Please try again."))
    st.rerun()


# Pages


def render_home(user: dict[str, Any] | None) -> None:
    st.title("JurniQ Careers")
    st.write("Discover careers, test your aptitude and plan the next step with AI-guided tools.")
    cols = st.columns(3)
    cards = [
        ("career-form", "Find Your Career", "Five career ideas from your class, stream and marks."),
        ("career-path", "Career Path", "A guided questionnaire with skills, interview prep and roadmaps."),
        ("quiz", "Aptitude Quiz", "A 30-question timed test with recommendations."),
        ("sport", "Sports Academies", "Check eligibility and explore academies near you."),
        ("business", "Business Blaster", "Validate an idea or discover one that suits you."),
        ("notes", "Study Notes", "Notes and AI explanations by topic."),
    ]
    for idx, (page, title, body) in enumerate(cards):
        with cols[idx % 3]:
            render_card(title, body)
            if st.button("Open", key=f"home_{page}"):
                navigate(page)


def render_career_form_page(user: dict[str, Any] | None) -> None:
    prefix = "career_form"
    fs = flow_state(prefix, CAREER_FORM)
    session, state, runner = fs["session"], fs["view"], fs["runner"]
    st.title("Find Your Career")
    render_view_state(state)

    if state.view == "form":
        if user and not session.get("full_name"):
            session.set("full_name", user.get("name") or "")
        if render_flow_inputs(prefix, fs, submit_label="Find careers"):
            answers = session.payload()
            ai = get_ai()

            async def operation() -> Any:
                careers = await ai.recommend_careers(answers["class_level"], answers.get("stream") or "", answers["marks"])
                if not careers:
                    return []
                return {"careers": careers, "images": await gather_images(careers, ai.image)}

            with st.spinner("Finding careers for you..."):
                run_async(runner.run(prefix, operation, status="Finding careers...", success_view="results"))
            if state.view == "results":
                fs["details"] = DetailNavigator(runner, state.payload["careers"])
                log_action(user["id"] if user else None, "career_form_submitted", {"class_level": answers["class_level"]})
            st.rerun()
        return

    nav: DetailNavigator = fs["details"]
    images = state.payload.get("images", {})
    if st.button("Start over", key=f"{prefix}:reset"):
        reset_flow(fs)
        st.rerun()
    if render_detail_nav(prefix, nav):
        st.rerun()
    ai = get_ai()

    if nav.state == LIST:
        cols = st.columns(2)
        for idx, career in enumerate(nav.items):
            with cols[idx % 2]:
                render_card(career["title"], image=images.get(career["title"]))
                if st.button("View details", key=f"{prefix}:open:{idx}"):
                    with st.spinner("Loading career details..."):
                        run_async(nav.open(idx, ai.career_details, failure_message="Could not load career details."))
                    st.rerun()
    elif nav.state == DETAIL:
        details = nav.cached(DETAIL) or {}
        st.header(details.get("title") or nav.title)
        st.write(details.get("description", ""))
        st.markdown(" ".join(f"`{skill}`" for skill in details.get("skills") or []))
        road_col, jobs_col = st.columns(2)
        if road_col.button("View roadmap", key=f"{prefix}:roadmap"):
            enter_view(nav, ROADMAP, ai.roadmap, "Building your roadmap...")
        if jobs_col.button("View jobs", key=f"{prefix}:jobs"):
            enter_view(nav, JOBS, ai.jobs, "Finding job openings...")
        render_contact_request(prefix, nav.title or "")
    elif nav.state == ROADMAP:
        st.header(f"Roadmap: {nav.title}")
        render_roadmap(nav.cached(ROADMAP) or [])
    elif nav.state == JOBS:
        st.header(f"Jobs: {nav.title}")
        render_jobs(nav.cached(JOBS) or [])


def render_contact_request(prefix: str, career_title: str) -> None:
    with st.expander("Talk to a counsellor"):
        with st.form(f"{prefix}:contact"):
            name = st.text_input("Name")
            email = st.text_input("Email")
            message = st.text_area("Message", value=f"I would like guidance about a career as {career_title}.")
            submitted = st.form_submit_button("Send request")
        if submitted:
            if not name.strip() or "@" not in email:
                st.error("Please enter your name and a valid email.")
                return
            try:
                Mailer(SETTINGS).send_contact(name.strip(), "", email.strip(), message)
                st.success("Thanks! Our team will get in touch soon.")
            except MailerError:
                st.error("Failed to send request. Please try again.")


def render_career_path_page(user: dict[str, Any] | None) -> None:
    if not require_feature(user, "career-path"):
        return
    prefix = "career_path"
    fs = flow_state(prefix, CAREER_PATH)
    session, state, runner = fs["session"], fs["view"], fs["runner"]
    images: dict[str, str] = fs.setdefault("images", {})
    st.title("Career Path")
    render_view_state(state)

    if state.view == "form":
        if user and not session.get("name"):
            session.set("name", user.get("name") or "")
        if render_flow_inputs(prefix, fs, submit_label="Get recommendations"):
            profile = session.payload()
            ai = get_ai()
            progress = st.empty()

            async def submit() -> None:
                recommendations = await runner.run(
                    prefix,
                    lambda: ai.recommend_advanced(profile),
                    status="Analysing your profile...",
                    success_view="results",
                )
                if recommendations:
                    fs["details"] = DetailNavigator(runner, recommendations)
                    await stream_images(
                        recommendations,
                        ai.image,
                        images,
                        session,
                        on_arrival=lambda title, _url: progress.caption(f"Image ready for {title}"),
                    )

            with st.spinner("Analysing your profile..."):
                run_async(submit())
            log_action(user["id"] if user else None, "career_path_submitted", {"goal": profile.get("goal")})
            st.rerun()
        return

    nav: DetailNavigator = fs["details"]
    if st.button("Start over", key=f"{prefix}:reset"):
        reset_flow(fs)
        st.rerun()
    if render_detail_nav(prefix, nav):
        st.rerun()
    ai = get_ai()

    if nav.state == LIST:
        st.subheader("Your top recommendations")
        if st.button("Change path", key=f"{prefix}:change_path"):
            fs["navigator"].goto(CAREER_PATH_GOAL_STEP)
            state.view = "form"
            state.alert = None
            st.rerun()
        for idx, rec in enumerate(nav.items):
            render_card(rec["title"], rec.get("description"), image=images.get(rec["title"]))
            if st.button("Explore", key=f"{prefix}:select:{idx}"):
                nav.select(idx)
                st.rerun()
    elif nav.state == DETAIL:
        rec = nav.selected or {}
        st.header(rec.get("title", ""))
        st.write(rec.get("description", ""))
        cols = st.columns(3)
        if cols[0].button("Key skills", key=f"{prefix}:skills"):
            enter_view(nav, SKILLS, ai.skill_details, "Listing key skills...")
        if cols[1].button("Interview prep", key=f"{prefix}:interview"):
            enter_view(nav, INTERVIEW, ai.interview_questions, "Preparing interview questions...")
        if cols[2].button("Roadmap", key=f"{prefix}:roadmap"):
            enter_view(nav, ROADMAP, ai.roadmap, "Building your roadmap...")
        render_consultation_form(prefix, nav, user)
    elif nav.state == SKILLS:
        st.header(f"Skills for {nav.title}")
        render_skills(nav.cached(SKILLS) or {})
    elif nav.state == INTERVIEW:
        st.header(f"Interview prep: {nav.title}")
        render_interview(nav.cached(INTERVIEW) or [])
    elif nav.state == ROADMAP:
        st.header(f"Roadmap: {nav.title}")
        render_roadmap(nav.cached(ROADMAP) or [])


def render_consultation_form(prefix: str, nav: DetailNavigator, user: dict[str, Any] | None) -> None:
    with st.expander("Book a free consultation"):
        with st.form(f"{prefix}:consult"):
            name = st.text_input("Name", value=(user or {}).get("name") or "")
            email = st.text_input("Email", value=(user or {}).get("email") or "")
            submitted = st.form_submit_button("Request consultation")
        if not submitted:
            return
        if not name.strip() or "@" not in email:
            st.error("Please enter your name and a valid email.")
            return
        skills = nav.cached(SKILLS) or {}
        interview = nav.cached(INTERVIEW)
        try:
            Mailer(SETTINGS).send_consultation(
                name.strip(),
                email.strip(),
                nav.selected or {},
                (skills.get("technical") or []) + (skills.get("soft") or []) or None,
                interview,
            )
            st.success("Request sent! We will contact you shortly.")
            log_action(user["id"] if user else None, "consultation_requested", {"career": nav.title})
        except MailerError:
            st.error("Failed to send request. Please try again.")


def render_quiz_page(user: dict[str, Any] | None) -> None:
    if not require_feature(user, "quiz"):
        return
    prefix = "quiz"
    fs = flow_state(prefix, QUIZ_SETUP)
    session, state, runner = fs["session"], fs["view"], fs["runner"]
    st.title("Aptitude Quiz")
    render_view_state(state)

    if state.view == "form":
        if user and not session.get("name"):
            session.set("name", user.get("name") or "")
        if render_flow_inputs(prefix, fs, submit_label="Start test"):
            context = quiz_context(session.payload())
            ai = get_ai()
            with st.spinner("Preparing your questions..."):
                questions = run_async(
                    runner.run(
                        prefix,
                        lambda: ai.quiz_questions(context),
                        status="Preparing your questions...",
                        success_view="quiz",
                        failure_message="Could not generate the quiz. Please try again.",
                    )
                )
            if questions:
                fs["quiz"] = QuizSession(questions)
                log_action(user["id"] if user else None, "quiz_started", {"class_level": session.get("class_level")})
            st.rerun()
        return

    if state.view == "quiz":
        render_quiz_question(prefix, fs, user)
    elif state.view == "score":
        render_quiz_score(prefix, fs, user)
    elif state.view == "recommendations":
        render_quiz_recommendations(prefix, fs)


@st.fragment(run_every=1)
def quiz_timer(fs: dict[str, Any]) -> None:
    quiz: QuizSession = fs["quiz"]
    before = quiz.current
    finished = quiz.sync_timer()
    if finished or quiz.current != before:
        st.rerun()
    render_meter("Time left", quiz.seconds_left() / QUESTION_SECONDS, f"{quiz.seconds_left()} s")


def _finish_quiz(fs: dict[str, Any], user: dict[str, Any] | None) -> None:
    quiz: QuizSession = fs["quiz"]
    result = quiz.result()
    fs["result"] = result
    fs["view"].view = "score"
    log_action(
        user["id"] if user else None,
        "quiz_completed",
        {"percentage": round(result.percentage, 1), "time_taken": result.time_taken},
    )


def render_quiz_question(prefix: str, fs: dict[str, Any], user: dict[str, Any] | None) -> None:
    quiz: QuizSession = fs["quiz"]
    if quiz.finished:
        _finish_quiz(fs, user)
        st.rerun()
    main_col, side_col = st.columns([3, 1])
    with side_col:
        quiz_timer(fs)
        render_quiz_palette(quiz.statuses, quiz.current)
    with main_col:
        question = quiz.question
        st.subheader(f"Question {quiz.current + 1} of {len(quiz.questions)}")
        st.write(question.get("question", ""))
        options = question.get("options") or []
        current_answer = quiz.answers[quiz.current]
        choice = st.radio(
            "Choose an answer",
            list(range(len(options))),
            index=current_answer if isinstance(current_answer, int) else None,
            format_func=lambda i: options[i],
            key=f"{prefix}:q:{quiz.current}",
        )
        save_col, clear_col = st.columns(2)
        if save_col.button("Save & Next", type="primary", key=f"{prefix}:save:{quiz.current}"):
            if choice is not None:
                quiz.select_option(choice)
            if quiz.move_next():
                _finish_quiz(fs, user)
            st.rerun()
        if clear_col.button("Clear response", key=f"{prefix}:clear:{quiz.current}"):
            quiz.clear_response()
            st.session_state.pop(f"{prefix}:q:{quiz.current}", None)
            st.rerun()


def render_quiz_score(prefix: str, fs: dict[str, Any], user: dict[str, Any] | None) -> None:
    result = fs["result"]
    session, state, runner = fs["session"], fs["view"], fs["runner"]
    st.subheader("Your results")
    cols = st.columns(4)
    cols[0].metric("Score", f"{result.score}/{result.total}")
    cols[1].metric("Accuracy", f"{result.accuracy}%")
    cols[2].metric("Correct / Incorrect / Skipped", f"{result.correct} / {result.incorrect} / {result.skipped}")
    cols[3].metric("Time taken", result.time_taken)
    render_meter("Percentage", result.percentage / 100)
    with st.expander("Review your answers"):
        quiz_rows = answers_for_analysis(fs["quiz"].questions, fs["quiz"].answers)
        review = pd.DataFrame(quiz_rows).rename(columns={"question": "Question", "answer": "Your answer", "correct": "Correct"})
        st.dataframe(review, use_container_width=True, hide_index=True)

    if st.button("Retake test", key=f"{prefix}:retake"):
        reset_flow(fs)
        st.rerun()
    if not result.passed:
        st.warning("Your score is a little low for reliable recommendations. Review the basics and try again.")
        return

    st.markdown("**What would you like recommendations for?**")
    jobs_col, studies_col = st.columns(2)
    path = None
    if jobs_col.button("Jobs", key=f"{prefix}:path_jobs"):
        path = "jobs"
    if studies_col.button("Higher studies", key=f"{prefix}:path_studies"):
        path = "studies"
    if path is None:
        return

    quiz: QuizSession = fs["quiz"]
    answers = session.payload()
    stream = answers.get("stream")
    if stream and answers.get("sub_stream"):
        stream = f"{stream} - {answers['sub_stream']}"
    summary = answer_summary(quiz.questions, quiz.answers)
    ai = get_ai()
    images: dict[str, str] = fs.setdefault("images", {})

    async def submit() -> None:
        recommendations = await runner.run(
            f"{prefix}:recommend",
            lambda: ai.quiz_recommendations(summary, result.percentage, answers["class_level"], stream, path, result.time_taken),
            status="Finding your best paths...",
            success_view="recommendations",
        )
        if recommendations:
            fs["details"] = DetailNavigator(runner, recommendations)
            await stream_images(recommendations, ai.image, images, session, prompt_key="imagePrompt")

    with st.spinner("Finding your best paths..."):
        run_async(submit())
    st.rerun()


def render_quiz_recommendations(prefix: str, fs: dict[str, Any]) -> None:
    nav: DetailNavigator = fs["details"]
    images = fs.get("images", {})
    if st.button("Back to results", key=f"{prefix}:to_score"):
        fs["view"].view = "score"
        st.rerun()
    if render_detail_nav(prefix, nav):
        st.rerun()
    if nav.state == LIST:
        for idx, rec in enumerate(nav.items):
            render_card(rec["title"], rec.get("description"), image=images.get(rec["title"]))
            if st.button("View roadmap", key=f"{prefix}:rec:{idx}"):
                nav.select(idx)
                enter_view(nav, ROADMAP, get_ai().roadmap, "Building your roadmap...")
    elif nav.state == DETAIL:
        nav.back()
        st.rerun()
    elif nav.state == ROADMAP:
        st.header(f"Roadmap: {nav.title}")
        render_roadmap(nav.cached(ROADMAP) or [])


def render_sports_page(user: dict[str, Any] | None) -> None:
    if not require_feature(user, "sport"):
        return
    prefix = "sports"
    fs = flow_state(prefix, SPORTS)
    session, state, runner = fs["session"], fs["view"], fs["runner"]
    st.title("Sports Academies")
    ai = get_ai()

    target = handoff().take(ACADEMY_KEY)
    if isinstance(target, dict) and target.get("id"):
        academy = {"place_id": target["id"], "name": target.get("name"), "formatted_address": target.get("address"), "sport": target.get("sport")}
        fs["sport"] = target.get("sport") or ""
        fs["details"] = DetailNavigator(runner, [academy], title_key="name")
        state.view = "results"
        _open_academy(fs, 0, ai)

    render_view_state(state)
    if state.view == "form":
        options = {"state": INDIAN_STATES, "city": cities_for(session.get("state") or ""), "sport": SPORTS_LIST}
        if render_flow_inputs(prefix, fs, options=options, transforms={"age": sanitize_age_input}, submit_label="Check eligibility"):
            answers = session.payload()
            verdict = evaluate_eligibility(answers["sport"], int(answers["age"]))
            fs["eligibility"] = verdict
            fs["sport"] = answers["sport"]
            if verdict.eligible:
                query = academy_search_query(answers["sport"], answers["city"], answers["state"], verdict.category)
                with st.spinner("Searching academies..."):
                    academies = build_lookup(SETTINGS.google_maps_api_key).search(query)
                fs["details"] = DetailNavigator(runner, academies, title_key="name")
                fs["query"] = query
            fs["navigator"].complete()
            state.view = "results"
            st.rerun()
        return

    if st.button("New search", key=f"{prefix}:reset"):
        reset_flow(fs)
        st.rerun()
    verdict = fs.get("eligibility")
    if verdict is not None:
        (st.success if verdict.eligible else st.warning)(verdict.message)
        if verdict.eligible:
            st.caption(f"Category: {verdict.category} | Competitions: {verdict.competitions}")
        if not verdict.eligible:
            return

    nav: DetailNavigator | None = fs.get("details")
    if nav is None:
        return
    if render_detail_nav(prefix, nav):
        st.rerun()
    if nav.state == LIST:
        if not nav.items:
            st.info(f"No academies found for \"{fs.get('query', '')}\". Try a nearby city.")
        for idx, academy in enumerate(nav.items):
            render_card(academy.get("name", "Academy"), academy.get("formatted_address"))
            detail_col, save_col = st.columns(2)
            if detail_col.button("Details", key=f"{prefix}:open:{idx}"):
                _open_academy(fs, idx, ai)
                st.rerun()
            render_save_academy(save_col, user, academy, fs.get("sport", ""), f"{prefix}:save:{idx}")
    else:
        academy = nav.selected or {}
        details = nav.cached(DETAIL) or {}
        st.header(academy.get("name", ""))
        st.caption(academy.get("formatted_address") or "")
        render_save_academy(st, user, academy, fs.get("sport", ""), f"{prefix}:save_detail", nav)
        overview_tab, roadmap_tab, fees_tab = st.tabs(["Overview", "Training roadmap", "Fees"])
        with overview_tab:
            render_generated_html(details.get("overview") or OVERVIEW_FALLBACK)
        with roadmap_tab:
            for stage in details.get("roadmap") or []:
                st.markdown(f"**{stage.get('stage')}**")
                st.write(stage.get("description", ""))
                if stage.get("competitions"):
                    st.caption(f"Competitions: {stage['competitions']}")
        with fees_tab:
            render_fees(details.get("fees"))


def _open_academy(fs: dict[str, Any], index: int, ai: CareerAI) -> None:
    nav: DetailNavigator = fs["details"]
    academy = nav.items[index]
    sport = fs.get("sport") or academy.get("sport") or ""
    name, address = academy.get("name", ""), academy.get("formatted_address", "")

    async def load(_title: str) -> dict[str, Any] | None:
        overview, roadmap, fees = await asyncio.gather(
            ai.academy_overview(name, address),
            ai.academy_roadmap(sport, name),
            ai.academy_fees(name, address),
        )
        if overview is None and not roadmap:
            return None
        return {"overview": overview, "roadmap": roadmap, "fees": fees}

    with st.spinner("Loading academy details..."):
        run_async(nav.open(index, load, failure_message="Could not load academy details."))


def render_save_academy(
    host: Any,
    user: dict[str, Any] | None,
    academy: dict[str, Any],
    sport: str,
    key: str,
    nav: DetailNavigator | None = None,
) -> None:
    if not user:
        return
    saved = contains(user.get("saved_academies"), academy.get("place_id") or academy.get("id"))
    if host.button("Unsave" if saved else "Save", key=key):

        def saver(item: dict[str, Any], _details: Any) -> bool:
            with db_session() as db:
                return toggle_saved(db, user["id"], ACADEMIES, academy_artifact({**item, "sport": sport}))

        now_saved = nav.save(saver) if nav is not None else saver(academy, None)
        log_action(user["id"], "academy_saved" if now_saved else "academy_removed", {"name": academy.get("name")})
        st.rerun()


def render_fee_structure_page(user: dict[str, Any] | None) -> None:
    if not require_feature(user, "fee-structure"):
        return
    prefix = "fee_structure"
    fs = flow_state(prefix, FEE_STRUCTURE)
    session, state, runner = fs["session"], fs["view"], fs["runner"]
    st.title("Fee Structure")
    st.caption("Find a school or college to see its contact details, reviews and published fees.")

    render_view_state(state)
    if state.view == "form":
        if render_flow_inputs(prefix, fs, submit_label="Search"):
            answers = session.payload()
            query = institution_search_query(answers["institution_type"], answers["name"], answers["location"])
            with st.spinner("Searching..."):
                places = build_lookup(SETTINGS.google_maps_api_key).search(query)
            fs["details"] = DetailNavigator(runner, places, title_key="name")
            fs["query"] = query
            fs["kind"] = answers["institution_type"].lower()
            fs["navigator"].complete()
            state.view = "results"
            log_action(user["id"], "fee_structure_searched", {"query": query, "results": len(places)})
            st.rerun()
        return

    if st.button("New search", key=f"{prefix}:reset"):
        reset_flow(fs)
        st.rerun()
    nav: DetailNavigator | None = fs.get("details")
    if nav is None:
        return
    kind = fs.get("kind", "school")
    if render_detail_nav(prefix, nav):
        st.rerun()
    if nav.state == LIST:
        if not nav.items:
            st.info(f"No {kind}s found for \"{fs.get('query', '')}\". Check the name or try a nearby area.")
        for idx, place in enumerate(nav.items):
            render_card(place.get("name") or kind.title(), place.get("formatted_address"))
            if st.button("Details", key=f"{prefix}:open:{idx}"):
                _open_institution(fs, idx)
                st.rerun()
        return

    place = {**(nav.selected or {}), **(nav.cached(DETAIL) or {})}
    address = place.get("formatted_address") or ""
    st.header(place.get("name") or kind.title())
    st.caption(address)
    rating_col, phone_col, web_col = st.columns(3)
    rating = place.get("rating")
    rating_col.metric("Rating", f"{rating} / 5" if rating else "n/a", f"{place.get('user_ratings_total') or 0} reviews", delta_color="off")
    phone_col.markdown(f"**Phone**  \n{place.get('international_phone_number') or 'Not listed'}")
    website = place.get("website")
    web_col.markdown(f"**Website**  \n[{website}]({website})" if website else "**Website**  \nNot listed")

    reviews = place.get("reviews") or []
    with st.expander(f"Reviews ({len(reviews)})"):
        if not reviews:
            st.info("No reviews available.")
        for review in reviews:
            st.markdown(f"**{review.get('author') or 'Anonymous'}** ({review.get('rating') or '-'} / 5)")
            st.write(review.get("text") or "")

    st.subheader("Fee structure")
    if nav.state == FEES:
        render_fees(nav.cached(FEES), kind)
    elif st.button("Check fee structure (AI)", key=f"{prefix}:fees"):
        ai = get_ai()
        name = place.get("name") or ""
        enter_view(nav, FEES, lambda _title: ai.academy_fees(name, address, kind), "Checking published fees...")


def _open_institution(fs: dict[str, Any], index: int) -> None:
    nav: DetailNavigator = fs["details"]
    place_id = nav.items[index].get("place_id") or ""
    lookup = build_lookup(SETTINGS.google_maps_api_key)

    async def load(_title: str) -> dict[str, Any] | None:
        return await asyncio.to_thread(lookup.details, place_id)

    with st.spinner("Loading details..."):
        run_async(nav.open(index, load, failure_message="Could not load details for this place. Please try again."))


def render_business_page(user: dict[str, Any] | None) -> None:
    if not require_feature(user, "business"):
        return
    prefix = "business"
    fs = flow_state(prefix, BUSINESS_IDEA, view="home")
    session, state, runner = fs["session"], fs["view"], fs["runner"]
    ai = get_ai()
    st.title("Business Blaster")

    target = business_view_for(handoff().take(BUSINESS_IDEA_KEY))
    if target is not None:
        view, payload = target
        state.view = view
        state.payload = payload
        state.alert = None

    render_view_state(state)
    if state.view != "home" and st.button("Back to Business Blaster", key=f"{prefix}:home"):
        reset_flow(fs, view="home")
        st.rerun()

    if state.view == "home":
        analyse_col, quiz_col = st.columns(2)
        with analyse_col:
            render_card("Analyse my idea", "Validation, market, audience, competitors and SWOT.")
            if st.button("Start analysis", key=f"{prefix}:start_form"):
                state.view = "form"
                st.rerun()
        with quiz_col:
            render_card("Find an idea", "A short quiz that suggests ideas that suit you.")
            if st.button("Take the quiz", key=f"{prefix}:start_quiz"):
                with st.spinner("Preparing quiz..."):
                    questions = run_async(
                        runner.run(f"{prefix}:quiz", ai.business_quiz, status="Preparing quiz...", success_view="quiz")
                    )
                if questions:
                    fs["quiz"] = BusinessQuizSession(questions)
                st.rerun()
    elif state.view == "form":
        if render_flow_inputs(prefix, fs, submit_label="Analyse"):
            answers = session.payload()
            with st.spinner("Researching your idea..."):
                analysis = run_async(
                    runner.run(
                        f"{prefix}:analysis",
                        lambda: ai.analyze_business_idea(answers["idea"], answers["problem"], answers["solution"]),
                        status="Researching your idea...",
                        success_view="analysis",
                        failure_message="Could not analyse the idea. Please try again.",
                    )
                )
            if analysis:
                state.payload = {"analysis": analysis}
            st.rerun()
    elif state.view == "analysis":
        render_business_analysis(prefix, fs, user, ai)
    elif state.view == "guidance":
        guidance = state.payload.get("guidance") or {}
        if st.button("Back to analysis", key=f"{prefix}:to_analysis"):
            state.view = "analysis"
            st.rerun()
        st.header(guidance.get("title", "Your Roadmap to Success"))
        for phase in guidance.get("phases") or []:
            with st.expander(f"{phase.get('phaseTitle')} ({phase.get('timeline', '')})", expanded=True):
                st.write(phase.get("phaseDescription", ""))
                budget = phase.get("budgetDistribution") or {}
                if budget:
                    st.bar_chart(pd.Series(budget, name="Budget %"))
                for task in phase.get("keyTasks") or []:
                    st.write(f"- **{task.get('task')}** [{task.get('priority', '')}]: {task.get('details', '')}")
                if phase.get("milestones"):
                    st.caption("Milestones: " + ", ".join(str(m) for m in phase["milestones"]))
    elif state.view == "quiz":
        render_business_quiz(prefix, fs, ai)
    elif state.view == "ideas":
        st.subheader("Ideas that suit you")
        for idx, idea in enumerate(fs.get("ideas") or []):
            render_card(idea["title"], idea.get("description"))
            if st.button("Deep dive", key=f"{prefix}:dive:{idx}"):
                with st.spinner("Writing a deep research report..."):
                    report = run_async(
                        runner.run(
                            f"{prefix}:deep-dive",
                            lambda: ai.business_deep_dive(idea["title"]),
                            status="Writing report...",
                            success_view="deep-dive",
                            fallback_view="ideas",
                            failure_message="Could not write the report for this idea. Please try again.",
                        )
                    )
                if report:
                    state.payload = {"title": idea["title"], "report": report}
                st.rerun()
    elif state.view == "deep-dive":
        payload = state.payload or {}
        st.header(payload.get("title", "Deep dive"))
        render_generated_html(payload.get("report") or DEEP_DIVE_FALLBACK)
        save_col, pdf_col = st.columns(2)
        if user and save_col.button("Save report", key=f"{prefix}:save_dive"):
            with db_session() as db:
                save_artifact(db, user["id"], BUSINESS_IDEAS, business_artifact("deep-dive", payload.get("title", ""), payload.get("report")))
            log_action(user["id"], "business_saved", {"type": "deep-dive", "title": payload.get("title")})
            st.success("Saved to your dashboard.")
        pdf_col.download_button(
            "Download PDF",
            data=build_deep_dive_pdf(payload.get("title", ""), payload.get("report")),
            file_name="deep-dive.pdf",
            mime="application/pdf",
            key=f"{prefix}:dive_pdf",
        )


def render_business_analysis(prefix: str, fs: dict[str, Any], user: dict[str, Any] | None, ai: CareerAI) -> None:
    state, runner = fs["view"], fs["runner"]
    analysis = (state.payload or {}).get("analysis") or {}
    st.header(analysis.get("ideaTitle", "Your idea"))
    st.subheader("Idea validation")
    st.write(analysis.get("ideaValidation", ""))

    market = analysis.get("marketAnalysis") or {}
    st.subheader("Market analysis")
    st.write(market.get("summary", ""))
    size = market.get("marketSizeData") or {}
    if size.get("labels") and size.get("data"):
        st.bar_chart(pd.DataFrame({"USD millions": size["data"]}, index=size["labels"]))

    audience = analysis.get("targetAudience") or {}
    st.subheader(f"Target audience: {audience.get('personaName', '')}")
    st.write(audience.get("demographics", ""))
    st.write(f"**Pain points:** {audience.get('painPoints', '')}")
    st.write(f"**Goals:** {audience.get('goals', '')}")

    competitors = analysis.get("competitiveLandscape") or []
    if competitors:
        st.subheader("Competitive landscape")
        st.dataframe(pd.DataFrame(competitors), use_container_width=True, hide_index=True)
    st.subheader("SWOT")
    render_swot(analysis.get("swotAnalysis"))
    st.subheader("Unique selling propositions")
    for usp in analysis.get("uniqueSellingPropositions") or []:
        st.write(f"- {usp}")

    guide_col, save_col, pdf_col = st.columns(3)
    if guide_col.button("Step-by-step guidance", key=f"{prefix}:guidance"):
        with st.spinner("Planning your roadmap..."):
            guidance = run_async(
                runner.run(
                    f"{prefix}:guidance",
                    lambda: ai.business_guidance(analysis.get("ideaTitle", "")),
                    status="Planning your roadmap...",
                    success_view="guidance",
                )
            )
        if guidance:
            state.payload = {"analysis": analysis, "guidance": guidance}
        st.rerun()
    if user and save_col.button("Save analysis", key=f"{prefix}:save_analysis"):
        with db_session() as db:
            save_artifact(db, user["id"], BUSINESS_IDEAS, business_artifact("analysis", analysis.get("ideaTitle", ""), analysis))
        log_action(user["id"], "business_saved", {"type": "analysis", "title": analysis.get("ideaTitle")})
        st.success("Saved to your dashboard.")
    pdf_col.download_button(
        "Download PDF",
        data=build_business_analysis_pdf(analysis),
        file_name="business-analysis.pdf",
        mime="application/pdf",
        key=f"{prefix}:analysis_pdf",
    )


def render_business_quiz(prefix: str, fs: dict[str, Any], ai: CareerAI) -> None:
    quiz: BusinessQuizSession | None = fs.get("quiz")
    state, runner = fs["view"], fs["runner"]
    if quiz is None:
        state.view = "home"
        st.rerun()
    if not quiz.finished:
        question = quiz.questions[quiz.current]
        st.progress(quiz.current / len(quiz.questions), text=f"Question {quiz.current + 1} of {len(quiz.questions)}")
        st.subheader(question.get("question", ""))
        for idx, option in enumerate(question.get("options") or []):
            if st.button(str(option), key=f"{prefix}:bq:{quiz.current}:{idx}", use_container_width=True):
                quiz.answer(str(option))
                st.rerun()
        return
    with st.spinner("Finding ideas for you..."):
        ideas = run_async(
            runner.run(
                f"{prefix}:ideas",
                lambda: ai.evaluate_business_quiz(quiz.pairs),
                status="Finding ideas...",
                success_view="ideas",
                fallback_view="home",
            )
        )
    if ideas:
        fs["ideas"] = ideas
    st.rerun()


def render_catalogue_picker(prefix: str, session: FormSession, db: Any) -> dict[str, str] | None:
    """Class, stream, subject, chapter and topic selects over the notes catalogue.

    Returns the topic path and the chosen names once a topic is picked.
    """
    fields = {spec.name: spec for spec in NOTES_BROWSER.steps[0].fields}
    classes = children(db, None, "classes")
    class_labels = {node.slug: node.name for node in classes}
    render_field(prefix, session, fields["class_id"], list(class_labels), class_labels)
    class_id = session.get("class_id")
    if not class_id:
        return None
    class_name = class_labels.get(class_id, "")
    if session.get("class_name") != class_name:
        session.set("class_name", class_name)
    picked = {"class": class_name, "stream": ""}

    subject_parent = f"classes/{class_id}"
    if session.branch_flags.get("requires_stream"):
        streams = {node.slug: node.name for node in children(db, subject_parent, "streams")}
        render_field(prefix, session, fields["stream_id"], list(streams), streams)
        if not session.get("stream_id"):
            return None
        picked["stream"] = streams.get(session.get("stream_id"), "")
        subject_parent += f"/streams/{session.get('stream_id')}"

    levels = (
        ("subject_id", "subject", "subjects", subject_parent),
        ("chapter_id", "chapter", "chapters", None),
        ("topic_id", "topic", "topics", None),
    )
    depth = None
    for field_name, label, collection, parent in levels:
        if parent is None:
            parent = hierarchy_path(session.answers, session.branch_flags, depth=depth)
        options = {node.slug: node.name for node in children(db, parent, collection)}
        render_field(prefix, session, fields[field_name], list(options), options)
        if not session.get(field_name):
            return None
        picked[label] = options.get(session.get(field_name), "")
        depth = label
    picked["path"] = hierarchy_path(session.answers, session.branch_flags, depth="topic")
    return picked


def render_notes_page(user: dict[str, Any] | None) -> None:
    if not require_feature(user, "notes"):
        return
    prefix = "notes"
    fs = flow_state(prefix, NOTES_BROWSER)
    st.title("Study Notes")
    st.caption("Select a class, subject, chapter and topic to find relevant study notes.")

    with db_session() as db:
        picked = render_catalogue_picker(prefix, fs["session"], db)
        if picked is None:
            return
        topic_name = picked["topic"]
        found = notes_for(db, picked["path"])

    notes_tab, explain_tab = st.tabs(["Study notes", "Explain this topic"])
    with notes_tab:
        if not found:
            st.info("No notes uploaded for this topic yet.")
        for note in found:
            st.markdown(f"- [{note['title']}]({note['url']})")
    with explain_tab:
        explained = fs.setdefault("explained", {})
        if topic_name not in explained and st.button("Explain with AI", key=f"{prefix}:explain"):
            with st.spinner("Summarising the topic..."):
                text = run_async(get_ai().explain_topic(topic_name))
            if text:
                explained[topic_name] = text
            else:
                st.error("Could not explain this topic right now. Please try again.")
        render_generated_html(explained.get(topic_name), "Click the button to get a simple explanation.")


def render_videos_page(user: dict[str, Any] | None) -> None:
    if not require_feature(user, "videos"):
        return
    prefix = "videos"
    fs = flow_state(prefix, NOTES_BROWSER)
    st.title("Videos")
    st.caption("Pick a topic to find popular lessons, ranked by views.")

    with db_session() as db:
        picked = render_catalogue_picker(prefix, fs["session"], db)
    if picked is None:
        return
    topic = picked["topic"]
    context = ", ".join(part for part in (picked["class"], picked["stream"], picked["subject"], picked["chapter"]) if part)
    found = fs.setdefault("found", {})
    if picked["path"] not in found and st.button("Find videos", type="primary", key=f"{prefix}:search"):
        with st.spinner("Searching for videos..."):
            videos = run_async(get_ai().search_videos(topic, context))
        if videos:
            found[picked["path"]] = videos
            log_action(user["id"], "videos_searched", {"topic": topic, "results": len(videos)})
            st.rerun()
        st.error("Could not find videos for this topic right now. Please try again.")
    videos = found.get(picked["path"])
    if not videos:
        return

    levels = st.multiselect("Difficulty", list(VIDEO_DIFFICULTIES), default=list(VIDEO_DIFFICULTIES), key=f"{prefix}:difficulty")
    shown = [video for video in videos if video.get("difficulty") in levels]
    frame = pd.DataFrame(
        [
            {
                "Title": video["title"],
                "Difficulty": video.get("difficulty"),
                "Views": video.get("views") or "-",
                "Likes": video.get("likes") or "-",
                "Link": video["url"],
            }
            for video in shown
        ]
    )
    st.dataframe(frame, use_container_width=True, hide_index=True, column_config={"Link": st.column_config.LinkColumn("Link")})
    if shown:
        titles = [video["title"] for video in shown]
        choice = st.selectbox("Watch", range(len(shown)), format_func=lambda i: titles[i], key=f"{prefix}:watch:{picked['path']}")
        st.video(shown[choice]["url"])


def render_teacher_notes_page(user: dict[str, Any] | None) -> None:
    if not require_feature(user, "teacher-notes"):
        return
    prefix = "teacher_notes"
    fs = flow_state(prefix, NOTES_BROWSER)
    st.title("Teacher Notes")
    st.caption("Share notes for a topic. An admin reviews every upload before students can see it.")

    upload_tab, mine_tab = st.tabs(["Upload notes", "My uploads"])
    with upload_tab:
        with db_session() as db:
            picked = render_catalogue_picker(prefix, fs["session"], db)
        if picked is None:
            st.caption("Choose the topic these notes cover.")
        else:
            file_name = st.text_input("File name", key=f"{prefix}:file_name")
            file_url = st.text_input("Link to the notes file", key=f"{prefix}:file_url", placeholder="https://")
            if st.button("Submit for review", type="primary", key=f"{prefix}:submit"):
                try:
                    with db_session() as db:
                        submit_note(db, user["id"], user["email"], picked, file_name, file_url)
                except NoteReviewError as exc:
                    st.error(str(exc))
                else:
                    log_action(user["id"], "notes_submitted", {"path": picked["path"]})
                    st.success("Submitted. Your notes will appear once an admin approves them.")
    with mine_tab:
        with db_session() as db:
            rows = [
                {
                    "File": review.file_name,
                    "Topic": review.path_data.get("topic"),
                    "Subject": review.path_data.get("subject"),
                    "Status": review.status.capitalize(),
                    "Uploaded": review.uploaded_at,
                    "Link": review.file_url,
                }
                for review in my_uploads(db, user["id"])
            ]
        if not rows:
            st.info("You have not uploaded any notes yet.")
        else:
            st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True, column_config={"Link": st.column_config.LinkColumn("Link")})


def _career_options(session: FormSession) -> dict[str, list[Any]]:
    sector = session.get("sector") or ""
    return {
        "sector": list(CAREER_DATA),
        "job": jobs_for_sector(sector),
        "specialization": specializations_for(sector, session.get("job") or ""),
    }


def render_child_test(prefix: str, test: ChildTestSession) -> bool:
    """Untimed test view; True when the student submits."""
    question = test.questions[test.current]
    st.progress((test.current + 1) / len(test.questions), text=f"Question {test.current + 1} of {len(test.questions)}")
    st.subheader(question.get("question", ""))
    options = question.get("options") or []
    current = test.answers[test.current]
    choice = st.radio(
        "Your answer",
        list(range(len(options))),
        index=current if isinstance(current, int) else None,
        format_func=lambda i: options[i],
        key=f"{prefix}:cq:{test.current}",
    )
    if choice is not None and choice != current:
        test.answer(choice)
    prev_col, next_col = st.columns(2)
    if test.current > 0 and prev_col.button("Previous", key=f"{prefix}:prev"):
        test.previous()
        st.rerun()
    if test.is_last:
        return next_col.button("Submit test", type="primary", key=f"{prefix}:submit")
    if next_col.button("Next", type="primary", key=f"{prefix}:next_q"):
        test.next()
        st.rerun()
    return False


def render_child_ability_page(user: dict[str, Any] | None) -> None:
    if not require_feature(user, "child-ability"):
        return
    prefix = "child"
    fs = flow_state(prefix, CHILD_ABILITY)
    session, state, runner = fs["session"], fs["view"], fs["runner"]
    st.title("Child Ability")
    render_view_state(state)
    ai = get_ai()

    if state.view == "form":
        if session.step.key == "specific" and not session.branch_flags.get("is_specific"):
            st.info("General aptitude test selected. Continue to generate the test.")
        if render_flow_inputs(prefix, fs, options=_career_options(session), submit_label="Generate test"):
            answers = session.payload()
            with st.spinner("Generating the test..."):
                questions = run_async(
                    runner.run(
                        prefix,
                        lambda: ai.child_aptitude_test(answers["class_level"], answers["test_type"], specific_career_label(answers)),
                        status="Generating the test...",
                        success_view="test",
                        failure_message="Could not generate the test. Please try again.",
                    )
                )
            if questions:
                fs["test"] = ChildTestSession(questions)
            st.rerun()
        return

    answers = session.payload()
    if state.view == "test":
        test: ChildTestSession = fs["test"]
        if render_child_test(prefix, test):
            result = score_answers(test.questions, test.answers)
            fs["result"] = result
            with st.spinner("Analysing answers..."):
                analysis = run_async(
                    runner.run(
                        f"{prefix}:analysis",
                        lambda: ai.analyze_child_aptitude(
                            test.formatted_answers(),
                            answers["class_level"],
                            answers["test_type"],
                            specific_career_label(answers),
                            result.iq,
                        ),
                        status="Analysing answers...",
                        success_view="report",
                        failure_message="Could not analyse the answers. Please try again.",
                    )
                )
            if analysis:
                log_action(user["id"] if user else None, "child_test_completed", {"iq": result.iq})
            st.rerun()
    elif state.view == "report":
        result = fs["result"]
        analysis = state.payload or {}
        st.header(f"Report for {answers.get('name', '')}")
        cols = st.columns(3)
        cols[0].metric("Score", f"{result.score}/{result.total}")
        cols[1].metric("Percentage", f"{result.percentage:.0f}%")
        cols[2].metric("Estimated IQ", result.iq)
        if analysis.get("verdict"):
            st.success(f"Verdict: {analysis['verdict']}")
        if analysis.get("analysis"):
            st.write(analysis["analysis"])
        render_swot(analysis.get("swot"))
        st.subheader("Teaching plan")
        st.write(analysis.get("teachingPlan", ""))
        for suggestion in analysis.get("suggestions") or []:
            st.write(f"- **{suggestion.get('career')}**: {suggestion.get('reason', '')}")
        child = {
            "name": answers.get("name"),
            "class_level": answers.get("class_level"),
            "test_type": answers.get("test_type"),
            "career": specific_career_label(answers),
        }
        pdf_col, json_col = st.columns(2)
        pdf_col.download_button(
            "Download PDF",
            data=build_child_assessment_pdf(child, result.to_dict() | {"iq": result.iq}, analysis),
            file_name="child-assessment.pdf",
            mime="application/pdf",
        )
        json_col.download_button(
            "Download JSON",
            data=build_json_summary({"child": child, "result": result.to_dict(), "analysis": analysis}),
            file_name="child-assessment.json",
            mime="application/json",
        )
        if st.button("Test another child", key=f"{prefix}:reset"):
            reset_flow(fs)
            st.rerun()


def render_teach_ability_page(user: dict[str, Any] | None) -> None:
    if not require_feature(user, "teach-ability"):
        return
    prefix = "teach"
    fs = flow_state(prefix, TEACHER_TEST)
    session, state, runner = fs["session"], fs["view"], fs["runner"]
    st.title("Teach Ability")
    ai = get_ai()

    with db_session() as db:
        students = roster(db, user["id"])
        tests = assignments_for_teacher(db, user["id"])
        rows = [
            {
                "Name": s.name,
                "Email": s.email,
                "Class": s.class_level,
                "IQ": s.iq,
                "Last test": s.last_test_date,
                "Pending test": bool(pending_for(tests, s.email)),
            }
            for s in students
        ]
        class_average = average_iq(students)

    cols = st.columns(3)
    cols[0].metric("Students", len(rows))
    cols[1].metric("Class average IQ", class_average or "-")
    cols[2].metric("Pending tests", sum(1 for t in tests if t.status == "pending"))

    roster_tab, create_tab, reports_tab = st.tabs(["Roster", "Assign a test", "Reports"])
    with roster_tab:
        if rows:
            st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
        else:
            st.info("No students yet. Assign a test to add one.")
        for test in tests:
            if test.status != "pending":
                continue
            link = assignment_link(SETTINGS.app_url, test.id)
            subject, body = invitation_email(test.student_name, user.get("name"), test.test_type, link, test.password)
            with st.expander(f"Pending: {test.student_name} ({test.test_type})"):
                st.code(f"{link}\nPassword: {test.password}")
                st.markdown(f"[Email the student](mailto:{test.student_email}?subject={quote(subject)}&body={quote(body)})")

    with create_tab:
        render_view_state(state)
        if render_flow_inputs(prefix, fs, options=_career_options(session), submit_label="Create test"):
            form = session.payload()
            with st.spinner("Generating questions..."):
                questions = run_async(
                    runner.run(
                        prefix,
                        lambda: ai.child_aptitude_test(form["class_level"], form["test_type"], specific_career_label(form, with_sector=False)),
                        status="Generating questions...",
                        failure_message="Could not generate the test. Please try again.",
                    )
                )
            if questions:
                try:
                    with db_session() as db:
                        test = create_test(db, user["id"], form, questions)
                        fs["created"] = {"id": str(test.id), "password": test.password, "name": test.student_name, "type": test.test_type, "email": test.student_email}
                    log_action(user["id"], "test_assigned", {"test_type": form["test_type"]})
                    reset_flow(fs, keep=("created",))
                except AssignmentError as exc:
                    state.alert = str(exc)
            st.rerun()
        created = fs.get("created")
        if created:
            link = assignment_link(SETTINGS.app_url, created["id"])
            subject, body = invitation_email(created["name"], user.get("name"), created["type"], link, created["password"])
            st.success(f"Test created for {created['name']}.")
            st.code(f"{link}\nPassword: {created['password']}")
            st.markdown(f"[Email the student](mailto:{created['email']}?subject={quote(subject)}&body={quote(body)})")

    with reports_tab:
        emails = sorted({t.student_email for t in tests if t.status == "completed"})
        if not emails:
            st.info("No completed tests yet.")
            return
        email = st.selectbox("Student", emails, key=f"{prefix}:report_student")
        report = latest_completed(tests, email)
        if report is None:
            return
        st.subheader(f"{report.student_name}: {report.test_type} test")
        cols = st.columns(3)
        cols[0].metric("Score", report.score)
        cols[1].metric("Estimated IQ", report.iq_score)
        cols[2].metric("Verdict", report.verdict or "N/A")
        if report.analysis and report.analysis != ANALYSIS_MISSING:
            st.write(report.analysis)
        render_swot(report.swot)
        if report.teaching_plan:
            st.subheader("Teaching plan")
            st.write(report.teaching_plan)
        for suggestion in report.suggestions or []:
            st.write(f"- **{suggestion.get('career')}**: {suggestion.get('reason', '')}")
        if not report.swot and st.button("Generate analysis", key=f"{prefix}:analyse:{report.id}"):
            specifics = " ".join(v for v in (report.job_details or {}).values() if v) or None
            with st.spinner("Analysing answers..."):
                analysis = run_async(
                    ai.analyze_child_aptitude(
                        answers_for_child_analysis(report.questions, report.answers or []),
                        report.student_class or "",
                        report.test_type,
                        specifics,
                        report.iq_score,
                    )
                )
            if analysis:
                with db_session() as db:
                    store_analysis(db, report.id, analysis)
            else:
                st.error("Could not analyse the answers. Please try again.")
            st.rerun()
        st.download_button(
            "Download PDF",
            data=build_assigned_test_pdf(report),
            file_name=f"test-report-{report.student_name}.pdf",
            mime="application/pdf",
        )


def render_student_test_page(user: dict[str, Any] | None) -> None:
    prefix = "student_test"
    st.title("Assigned Aptitude Test")
    active = st.session_state.get(prefix)

    if active is None:
        with st.form(f"{prefix}:login"):
            password = st.text_input("Test password", max_chars=6)
            submitted = st.form_submit_button("Start test")
        if submitted:
            try:
                with db_session() as db:
                    test = find_test_for_login(db, password)
                    st.session_state[prefix] = {
                        "id": str(test.id),
                        "name": test.student_name,
                        "class_level": test.student_class or "",
                        "test_type": test.test_type,
                        "specifics": " ".join(v for v in (test.job_details or {}).values() if v) or None,
                        "test": ChildTestSession(test.questions),
                    }
                st.rerun()
            except AssignmentError as exc:
                st.error(str(exc))
        return

    if active.get("done"):
        st.success(f"Thank you, {active['name']}! Your test has been submitted.")
        st.metric("Score", active["score"])
        if st.button("Finish", key=f"{prefix}:finish"):
            st.session_state.pop(prefix, None)
            st.rerun()
        return

    st.caption(f"{active['name']} | {active['test_type']} test")
    test: ChildTestSession = active["test"]
    if not render_child_test(prefix, test):
        return
    result = score_answers(test.questions, test.answers)
    with st.spinner("Submitting your test..."):
        analysis = run_async(
            get_ai().analyze_child_aptitude(
                test.formatted_answers(), active["class_level"], active["test_type"], active["specifics"], result.iq
            )
        )
    try:
        with db_session() as db:
            complete_test(db, active["id"], test.answers, result, analysis)
    except AssignmentCompleted as exc:
        st.error(str(exc))
        st.session_state.pop(prefix, None)
        return
    active.update({"done": True, "score": f"{result.score}/{result.total}"})
    st.rerun()


@st.fragment(run_every=5)
def payment_poller(user_id: str, order_id: str) -> None:
    try:
        with db_session() as db:
            order = confirm_order(db, SETTINGS, order_id)
            status = order.status
            plan, subscribed = subscription_status(db, user_id)
    except PaymentError as exc:
        st.caption(f"Waiting for payment confirmation... ({exc})")
        return
    if status == "PAID" and subscribed:
        log_action(user_id, "plan_activated", {"order_id": order_id, "plan": plan})
        st.rerun()
    st.caption(f"Payment status: {status}. This updates automatically.")


def render_dashboard_page(user: dict[str, Any] | None) -> None:
    if not user:
        st.warning("Please log in to see your dashboard.")
        if st.button("Go to login", key="dash_login"):
            navigate("login")
        return
    st.title(f"Welcome, {user.get('name') or user['email']}")
    plan_col, status_col = st.columns(2)
    plan_col.metric("Plan", user["subscription_model"].capitalize())
    status_col.metric("Subscription", "Active" if user["is_subscribed"] else "Inactive")

    with db_session() as db:
        order = latest_order(db, user["id"])
        pending_order = order.order_id if order is not None and order.status == "ACTIVE" else None
    if pending_order:
        payment_poller(user["id"], pending_order)

    features_tab, saved_tab, profile_tab = st.tabs(["Features", "Saved", "Profile"])
    with features_tab:
        for section, features in SECTION_FEATURES.items():
            title = section.replace("-", " ").title()
            if not can_access_section(user, section):
                st.markdown(f"**🔒 {title}**")
                st.caption(f"Included with the {SECTION_PLAN_NAMES.get(section, 'matching')} plan.")
                if st.button("See plans", key=f"dash_section_{section}"):
                    navigate("subscription")
                continue
            st.markdown(f"**{title}**")
            cols = st.columns(3)
            for idx, feature in enumerate(features):
                locked = is_locked(user, feature)
                label = f"{'🔒 ' if locked else ''}{FEATURE_LABELS.get(feature, feature)}"
                with cols[idx % 3]:
                    if st.button(label, key=f"dash_feature_{feature}"):
                        navigate("subscription" if locked else FEATURE_PAGES[feature])

    with saved_tab:
        st.subheader("Saved academies")
        for academy in user["saved_academies"]:
            render_card(academy.get("name", ""), academy.get("address"), chips=[academy.get("sport", "")])
            open_col, remove_col = st.columns(2)
            if open_col.button("Open", key=f"dash_open_academy_{academy['id']}"):
                handoff().put(ACADEMY_KEY, academy)
                navigate("sport")
            if remove_col.button("Remove", key=f"dash_remove_academy_{academy['id']}"):
                with db_session() as db:
                    remove_artifact(db, user["id"], ACADEMIES, academy["id"])
                st.rerun()
        if not user["saved_academies"]:
            st.caption("No saved academies yet.")

        st.subheader("Saved business ideas")
        for idea in user["saved_business_ideas"]:
            render_card(idea.get("title", ""), idea.get("description"), chips=[idea.get("savedAt", "")[:10]])
            open_col, remove_col = st.columns(2)
            if open_col.button("Open", key=f"dash_open_idea_{idea['id']}"):
                handoff().put(BUSINESS_IDEA_KEY, idea)
                navigate("business")
            if remove_col.button("Remove", key=f"dash_remove_idea_{idea['id']}"):
                with db_session() as db:
                    remove_artifact(db, user["id"], BUSINESS_IDEAS, idea["id"])
                st.rerun()
        if not user["saved_business_ideas"]:
            st.caption("No saved business ideas yet.")

    with profile_tab:
        if user.get("profile_pic"):
            st.image(user["profile_pic"], width=96)
        with st.form("profile_form"):
            name = st.text_input("Name", value=user.get("name") or "")
            phone = st.text_input("Phone", value=user.get("phone") or "")
            picture = st.text_input("Profile picture URL", value=user.get("profile_pic") or "")
            submitted = st.form_submit_button("Save profile")
        if submitted:
            try:
                with db_session() as db:
                    update_profile(db, user["id"], name=name, phone=phone, profile_pic=picture)
                st.success("Profile updated.")
                st.rerun()
            except AccountError as exc:
                st.error(str(exc))


def render_subscription_page(user: dict[str, Any] | None) -> None:
    st.title("Subscription Plans")
    order_id = _query_get("order_id")
    if order_id and user:
        try:
            with db_session() as db:
                order = confirm_order(db, SETTINGS, order_id)
                status, plan = order.status, order.plan
            if status == "PAID":
                st.success(f"Payment received. Your {plan} plan is active.")
            else:
                st.info(f"Payment status: {status}. Your dashboard will update once it is confirmed.")
        except PaymentError as exc:
            st.error(str(exc))
        _query_set(order_id=None)

    descriptions = {
        "Basic": "Career path and sports tools.",
        "Student": "Adds quiz, business blaster, notes and videos.",
        "Teacher": "Teach Ability dashboard, assigned tests and teacher notes.",
        "Parent": "Child Ability tests and school fee structures.",
    }
    cols = st.columns(len(PLANS))
    for idx, (plan, amount) in enumerate(PLANS.items()):
        with cols[idx]:
            render_card(plan, descriptions[plan], chips=["Free" if amount == 0 else f"₹{amount}"])
            current = user is not None and user["subscription_model"] == plan.lower()
            if not st.button("Current plan" if current else "Choose plan", key=f"plan_{plan}", disabled=current):
                continue
            log_action(user["id"] if user else None, "plan_selected", {"plan_name": plan, "price": amount})
            if user is None:
                navigate("login")
            if amount == 0:
                with db_session() as db:
                    set_subscription(db, user["id"], "basic", is_subscribed=False)
                st.rerun()
            try:
                with db_session() as db:
                    order = create_order(db, SETTINGS, user["id"], plan)
                    st.session_state["checkout_session"] = order.payment_session_id
            except PaymentError as exc:
                st.error(str(exc))

    session_id = st.session_state.pop("checkout_session", None)
    if session_id:
        st.info("Redirecting to secure checkout...")
        render_checkout(session_id, SETTINGS.cashfree_env)


def render_contact_page(user: dict[str, Any] | None) -> None:
    st.title("Contact Us")
    with st.form("contact_form"):
        first_col, last_col = st.columns(2)
        first_name = first_col.text_input("First name", value=(user or {}).get("name") or "")
        last_name = last_col.text_input("Last name")
        email = st.text_input("Email", value=(user or {}).get("email") or "")
        message = st.text_area("Message")
        submitted = st.form_submit_button("Send message")
    if not submitted:
        return
    if not first_name.strip() or "@" not in email or not message.strip():
        st.error("Please fill in your name, a valid email and a message.")
        return
    try:
        Mailer(SETTINGS).send_contact(first_name.strip(), last_name.strip(), email.strip(), message.strip())
        st.success("Message sent! We will get back to you soon.")
    except MailerError:
        st.error("Failed to send email. Please try again later.")


def render_admin_page(user: dict[str, Any] | None) -> None:
    if not user or user["role"] != "admin":
        st.error("Admins only.")
        return
    st.title("Admin")
    with db_session() as db:
        users = db.scalars(select(User).order_by(User.created_at.desc())).all()
        frame = pd.DataFrame(
            [
                {
                    "Email": u.email,
                    "Name": u.name,
                    "Role": u.role,
                    "Plan": u.subscription_model,
                    "Subscribed": u.is_subscribed,
                    "Renewal": u.renewal_date.date() if u.renewal_date else None,
                }
                for u in users
            ]
        )
        actions = db.scalars(select(AuditLog.action)).all()
        lapsed = expired_users(db)
        reviews = pending_reviews(db)
    user_ids = {u.email: str(u.id) for u in users}

    users_tab, renewals_tab, notes_tab, activity_tab, analytics_tab = st.tabs(
        ["Users", "Renewals", f"Notes review ({len(reviews)})", "Activity", "Analytics"]
    )
    with users_tab:
        st.dataframe(frame, use_container_width=True, hide_index=True)
        with st.form("admin_subscription"):
            email = st.selectbox("User", list(user_ids))
            plan = st.selectbox("Plan", ["basic", "student", "teacher", "parent"])
            active = st.checkbox("Subscribed", value=True)
            renewal = st.date_input("Renewal date (leave empty for none)", value=None)
            submitted = st.form_submit_button("Update subscription")
        if submitted and email:
            renewal_at = datetime.combine(renewal, datetime.min.time(), tzinfo=timezone.utc) if renewal else None
            with db_session() as db:
                set_subscription(db, user_ids[email], plan, is_subscribed=active)
                set_renewal_date(db, user_ids[email], renewal_at)
            log_action(user["id"], "subscription_override", {"email": email, "plan": plan, "renewal": str(renewal or "")})
            st.success("Subscription updated.")
            st.rerun()

        st.subheader("Delete user")
        others = [e for e, uid in user_ids.items() if uid != user["id"]]
        with st.form("admin_delete_user"):
            doomed = st.selectbox("User", others)
            confirmed = st.checkbox("I understand this permanently removes the account")
            delete_clicked = st.form_submit_button("Delete user")
        if delete_clicked and doomed:
            if not confirmed:
                st.warning("Tick the confirmation box to delete the account.")
            else:
                try:
                    with db_session() as db:
                        delete_user(db, user_ids[doomed])
                except AccountError as exc:
                    st.error(str(exc))
                else:
                    log_action(user["id"], "user_deleted", {"email": doomed})
                    st.success(f"Deleted {doomed}.")
                    st.rerun()

    with renewals_tab:
        if not lapsed:
            st.info("No expired subscriptions.")
        else:
            st.dataframe(
                pd.DataFrame(
                    [
                        {
                            "Email": u.email,
                            "Name": u.name,
                            "Plan": u.subscription_model,
                            "Renewal": u.renewal_date.date() if u.renewal_date else None,
                        }
                        for u in lapsed
                    ]
                ),
                use_container_width=True,
                hide_index=True,
            )
            if st.button(f"Send renewal emails ({len(lapsed)})", key="admin_send_renewals"):
                try:
                    sent = send_renewal_emails(Mailer(SETTINGS), lapsed)
                except MailerError as exc:
                    st.error(str(exc))
                else:
                    log_action(user["id"], "renewal_emails_sent", {"sent": sent, "expired": len(lapsed)})
                    st.success(f"Sent {sent} of {len(lapsed)} renewal emails.")

    with notes_tab:
        if not reviews:
            st.info("No uploads waiting for review.")
        for review in reviews:
            path = review.path_data
            where = " > ".join(str(path[key]) for key in ("class", "stream", "subject", "chapter", "topic") if path.get(key))
            render_card(review.file_name, where, chips=[review.teacher_email])
            st.markdown(f"[Open file]({review.file_url})")
            approve_col, reject_col = st.columns(2)
            decision = None
            if approve_col.button("Approve", key=f"admin_approve_{review.id}"):
                decision = "approved"
            if reject_col.button("Reject", key=f"admin_reject_{review.id}"):
                decision = "rejected"
            if decision is None:
                continue
            try:
                with db_session() as db:
                    if decision == "approved":
                        approve_review(db, review.id)
                    else:
                        reject_review(db, review.id)
            except NoteReviewError as exc:
                st.error(str(exc))
            else:
                log_action(user["id"], f"notes_{decision}", {"review_id": str(review.id), "path": path.get("path")})
                st.rerun()

    with activity_tab:
        email = st.selectbox("User", list(user_ids), key="admin_activity_user")
        if email:
            with db_session() as db:
                logs = [
                    {"When": entry.created_at, "Action": entry.action, "Details": json.dumps(entry.details_json or {}, default=str)}
                    for entry in user_activity_logs(db, user_ids[email])
                ]
            if not logs:
                st.info("No activity recorded for this user.")
            else:
                st.dataframe(pd.DataFrame(logs), use_container_width=True, hide_index=True)

    with analytics_tab:
        counts = pd.Series(dict(Counter(actions).most_common(15)), name="Events")
        if counts.empty:
            st.info("No events recorded yet.")
        else:
            st.bar_chart(counts)


def render_login_page(user: dict[str, Any] | None) -> None:
    if user:
        st.success(f"Logged in as {user['email']} ({user['role']})")
        if st.button("Logout", key="logout_main"):
            st.session_state.pop("auth_user", None)
            st.rerun()
        return
    login_tab, register_tab = st.tabs(["Login", "Register"])
    with login_tab:
        with st.form("login_form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Login")
        if submitted:
            with db_session() as db:
                found = authenticate_user(db, email, password)
                if found:
                    st.session_state["auth_user"] = {"id": str(found.id), "role": found.role}
            if found:
                log_action(str(found.id), "login", {})
                navigate("dashboard")
            st.error("Invalid email or password.")
    with register_tab:
        with st.form("register_form"):
            name = st.text_input("Full name")
            email = st.text_input("Email", key="register_email")
            phone = st.text_input("Phone")
            role = st.selectbox("I am a", ["student", "teacher", "parent"])
            password = st.text_input("Password", type="password", key="register_password")
            submitted = st.form_submit_button("Create account")
        if submitted:
            try:
                with db_session() as db:
                    created = register_user(db, name, email, password, role=role, phone=phone or None)
                    st.session_state["auth_user"] = {"id": str(created.id), "role": created.role}
                log_action(st.session_state["auth_user"]["id"], "sign_up", {"role": role})
                navigate("dashboard")
            except AccountError as exc:
                st.error(str(exc))


PAGE_RENDERERS: dict[str, Callable[[dict[str, Any] | None], None]] = {
    "home": render_home,
    "career-form": render_career_form_page,
    "career-path": render_career_path_page,
    "quiz": render_quiz_page,
    "sport": render_sports_page,
    "business": render_business_page,
    "notes": render_notes_page,
    "videos": render_videos_page,
    "child-ability": render_child_ability_page,
    "fee-structure": render_fee_structure_page,
    "teach-ability": render_teach_ability_page,
    "teacher-notes": render_teacher_notes_page,
    "test": render_student_test_page,
    "dashboard": render_dashboard_page,
    "subscription": render_subscription_page,
    "contact": render_contact_page,
    "admin": render_admin_page,
    "login": render_login_page,
}


def render_sidebar(user: dict[str, Any] | None, page: str) -> str:
    pages = [p for p in PAGES if p != "admin" or (user and user["role"] == "admin")]
    with st.sidebar:
        st.markdown("## JurniQ")
        if user:
            st.caption(f"{user.get('name') or user['email']} | {user['subscription_model']} plan")
        selected = st.radio("Go to", pages, index=pages.index(page) if page in pages else 0, format_func=PAGES.get)
        if user and st.button("Logout", key="logout_sidebar"):
            st.session_state.pop("auth_user", None)
            st.rerun()
    return selected


def main() -> None:
    bootstrap()
    query_page = _query_get("page")
    if query_page in PAGES and "page" not in st.session_state:
        st.session_state["page"] = query_page
    page = st.session_state.get("page", "home")

    user = get_current_user()
    selected = render_sidebar(user, page)
    if selected != page:
        navigate(selected)
    _query_set(page=page)
    PAGE_RENDERERS[page](user)


if __name__ == "__main__":
    main()
