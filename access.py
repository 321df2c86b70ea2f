from __future__ import annotations

from dataclasses import dataclass
from typing import Any

FREE_FEATURES = {"career-path", "sport"}
STUDENT_FEATURES = {"notes", "business", "videos", "quiz"}
PARENT_FEATURES = {"child-ability", "fee-structure"}
TEACHER_FEATURES = {"teach-ability", "teacher-notes"}

FEATURE_PLANS: dict[str, set[str]] = {
    **{feature: {"student", "teacher", "parent"} for feature in STUDENT_FEATURES},
    **{feature: {"parent"} for feature in PARENT_FEATURES},
    **{feature: {"teacher"} for feature in TEACHER_FEATURES},
}

SECTION_PLANS = {
    "student-section": None,
    "parents-section": {"parent"},
    "teacher-section": {"teacher"},
}

SECTION_FEATURES = {
    "student-section": ["career-path", "sport", "notes", "business", "videos", "quiz"],
    "parents-section": ["child-ability", "fee-structure"],
    "teacher-section": ["teach-ability", "teacher-notes"],
}


@dataclass
class AccessDecision:
    feature: str
    allowed: bool
    redirect: str | None = None  # login | subscription


def _profile_value(profile: Any, name: str, default: Any = None) -> Any:
    if profile is None:
        return default
    if isinstance(profile, dict):
        return profile.get(name, default)
    return getattr(profile, name, default)


def plan_of(profile: Any) -> str:
    return _profile_value(profile, "subscription_model") or "basic"


def can_use(profile: Any, feature: str) -> bool:
    if profile is None:
        return False
    if feature in FREE_FEATURES:
        return True
    plans = FEATURE_PLANS.get(feature)
    return bool(plans) and plan_of(profile) in plans


def is_locked(profile: Any, feature: str) -> bool:
    """Locked as shown on the dashboard cards.

    Basic or lapsed accounts see every paid student card locked even when
    the plan name alone would allow it.
    """
    if feature in STUDENT_FEATURES and (plan_of(profile) == "basic" or not _profile_value(profile, "is_subscribed", False)):
        return True
    return not can_use(profile, feature)


def check_access(profile: Any, feature: str) -> AccessDecision:
    if profile is None:
        return AccessDecision(feature=feature, allowed=feature in FREE_FEATURES, redirect=None if feature in FREE_FEATURES else "login")
    if is_locked(profile, feature):
        return AccessDecision(feature=feature, allowed=False, redirect="subscription")
    return AccessDecision(feature=feature, allowed=True)


def can_access_section(profile: Any, section: str) -> bool:
    plans = SECTION_PLANS.get(section, set())
    if plans is None:
        return True
    return plan_of(profile) in plans
