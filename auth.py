from __future__ import annotations

import logging
import uuid
from typing import Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.orm import Session

from models import ROLES, SUBSCRIPTION_MODELS, User

logger = logging.getLogger(__name__)


class AccountError(ValueError):
    pass


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = db.scalar(select(User).where(User.email == normalize_email(email)))
    if not user or not user.password_hash:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def get_user_by_id(db: Session, user_id: str | uuid.UUID) -> Optional[User]:
    return db.get(User, uuid.UUID(str(user_id)))


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.scalar(select(User).where(User.email == normalize_email(email)))


def register_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    role: str = "student",
    phone: str | None = None,
) -> User:
    if role not in ROLES or role == "admin":
        raise AccountError(f"Unsupported role: {role}")
    if len(password or "") < 6:
        raise AccountError("Password must be at least 6 characters.")
    email = normalize_email(email)
    if not email or "@" not in email:
        raise AccountError("Please enter a valid email.")
    if get_user_by_email(db, email):
        raise AccountError("An account with this email already exists.")

    user = User(
        role=role,
        name=(name or "").strip() or None,
        email=email,
        phone=(phone or "").strip() or None,
        password_hash=hash_password(password),
        is_subscribed=False,
        subscription_model="basic",
        saved_academies=[],
        saved_business_ideas=[],
    )
    db.add(user)
    db.flush()
    logger.info("Registered %s account %s", role, user.id)
    return user


def ensure_profile_defaults(user: User) -> User:
    """Fill in profile fields that older rows may not carry yet."""
    if user.saved_academies is None:
        user.saved_academies = []
    if user.saved_business_ideas is None:
        user.saved_business_ideas = []
    if not user.subscription_model:
        user.subscription_model = "basic"
    if user.is_subscribed is None:
        user.is_subscribed = False
    return user


def update_profile(
    db: Session,
    user_id: str | uuid.UUID,
    name: str | None = None,
    phone: str | None = None,
    profile_pic: str | None = None,
) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise AccountError("User not found.")
    if name is not None:
        user.name = name.strip() or None
    if phone is not None:
        user.phone = phone.strip() or None
    if profile_pic is not None:
        user.profile_pic = profile_pic.strip() or None
    return user


def set_subscription(db: Session, user_id: str | uuid.UUID, model: str, is_subscribed: bool = True) -> User:
    if model not in SUBSCRIPTION_MODELS:
        raise AccountError(f"Unknown subscription model: {model}")
    user = get_user_by_id(db, user_id)
    if user is None:
        raise AccountError("User not found.")
    user.subscription_model = model
    user.is_subscribed = bool(is_subscribed) and model != "basic"
    logger.info("Subscription for %s set to %s (active=%s)", user.id, model, user.is_subscribed)
    return user
