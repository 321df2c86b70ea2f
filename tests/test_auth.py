import pytest

from auth import (
    AccountError,
    authenticate_user,
    ensure_profile_defaults,
    get_user_by_email,
    register_user,
    set_subscription,
    update_profile,
)
from models import User


def test_register_then_authenticate(db) -> None:
    user = register_user(db, " Priya ", "Priya@Example.com ", "secret1", role="parent", phone="9876543210")

    assert user.email == "priya@example.com"
    assert user.name == "Priya"
    assert user.subscription_model == "basic"
    assert user.is_subscribed is False
    assert user.saved_academies == []

    assert authenticate_user(db, "PRIYA@example.com", "secret1").id == user.id
    assert authenticate_user(db, "priya@example.com", "wrong") is None
    assert authenticate_user(db, "nobody@example.com", "secret1") is None


def test_register_rejects_duplicates_and_admin_role(db) -> None:
    register_user(db, "A", "a@example.com", "secret1")
    with pytest.raises(AccountError, match="already exists"):
        register_user(db, "A again", "A@example.com", "secret1")
    with pytest.raises(AccountError):
        register_user(db, "Boss", "boss@example.com", "secret1", role="admin")
    with pytest.raises(AccountError, match="at least 6"):
        register_user(db, "Short", "short@example.com", "123")


def test_profile_defaults_fill_missing_lists() -> None:
    user = User(role="student", email="old@example.com", saved_academies=None, saved_business_ideas=None, subscription_model="")
    ensure_profile_defaults(user)
    assert user.saved_academies == []
    assert user.saved_business_ideas == []
    assert user.subscription_model == "basic"


def test_update_profile_blanks_become_none(db) -> None:
    user = register_user(db, "Kabir", "kabir@example.com", "secret1", phone="12345")
    update_profile(db, user.id, name="Kabir S", phone="  ", profile_pic="https://example.com/me.png")
    refreshed = get_user_by_email(db, "kabir@example.com")
    assert refreshed.name == "Kabir S"
    assert refreshed.phone is None
    assert refreshed.profile_pic == "https://example.com/me.png"


def test_basic_plan_is_never_subscribed(db) -> None:
    user = register_user(db, "Tara", "tara@example.com", "secret1")
    set_subscription(db, user.id, "teacher")
    assert (user.subscription_model, user.is_subscribed) == ("teacher", True)

    set_subscription(db, user.id, "basic", is_subscribed=True)
    assert (user.subscription_model, user.is_subscribed) == ("basic", False)

    with pytest.raises(AccountError):
        set_subscription(db, user.id, "gold")
