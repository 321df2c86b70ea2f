"""Subscription checkout against the Cashfree payment gateway."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

import requests
from sqlalchemy import select
from sqlalchemy.orm import Session

from auth import get_user_by_id, set_subscription
from models import PaymentOrder, User
from settings import Settings

logger = logging.getLogger(__name__)

API_VERSION = "2023-08-01"
CURRENCY = "INR"
REQUEST_TIMEOUT = 20

PLANS: dict[str, int] = {"Basic": 0, "Student": 99, "Teacher": 129, "Parent": 149}
PLAN_MODELS = {name: name.lower() for name in PLANS}

PAID = "PAID"
FINAL_STATUSES = {"PAID", "EXPIRED", "TERMINATED", "FAILED"}


class PaymentError(Exception):
    pass


def _headers(settings: Settings) -> dict[str, str]:
    if not settings.cashfree_app_id or not settings.cashfree_secret_key:
        raise PaymentError("Payments are not configured.")
    return {
        "x-client-id": settings.cashfree_app_id,
        "x-client-secret": settings.cashfree_secret_key,
        "x-api-version": API_VERSION,
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def new_order_id() -> str:
    return f"order_{uuid.uuid4().hex[:24]}"


def order_request(user: User, plan: str, app_url: str, order_id: str) -> dict[str, Any]:
    return {
        "order_id": order_id,
        "order_amount": PLANS[plan],
        "order_currency": CURRENCY,
        "customer_details": {
            "customer_id": str(user.id),
            "customer_phone": user.phone,
            "customer_email": user.email,
        },
        "order_meta": {"return_url": f"{app_url.rstrip('/')}/?page=subscription&order_id={{order_id}}"},
        "order_note": f"Subscription for {plan} plan",
    }


def _error_detail(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body)
    return str(body)


def create_order(db: Session, settings: Settings, user_id: str | uuid.UUID, plan: str) -> PaymentOrder:
    """Open a gateway order for ``plan`` and remember it locally.

    The returned order carries the ``payment_session_id`` the hosted checkout
    needs. The free plan never reaches the gateway.
    """
    if plan not in PLANS or PLANS[plan] <= 0:
        raise PaymentError(f"Plan {plan} does not need a payment.")
    user = get_user_by_id(db, user_id)
    if user is None:
        raise PaymentError("User not found.")
    if not user.phone:
        raise PaymentError("Please add a phone number to your profile before choosing a plan.")

    order_id = new_order_id()
    payload = order_request(user, plan, settings.app_url, order_id)
    try:
        response = requests.post(
            f"{settings.cashfree_base_url}/orders",
            json=payload,
            headers=_headers(settings),
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as exc:
        logger.exception("Cashfree order creation failed for user %s", user.id)
        raise PaymentError("Could not reach the payment gateway. Please try again.") from exc

    if not 200 <= response.status_code < 300:
        detail = _error_detail(response)
        logger.error("Cashfree rejected order %s: %s %s", order_id, response.status_code, detail)
        raise PaymentError(f"Payment gateway error: {detail}")

    body = response.json()
    session_id = body.get("payment_session_id")
    if not session_id:
        raise PaymentError("Payment gateway did not return a checkout session.")

    order = PaymentOrder(
        order_id=body.get("order_id") or order_id,
        user_id=user.id,
        plan=plan,
        amount=Decimal(PLANS[plan]),
        currency=CURRENCY,
        status=body.get("order_status") or "ACTIVE",
        payment_session_id=session_id,
    )
    db.add(order)
    db.flush()
    logger.info("Created order %s for %s plan (user %s)", order.order_id, plan, user.id)
    return order


def fetch_order_status(settings: Settings, order_id: str) -> str:
    try:
        response = requests.get(
            f"{settings.cashfree_base_url}/orders/{order_id}",
            headers=_headers(settings),
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as exc:
        logger.exception("Cashfree lookup failed for order %s", order_id)
        raise PaymentError("Could not reach the payment gateway. Please try again.") from exc
    if not 200 <= response.status_code < 300:
        raise PaymentError(f"Payment gateway error: {_error_detail(response)}")
    return str(response.json().get("order_status") or "ACTIVE").upper()


def confirm_order(db: Session, settings: Settings, order_id: str, now: datetime | None = None) -> PaymentOrder:
    """Refresh an order from the gateway and activate the plan once it is paid.

    Safe to call repeatedly; a paid order activates the subscription once.
    """
    order = db.get(PaymentOrder, order_id)
    if order is None:
        raise PaymentError("Unknown order.")
    if order.status == PAID:
        return order

    status = fetch_order_status(settings, order_id)
    order.status = status
    if status == PAID:
        order.paid_at = now or datetime.now(timezone.utc)
        set_subscription(db, order.user_id, PLAN_MODELS[order.plan])
        logger.info("Order %s paid; %s plan active for %s", order_id, order.plan, order.user_id)
    db.flush()
    return order


def subscription_status(db: Session, user_id: str | uuid.UUID) -> tuple[str, bool]:
    """Current plan as the dashboard polls it."""
    user = get_user_by_id(db, user_id)
    if user is None:
        return "basic", False
    db.refresh(user)
    return user.subscription_model, bool(user.is_subscribed)


def latest_order(db: Session, user_id: str | uuid.UUID) -> Optional[PaymentOrder]:
    return db.scalars(
        select(PaymentOrder)
        .where(PaymentOrder.user_id == uuid.UUID(str(user_id)))
        .order_by(PaymentOrder.created_at.desc())
        .limit(1)
    ).first()
