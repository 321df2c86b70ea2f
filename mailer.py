"""Outbound email: contact form, consultation requests and renewal reminders."""

from __future__ import annotations

import html
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Any, Iterable

from settings import Settings

logger = logging.getLogger(__name__)

SENDER_NAME = "Jurniq Careers Web"
ACCENT = "#3BB0FF"

_BOX = "background-color: #f9f9f9; padding: 15px; border-radius: 8px; margin: 20px 0;"
_PANEL = (
    f"background-color: #f1f8ff; padding: 15px; border-left: 4px solid {ACCENT}; "
    "border-radius: 4px; color: #444; line-height: 1.6;"
)


class MailerError(Exception):
    pass


def _e(value: Any) -> str:
    return html.escape(str(value or ""))


def _wrap(title: str, body: str, footer: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; '
        'border: 1px solid #e0e0e0; border-radius: 10px;">'
        f'<h2 style="color: {ACCENT}; border-bottom: 2px solid {ACCENT}; padding-bottom: 10px;">{title}</h2>'
        f"{body}"
        f'<p style="font-size: 12px; color: #888; margin-top: 30px; text-align: center;">{footer}</p>'
        "</div>"
    )


def _sender_block(name: str, email: str) -> str:
    return (
        f'<div style="{_BOX}">'
        f'<p style="margin: 5px 0;"><strong>Name:</strong> {_e(name)}</p>'
        f'<p style="margin: 5px 0;"><strong>Email:</strong> '
        f'<a href="mailto:{_e(email)}" style="color: {ACCENT};">{_e(email)}</a></p>'
        "</div>"
    )


def contact_message(first_name: str, last_name: str, email: str, message: str) -> tuple[str, str, str]:
    """Subject, plain text and HTML for a contact-form submission."""
    full_name = f"{first_name} {last_name}".strip()
    subject = f"New Contact Form Submission from {full_name}"
    text = (
        "You have received a new message from the contact form.\n\n"
        f"Name: {full_name}\nEmail: {email}\n\nMessage:\n{message}"
    )
    body = (
        '<p style="font-size: 16px; color: #333;">You have received a new message from the website contact form.</p>'
        + _sender_block(full_name, email)
        + '<h3 style="color: #555; margin-bottom: 10px;">Message:</h3>'
        + f'<div style="{_PANEL} white-space: pre-wrap;">{_e(message)}</div>'
    )
    html_body = _wrap(
        "New Contact Form Submission",
        body,
        "This email was sent automatically from the Jurniq Careers website contact form.",
    )
    return subject, text, html_body


def _section(title: str, rows: list[str]) -> str:
    content = "".join(rows) if rows else "<p>Not provided</p>"
    return (
        f'<h3 style="color: #555; margin-bottom: 10px; margin-top: 20px;">{title}</h3>'
        f'<div style="{_PANEL}">{content}</div>'
    )


def consultation_message(
    name: str,
    email: str,
    recommendation: dict[str, Any],
    skills: Iterable[dict[str, Any]] | None = None,
    interview_questions: Iterable[dict[str, Any]] | None = None,
) -> tuple[str, str, str]:
    subject = f"New Free Consultation Request from {name}"
    skill_rows = [f"<p><strong>{_e(s.get('name'))}:</strong> {_e(s.get('explanation'))}</p>" for s in skills or []]
    question_rows = [
        f"<p><strong>Q: {_e(q.get('question'))}</strong><br/>A: {_e(q.get('answer_explanation'))}</p>"
        for q in interview_questions or []
    ]
    body = (
        _sender_block(name, email)
        + _section(
            "Recommendation Details:",
            [
                f"<p><strong>Title:</strong> {_e(recommendation.get('title'))}</p>",
                f"<p><strong>Description:</strong> {_e(recommendation.get('description'))}</p>",
            ],
        )
        + _section("Key Skills:", skill_rows)
        + _section("Interview Prep Questions:", question_rows)
    )
    text = (
        f"Consultation request from {name} <{email}>\n\n"
        f"Recommendation: {recommendation.get('title', '')}\n{recommendation.get('description', '')}"
    )
    html_body = _wrap(
        "New Consultation Request",
        body,
        "This email was sent automatically from the Jurniq Careers website consultation form.",
    )
    return subject, text, html_body


def renewal_message(name: str, plan: str) -> tuple[str, str, str]:
    subject = "Your JurniQ plan has expired"
    greeting = f"Hi {name}," if name else "Hi,"
    text = (
        f"{greeting}\n\nYour JurniQ {plan.capitalize()} plan has expired. "
        "Renew now to keep using your dashboard features."
    )
    body = (
        f'<p style="font-size: 16px; color: #333;">{_e(greeting)}</p>'
        f'<div style="{_PANEL}">Your JurniQ <strong>{_e(plan.capitalize())}</strong> plan has expired. '
        "Renew now to keep using your dashboard features.</div>"
    )
    html_body = _wrap("Time to renew", body, "You are receiving this because you have a JurniQ Careers account.")
    return subject, text, html_body


class Mailer:
    def __init__(self, settings: Settings, smtp_factory: Any = smtplib.SMTP_SSL) -> None:
        self.settings = settings
        self.smtp_factory = smtp_factory

    def is_configured(self) -> bool:
        s = self.settings
        return bool(s.smtp_host and s.smtp_username and s.smtp_password and s.smtp_from_email)

    def send(self, subject: str, text: str, html_body: str, to: str | None = None, reply_to: str | None = None) -> None:
        if not self.is_configured():
            raise MailerError("Email is not configured.")
        recipient = to or self.settings.contact_inbox
        sender = self.settings.smtp_from_email

        msg = MIMEMultipart("alternative")
        msg["From"] = formataddr((SENDER_NAME, sender))
        msg["To"] = recipient
        msg["Subject"] = subject.replace("\r", " ").replace("\n", " ")
        if reply_to and "\n" not in reply_to and "\r" not in reply_to:
            msg["Reply-To"] = reply_to
        msg.attach(MIMEText(text, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            context = ssl.create_default_context()
            with self.smtp_factory(self.settings.smtp_host, self.settings.smtp_port, context=context) as server:
                server.login(self.settings.smtp_username, self.settings.smtp_password)
                server.sendmail(sender, [recipient], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.exception("Failed to send '%s' to %s", subject, recipient)
            raise MailerError("Failed to send email") from exc
        logger.info("Sent '%s' to %s", subject, recipient)

    def send_contact(self, first_name: str, last_name: str, email: str, message: str) -> None:
        subject, text, html_body = contact_message(first_name, last_name, email, message)
        self.send(subject, text, html_body, reply_to=email)

    def send_renewal(self, email: str, name: str, plan: str) -> None:
        subject, text, html_body = renewal_message(name, plan)
        self.send(subject, text, html_body, to=email)

    def send_consultation(
        self,
        name: str,
        email: str,
        recommendation: dict[str, Any],
        skills: Iterable[dict[str, Any]] | None = None,
        interview_questions: Iterable[dict[str, Any]] | None = None,
    ) -> None:
        subject, text, html_body = consultation_message(name, email, recommendation, skills, interview_questions)
        self.send(subject, text, html_body, reply_to=email)
