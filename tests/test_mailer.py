import smtplib
from email import message_from_string

import pytest

from mailer import Mailer, MailerError, consultation_message, contact_message, renewal_message
from settings import Settings

SETTINGS = Settings(
    smtp_host="smtp.test",
    smtp_port=465,
    smtp_username="bot@jurniq.test",
    smtp_password="pw",
    smtp_from_email="bot@jurniq.test",
    contact_inbox="team@jurniq.test",
)


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, context=None):
        self.host = host
        self.port = port
        self.sent = []
        self.logged_in = None
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def login(self, user, password):
        self.logged_in = (user, password)

    def sendmail(self, sender, recipients, body):
        self.sent.append((sender, recipients, body))


class RefusingSMTP(FakeSMTP):
    def login(self, user, password):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")


def test_contact_message_escapes_html() -> None:
    subject, text, html_body = contact_message("Ria", "Sen", "ria@example.com", "<b>Hi</b>")
    assert subject == "New Contact Form Submission from Ria Sen"
    assert "Message:\n<b>Hi</b>" in text
    assert "&lt;b&gt;Hi&lt;/b&gt;" in html_body


def test_consultation_message_marks_missing_sections() -> None:
    subject, _, html_body = consultation_message("Dev", "dev@example.com", {"title": "Pilot", "description": "Flies"})
    assert subject == "New Free Consultation Request from Dev"
    assert html_body.count("Not provided") == 2

    _, _, with_skills = consultation_message(
        "Dev",
        "dev@example.com",
        {"title": "Pilot"},
        skills=[{"name": "Navigation", "explanation": "Reading charts"}],
    )
    assert "Navigation" in with_skills
    assert with_skills.count("Not provided") == 1


def test_send_contact_uses_smtp_factory() -> None:
    FakeSMTP.instances.clear()
    Mailer(SETTINGS, smtp_factory=FakeSMTP).send_contact("Ria", "", "ria@example.com", "Hello")

    server = FakeSMTP.instances[0]
    assert (server.host, server.port) == ("smtp.test", 465)
    assert server.logged_in == ("bot@jurniq.test", "pw")
    sender, recipients, body = server.sent[0]
    assert sender == "bot@jurniq.test"
    assert recipients == ["team@jurniq.test"]
    message = message_from_string(body)
    assert message["Subject"] == "New Contact Form Submission from Ria"
    assert message["Reply-To"] == "ria@example.com"
    assert message.get_content_type() == "multipart/alternative"


def test_send_requires_configuration() -> None:
    with pytest.raises(MailerError, match="not configured"):
        Mailer(Settings(smtp_username=None), smtp_factory=FakeSMTP).send("s", "t", "<p>h</p>")


def test_smtp_failures_become_mailer_errors() -> None:
    with pytest.raises(MailerError):
        Mailer(SETTINGS, smtp_factory=RefusingSMTP).send_consultation("Dev", "dev@example.com", {"title": "Pilot"})


def test_renewal_message_names_the_plan() -> None:
    subject, text, html_body = renewal_message("Asha", "parent")
    assert subject == "Your JurniQ plan has expired"
    assert text.startswith("Hi Asha,")
    assert "Parent plan has expired" in text
    assert "<strong>Parent</strong>" in html_body

    _, anonymous, _ = renewal_message("", "student")
    assert anonymous.startswith("Hi,")


def test_send_renewal_goes_to_the_user() -> None:
    FakeSMTP.instances.clear()
    Mailer(SETTINGS, smtp_factory=FakeSMTP).send_renewal("asha@example.com", "Asha", "parent")
    _, recipients, body = FakeSMTP.instances[0].sent[0]
    assert recipients == ["asha@example.com"]
    assert message_from_string(body)["Subject"] == "Your JurniQ plan has expired"
