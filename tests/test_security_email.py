from types import SimpleNamespace

import emails
import pytest

from storefront.config import settings
from storefront.exceptions import EmailError
from storefront.utils import security
from storefront.utils.email import EmailSender, send_email


def test_password_hashing():
    hashed = security.get_password_hash("secret123")

    assert hashed != "secret123"
    assert security.verify_password("secret123", hashed)
    assert not security.verify_password("secret124", hashed)


@pytest.mark.parametrize("password,expected", [
    ("secret123", []),
    ("abc1", ["Password must be at least 6 characters long"]),
    ("password", ["Password must contain at least one digit"]),
])
def test_password_policy(password, expected):
    assert security.password_policy_errors(password) == expected


def test_otp_codes_are_numeric():
    codes = {security.generate_otp(6) for _ in range(20)}

    assert all(len(code) == 6 and code.isdigit() for code in codes)
    assert len(codes) > 1


def test_otp_hash_comparison():
    code_hash = security.hash_otp("482913")

    assert security.verify_otp_hash("482913", code_hash)
    assert not security.verify_otp_hash("482914", code_hash)
    assert not security.verify_otp_hash("", code_hash)


def test_reset_tokens_are_unique_and_opaque():
    first, second = security.generate_reset_token(), security.generate_reset_token()

    assert first != second
    assert len(first) >= 64


def test_user_token_claims():
    user = SimpleNamespace(email="a@x.com", id=7, role="Seller")

    payload = security.decode_access_token(security.create_user_token(user))

    assert payload["sub"] == "a@x.com"
    assert payload["uid"] == 7
    assert payload["roles"] == ["Seller"]
    assert "exp" in payload


def test_send_email_without_smtp_settings(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", None)

    with pytest.raises(EmailError) as exc_info:
        send_email("a@x.com", subject="Hi", html_content="<p>Hi</p>")

    assert "SMTP_HOST" in exc_info.value.details["missing_settings"]


class FakeMessage:
    """Stands in for emails.Message and records what would be sent"""

    delivered = True

    def __init__(self, outbox, **kwargs):
        self.outbox = outbox
        self.kwargs = kwargs

    def send(self, to=None, smtp=None):
        self.outbox.append({"to": to, "subject": self.kwargs["subject"], "html": self.kwargs["html"], "smtp": smtp})
        if self.delivered:
            return SimpleNamespace(success=True, error=None)
        return SimpleNamespace(success=False, error="550 rejected")


@pytest.fixture
def smtp(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(settings, "SMTP_USER", "mailer")
    monkeypatch.setattr(settings, "SMTP_PASSWORD", "hunter2")
    monkeypatch.setattr(settings, "EMAILS_FROM", "noreply@example.com")

    outbox = []
    monkeypatch.setattr(emails, "Message", lambda **kwargs: FakeMessage(outbox, **kwargs))
    return outbox


def test_verification_email_contains_code(smtp):
    assert EmailSender().send_verification_otp("a@x.com", "482913", "Omar")

    assert smtp[0]["to"] == "a@x.com"
    assert "482913" in smtp[0]["html"]
    assert "Omar" in smtp[0]["html"]
    assert smtp[0]["smtp"]["host"] == "smtp.example.com"


def test_failed_delivery_raises_email_error(smtp, monkeypatch):
    monkeypatch.setattr(FakeMessage, "delivered", False)

    with pytest.raises(EmailError):
        EmailSender().send_password_reset_otp("a@x.com", "482913")
