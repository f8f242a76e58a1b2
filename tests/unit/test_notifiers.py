"""
Unit tests for notifier adapters.

Tests verify the console and SMTP notifiers implement the Notifier
protocol, report failures through their return value and never raise.
"""

import logging
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from src.adapters.smtp.console import ConsoleNotifier
from src.adapters.smtp.sender import OTP_SUBJECT, WELCOME_SUBJECT, SmtpNotifier


def make_smtp_notifier() -> SmtpNotifier:
    return SmtpNotifier(
        host="smtp.example.com",
        port=587,
        username="mailer@example.com",
        password="app-password",
        sender="no-reply@example.com",
        otp_expiry_minutes=10,
    )


class TestConsoleNotifier:
    """Tests for ConsoleNotifier."""

    def test_no_explicit_inheritance(self) -> None:
        """ConsoleNotifier uses structural subtyping, not inheritance."""
        assert ConsoleNotifier.__bases__ == (object,)

    def test_send_otp_logs_code(self, caplog: pytest.LogCaptureFixture) -> None:
        """OTP is logged at INFO level in the [OTP] format."""
        notifier = ConsoleNotifier()

        with caplog.at_level(logging.INFO):
            delivered = notifier.send_otp("user@example.com", "alice", "482913")

        assert delivered is True
        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.INFO
        assert "[OTP]" in caplog.text
        assert "Email: user@example.com" in caplog.text
        assert "Code: 482913" in caplog.text

    def test_send_welcome_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        notifier = ConsoleNotifier()

        with caplog.at_level(logging.INFO):
            delivered = notifier.send_welcome("user@example.com", "alice")

        assert delivered is True
        assert "[WELCOME]" in caplog.text


class TestSmtpNotifier:
    """Tests for SmtpNotifier with aiosmtplib.send patched out."""

    def test_send_otp_uses_starttls_and_credentials(self) -> None:
        notifier = make_smtp_notifier()

        with patch("src.adapters.smtp.sender.aiosmtplib.send", new_callable=AsyncMock) as send:
            delivered = notifier.send_otp("user@example.com", "alice", "482913")

        assert delivered is True
        send.assert_awaited_once()
        kwargs = send.call_args.kwargs
        assert kwargs["hostname"] == "smtp.example.com"
        assert kwargs["port"] == 587
        assert kwargs["username"] == "mailer@example.com"
        assert kwargs["password"] == "app-password"
        assert kwargs["start_tls"] is True
        assert kwargs["timeout"] == 10.0

    def test_otp_message_content(self) -> None:
        notifier = make_smtp_notifier()

        with patch("src.adapters.smtp.sender.aiosmtplib.send", new_callable=AsyncMock) as send:
            notifier.send_otp("user@example.com", "alice", "482913")

        msg = send.call_args.args[0]
        assert msg["Subject"] == OTP_SUBJECT
        assert msg["To"] == "user@example.com"
        assert msg["From"] == "no-reply@example.com"
        bodies = [part.get_payload(decode=True).decode() for part in msg.get_payload()]
        assert all("482913" in body for body in bodies)
        assert any("10 minutes" in body for body in bodies)
        assert all("alice" in body for body in bodies)

    def test_welcome_message_subject(self) -> None:
        notifier = make_smtp_notifier()

        with patch("src.adapters.smtp.sender.aiosmtplib.send", new_callable=AsyncMock) as send:
            delivered = notifier.send_welcome("user@example.com", "alice")

        assert delivered is True
        assert send.call_args.args[0]["Subject"] == WELCOME_SUBJECT

    def test_start_tls_can_be_disabled(self) -> None:
        notifier = SmtpNotifier(
            host="localhost",
            port=1025,
            username="u",
            password="p",
            sender="no-reply@example.com",
            start_tls=False,
        )

        with patch("src.adapters.smtp.sender.aiosmtplib.send", new_callable=AsyncMock) as send:
            notifier.send_welcome("user@example.com", "alice")

        assert send.call_args.kwargs["start_tls"] is False

    def test_smtp_error_returns_false(self, caplog: pytest.LogCaptureFixture) -> None:
        """Transport failures are logged and reported, never raised."""
        notifier = make_smtp_notifier()
        error = aiosmtplib.SMTPAuthenticationError(535, "bad credentials")

        with patch(
            "src.adapters.smtp.sender.aiosmtplib.send", new_callable=AsyncMock, side_effect=error
        ), caplog.at_level(logging.ERROR):
            delivered = notifier.send_otp("user@example.com", "alice", "482913")

        assert delivered is False
        assert "user@example.com" in caplog.text

    def test_connection_error_returns_false(self) -> None:
        notifier = make_smtp_notifier()

        with patch(
            "src.adapters.smtp.sender.aiosmtplib.send",
            new_callable=AsyncMock,
            side_effect=ConnectionRefusedError(),
        ):
            assert notifier.send_welcome("user@example.com", "alice") is False
