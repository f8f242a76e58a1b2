"""
SMTP notifier adapter - Implements Notifier protocol over SMTP.

Sends the OTP and welcome emails as multipart text/HTML messages through
aiosmtplib using STARTTLS and the EMAIL_USER / EMAIL_PASS credentials.
Routes run in the threadpool, so each send drives its own event loop.
Transport failures are logged and reported as False; nothing is raised
into the caller.
"""

import asyncio
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Verify Your Email - Registration OTP"
WELCOME_SUBJECT = "Welcome to VeluxSwap!"


def _otp_html(username: str, code: str, expiry_minutes: int) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <div style="background: #667eea; padding: 20px; text-align: center;">
        <h1 style="color: white; margin: 0;">Email Verification</h1>
      </div>
      <div style="padding: 30px; background-color: #f9f9f9;">
        <h2 style="color: #333;">Hello {username}!</h2>
        <p style="color: #666;">Please use the following OTP to verify your email address:</p>
        <div style="text-align: center; margin: 30px 0; font-size: 32px; font-weight: bold;
                    letter-spacing: 5px;">{code}</div>
        <p style="color: #666;">This OTP will expire in {expiry_minutes} minutes.</p>
        <p style="color: #999; font-size: 14px;">If you didn't request this, please ignore this email.</p>
      </div>
    </div>
    """


def _welcome_html(username: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <div style="background: #28a745; padding: 20px; text-align: center;">
        <h1 style="color: white; margin: 0;">Welcome to VeluxSwap!</h1>
      </div>
      <div style="padding: 30px; background-color: #f9f9f9;">
        <h2 style="color: #333;">Hello {username}!</h2>
        <p style="color: #666;">Your account has been successfully verified. You can now log in.</p>
      </div>
    </div>
    """


class SmtpNotifier:
    """
    Implements Notifier protocol via an SMTP relay.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Each message opens its own connection; there is no retry.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        otp_expiry_minutes: int = 10,
        timeout: float = 10.0,
        start_tls: bool = True,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender
        self._otp_expiry_minutes = otp_expiry_minutes
        self._timeout = timeout
        self._start_tls = start_tls

    def send_otp(self, email: str, username: str, code: str) -> bool:
        plain = (
            f"Hello {username}!\n\n"
            f"Your verification code is {code}.\n"
            f"It expires in {self._otp_expiry_minutes} minutes."
        )
        html = _otp_html(username, code, self._otp_expiry_minutes)
        return self._send(email, OTP_SUBJECT, plain, html)

    def send_welcome(self, email: str, username: str) -> bool:
        plain = f"Hello {username}!\n\nYour account has been successfully verified."
        return self._send(email, WELCOME_SUBJECT, plain, _welcome_html(username))

    def _send(self, to_email: str, subject: str, plain: str, html: str) -> bool:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self._sender
        msg["To"] = to_email
        msg.attach(MIMEText(plain, "plain"))
        msg.attach(MIMEText(html, "html"))

        try:
            asyncio.run(
                aiosmtplib.send(
                    msg,
                    hostname=self._host,
                    port=self._port,
                    username=self._username,
                    password=self._password,
                    start_tls=self._start_tls,
                    timeout=self._timeout,
                )
            )
        except (aiosmtplib.SMTPException, OSError):
            logger.exception("Failed to send '%s' email to %s", subject, to_email)
            return False

        logger.info("Email '%s' sent to %s", subject, to_email)
        return True
