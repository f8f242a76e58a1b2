"""
Account entity - Persisted account state and input validation.

The Account Store owns Account records; the service mutates them only
through load-modify-save cycles. AccountView is the only shape that
leaves the service boundary.
"""

import re
from dataclasses import dataclass
from datetime import datetime

from .exceptions import ValidationError

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 6

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class Account:
    """
    Registered account.

    Invariants:
    - verified implies pending_otp and otp_expires_at are None
    - pending_otp set implies otp_expires_at set
    - otp_attempt_count never decreases
    """

    username: str
    email: str
    password_hash: str
    verified: bool = False
    pending_otp: str | None = None
    otp_expires_at: datetime | None = None
    otp_attempt_count: int = 0
    last_otp_issued_at: datetime | None = None
    id: str | None = None
    created_at: datetime | None = None

    def issue_otp(self, code: str, now: datetime, expires_at: datetime) -> None:
        """Replace the pending OTP and count the issuance."""
        self.pending_otp = code
        self.otp_expires_at = expires_at
        self.last_otp_issued_at = now
        self.otp_attempt_count += 1

    def mark_verified(self) -> None:
        self.pending_otp = None
        self.otp_expires_at = None
        self.verified = True

    def to_view(self) -> "AccountView":
        return AccountView(
            id=self.id or "",
            username=self.username,
            email=self.email,
            verified=self.verified,
        )


@dataclass(frozen=True)
class AccountView:
    """Sanitized account view - no password hash, no OTP internals."""

    id: str
    username: str
    email: str
    verified: bool


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def validate_email(email: str) -> str:
    """Normalize and check the basic local@domain.tld shape."""
    normalized = normalize_email(email or "")
    if not normalized:
        raise ValidationError("Email is required")
    if not _EMAIL_PATTERN.match(normalized):
        raise ValidationError("Please provide a valid email address")
    return normalized


def validate_registration(username: str, email: str, password: str) -> tuple[str, str]:
    """
    Validate registration input.

    Returns:
        Tuple of (trimmed_username, normalized_email)

    Raises:
        ValidationError: If any field is missing or malformed
    """
    username = (username or "").strip()
    if not username or not (email or "").strip() or not password:
        raise ValidationError("Please provide username, email and password")
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    return username, validate_email(email)
