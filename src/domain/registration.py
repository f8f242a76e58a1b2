"""
Registration domain service - OTP verification state machine.

This module contains the core business logic for account registration,
email verification, OTP resends and login.

Account Lifecycle (Forward-Only Transitions)
============================================

States:
- UNVERIFIED: Account created, OTP pending
- VERIFIED: Terminal state after successful OTP verification

Valid Transitions:
    [nonexistent] -> UNVERIFIED   (register)
    UNVERIFIED    -> UNVERIFIED   (register again / resend, OTP refreshed)
    UNVERIFIED    -> VERIFIED     (verify_otp with matching, unexpired code)
    UNVERIFIED    -> [nonexistent] (OTP dispatch failed right after creation)

Invalid Transitions (never allowed):
    VERIFIED -> any (VERIFIED is terminal)

Rate limiting:
- register on an unverified account and resend by id share a 60-second cooldown
- resend by email uses a 120-second cooldown, since it needs no prior knowledge
  of the account id
- resend by email is permanently refused once otp_attempt_count >= 5
  (inclusive cap; the counter never resets)

Concurrency relies on the store: unique username/email indexes turn
duplicate-creation races into AccountConflict, and concurrent resends are
last-writer-wins.
"""

import logging
import math
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from .account import Account, AccountView, normalize_email, validate_email, validate_registration
from .exceptions import (
    AccountConflict,
    AccountNotFound,
    AlreadyVerified,
    DeliveryError,
    InvalidCredentials,
    InvalidOtp,
    RateLimited,
    TooManyAttempts,
    Unauthenticated,
    ValidationError,
    VerificationRequired,
)
from .ports import AccountRepository, Notifier, PasswordHasher, TokenIssuer

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of register(); created is False on the resend-on-register path."""

    account_id: str
    otp_expires_at: datetime
    created: bool


@dataclass(frozen=True)
class ResendResult:
    """
    Outcome of an OTP resend.

    sent is False only for the by-email variant when no account matched;
    the caller still answers with a generic success.
    """

    account_id: str | None
    otp_expires_at: datetime | None
    sent: bool


@dataclass(frozen=True)
class AuthResult:
    """Access token plus the sanitized account it was issued for."""

    token: str
    account: AccountView


@dataclass
class RegistrationService:
    """
    Domain service for account registration and verification.

    Orchestrates input validation, OTP issuance, cooldown and lockout
    policy, notification dispatch and token issuance.
    """

    repository: AccountRepository
    notifier: Notifier
    hasher: PasswordHasher
    tokens: TokenIssuer
    otp_expiry_minutes: int = 10
    register_cooldown_seconds: int = 60
    resend_cooldown_seconds: int = 60
    email_resend_cooldown_seconds: int = 120
    max_otp_attempts: int = 5
    clock: Callable[[], datetime] = field(default=_utcnow)

    def register(self, username: str, email: str, password: str) -> RegistrationResult:
        """
        Register a new account, or refresh the OTP of an unverified one.

        Args:
            username: Desired username (3-20 characters)
            email: Email address (will be normalized)
            password: Plaintext password (will be hashed)

        Returns:
            RegistrationResult with created=True for a new account

        Raises:
            ValidationError: If input is malformed
            AccountConflict: If a verified account (or another account's
                username) already holds the identity
            RateLimited: If an OTP was issued less than 60 seconds ago
            DeliveryError: If the OTP could not be sent
        """
        username, email = validate_registration(username, email, password)
        now = self.clock()

        existing = self.repository.find_by_email_or_username(email, username)
        if existing is not None:
            if existing.verified:
                raise AccountConflict("User already exists")
            if existing.email != email:
                raise AccountConflict("Username is already taken")
            return self._register_existing(existing, password, now)

        code = self._generate_otp()
        account = Account(
            username=username,
            email=email,
            password_hash=self.hasher.hash(password),
        )
        account.issue_otp(code, now, self._expiry_from(now))
        account = self.repository.create(account)
        logger.info("Account %s created, OTP pending", account.id)

        try:
            delivered = self.notifier.send_otp(account.email, account.username, code)
        except Exception:
            logger.exception("OTP dispatch raised for new account %s", account.id)
            delivered = False
        if not delivered:
            self.repository.delete(account.id)
            logger.warning("OTP delivery failed for new account %s, rolled back", account.id)
            raise DeliveryError()

        return RegistrationResult(
            account_id=account.id,
            otp_expires_at=account.otp_expires_at,
            created=True,
        )

    def verify_otp(self, account_id: str, otp: str) -> AuthResult:
        """
        Verify a submitted OTP and activate the account.

        The code must string-equal the pending OTP and the current time must
        be strictly before its expiry. Any failure leaves the account untouched.

        Raises:
            ValidationError: If either argument is missing
            AccountNotFound: If no account has this id
            AlreadyVerified: If the account was already verified
            InvalidOtp: If the code mismatches or expired
        """
        if not account_id or not otp:
            raise ValidationError("User ID and OTP are required")

        account = self._load(account_id)
        if account.verified:
            raise AlreadyVerified()

        now = self.clock()
        if not self._otp_matches(account, otp, now):
            raise InvalidOtp()

        account.mark_verified()
        self.repository.save(account)
        logger.info("Account %s verified", account.id)

        self._send_welcome(account)
        return self._authenticated(account)

    def resend_otp(self, account_id: str) -> ResendResult:
        """
        Issue a fresh OTP to an account identified by id.

        Raises:
            ValidationError: If account_id is missing
            AccountNotFound: If no account has this id
            AlreadyVerified: If the account was already verified
            RateLimited: If the 60-second cooldown has not elapsed
            DeliveryError: If the OTP could not be sent
        """
        if not account_id:
            raise ValidationError("User ID is required")

        account = self._load(account_id)
        if account.verified:
            raise AlreadyVerified()

        now = self.clock()
        self._enforce_cooldown(account, now, self.resend_cooldown_seconds)
        self._reissue(account, now)
        return ResendResult(account_id=account.id, otp_expires_at=account.otp_expires_at, sent=True)

    def resend_otp_by_email(self, email: str) -> ResendResult:
        """
        Issue a fresh OTP to an account identified by email.

        Does not reveal whether the address is registered: an unknown email
        yields a generic result with sent=False and nothing is dispatched.

        Raises:
            ValidationError: If email is missing or malformed
            AlreadyVerified: If the account was already verified
            TooManyAttempts: If otp_attempt_count reached max_otp_attempts
            RateLimited: If the 120-second cooldown has not elapsed
            DeliveryError: If the OTP could not be sent
        """
        email = validate_email(email)

        account = self.repository.get_by_email(email)
        if account is None:
            logger.info("OTP resend requested for unknown email")
            return ResendResult(account_id=None, otp_expires_at=None, sent=False)

        if account.verified:
            raise AlreadyVerified()

        # Permanent and inclusive: checked before the cooldown since waiting cannot lift it.
        if account.otp_attempt_count >= self.max_otp_attempts:
            logger.warning("OTP resend refused for %s, attempt cap reached", account.id)
            raise TooManyAttempts()

        now = self.clock()
        self._enforce_cooldown(account, now, self.email_resend_cooldown_seconds)
        self._reissue(account, now)
        return ResendResult(account_id=account.id, otp_expires_at=account.otp_expires_at, sent=True)

    def login(self, email: str, password: str) -> AuthResult:
        """
        Authenticate with email and password.

        Raises:
            ValidationError: If either field is missing
            InvalidCredentials: If the email is unknown or the password is wrong
            VerificationRequired: If the account has not verified its email
        """
        if not (email or "").strip() or not password:
            raise ValidationError("Please provide email and password")

        account = self.repository.get_by_email(normalize_email(email))
        if account is None:
            # Keep the bcrypt cost on this path so timing does not reveal existence
            self.hasher.verify(password, None)
            raise InvalidCredentials()

        if not account.verified:
            raise VerificationRequired(account.id)

        if not self.hasher.verify(password, account.password_hash):
            raise InvalidCredentials()

        logger.info("Account %s logged in", account.id)
        return self._authenticated(account)

    def authenticate(self, token: str) -> AccountView:
        """
        Resolve a bearer token to the account it was issued for.

        Raises:
            Unauthenticated: If the token is invalid or the account is gone
        """
        if not token:
            raise Unauthenticated()
        account_id = self.tokens.resolve(token)
        account = self.repository.get_by_id(account_id)
        if account is None:
            raise Unauthenticated()
        return account.to_view()

    def _register_existing(self, account: Account, password: str, now: datetime) -> RegistrationResult:
        """Resend-on-register: refresh credentials and OTP of an unverified account."""
        self._enforce_cooldown(account, now, self.register_cooldown_seconds)
        account.password_hash = self.hasher.hash(password)
        self._reissue(account, now)
        return RegistrationResult(
            account_id=account.id,
            otp_expires_at=account.otp_expires_at,
            created=False,
        )

    def _reissue(self, account: Account, now: datetime) -> None:
        """
        Issue, persist and dispatch a new OTP.

        A dispatch failure keeps the persisted OTP; a later resend can retry.
        The store raises AlreadyVerified if a concurrent verification won.
        """
        code = self._generate_otp()
        account.issue_otp(code, now, self._expiry_from(now))
        self.repository.save(account)

        if not self.notifier.send_otp(account.email, account.username, code):
            logger.warning("OTP delivery failed for account %s", account.id)
            raise DeliveryError()
        logger.info("OTP reissued for account %s (issuance %d)", account.id, account.otp_attempt_count)

    def _enforce_cooldown(self, account: Account, now: datetime, window_seconds: int) -> None:
        if account.last_otp_issued_at is None:
            return
        remaining = window_seconds - (now - account.last_otp_issued_at).total_seconds()
        if remaining > 0:
            raise RateLimited(wait_seconds=math.ceil(remaining))

    def _send_welcome(self, account: Account) -> None:
        """Best-effort welcome message; failure never affects verification."""
        try:
            delivered = self.notifier.send_welcome(account.email, account.username)
        except Exception:
            logger.exception("Welcome email raised for account %s", account.id)
            return
        if not delivered:
            logger.warning("Welcome email failed for account %s", account.id)

    def _authenticated(self, account: Account) -> AuthResult:
        return AuthResult(token=self.tokens.issue(account.id), account=account.to_view())

    def _load(self, account_id: str) -> Account:
        account = self.repository.get_by_id(account_id)
        if account is None:
            raise AccountNotFound()
        return account

    def _otp_matches(self, account: Account, otp: str, now: datetime) -> bool:
        if account.pending_otp is None or account.otp_expires_at is None:
            return False
        code_valid = secrets.compare_digest(account.pending_otp.encode(), otp.encode())
        return code_valid and now < account.otp_expires_at

    def _expiry_from(self, now: datetime) -> datetime:
        return now + timedelta(minutes=self.otp_expiry_minutes)

    def _generate_otp(self) -> str:
        """
        Generate cryptographically secure 6-digit OTP.

        Uses secrets module for cryptographic randomness.
        Range 100000-999999, so the code never has a leading zero.
        """
        return str(100000 + secrets.randbelow(900000))
