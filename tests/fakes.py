"""
In-memory test doubles for the domain ports.

InMemoryAccountRepository enforces username/email uniqueness like the
database constraints do, and hands out copies so that a service mutation
is only visible after save().
"""

import uuid
from copy import deepcopy
from datetime import datetime, timedelta, timezone

from src.domain.account import Account
from src.domain.exceptions import AccountConflict, AlreadyVerified, Unauthenticated


class InMemoryAccountRepository:
    """Dict-backed AccountRepository with store-enforced uniqueness."""

    def __init__(self) -> None:
        self.accounts: dict[str, Account] = {}
        self.deleted: list[str] = []

    def get_by_id(self, account_id: str) -> Account | None:
        account = self.accounts.get(account_id)
        return deepcopy(account) if account else None

    def get_by_email(self, email: str) -> Account | None:
        for account in self.accounts.values():
            if account.email == email:
                return deepcopy(account)
        return None

    def find_by_email_or_username(self, email: str, username: str) -> Account | None:
        by_email = self.get_by_email(email)
        if by_email is not None:
            return by_email
        for account in self.accounts.values():
            if account.username == username:
                return deepcopy(account)
        return None

    def create(self, account: Account) -> Account:
        for existing in self.accounts.values():
            if existing.email == account.email or existing.username == account.username:
                raise AccountConflict("User already exists")
        stored = deepcopy(account)
        stored.id = str(uuid.uuid4())
        stored.created_at = datetime.now(timezone.utc)
        self.accounts[stored.id] = stored
        return deepcopy(stored)

    def save(self, account: Account) -> None:
        stored = self.accounts.get(account.id)
        if stored is not None and stored.verified and not account.verified:
            raise AlreadyVerified()
        self.accounts[account.id] = deepcopy(account)

    def delete(self, account_id: str) -> None:
        self.accounts.pop(account_id, None)
        self.deleted.append(account_id)

    def stored(self, account_id: str) -> Account:
        """Direct access to persisted state for assertions."""
        return self.accounts[account_id]


class RecordingNotifier:
    """Notifier that records dispatches and can be told to fail."""

    def __init__(self) -> None:
        self.otps: list[tuple[str, str, str]] = []
        self.welcomes: list[tuple[str, str]] = []
        self.fail_otp = False
        self.fail_welcome = False
        self.raise_on_welcome = False
        self.raise_on_otp = False

    def send_otp(self, email: str, username: str, code: str) -> bool:
        if self.raise_on_otp:
            raise ConnectionError("relay unreachable")
        if self.fail_otp:
            return False
        self.otps.append((email, username, code))
        return True

    def send_welcome(self, email: str, username: str) -> bool:
        if self.raise_on_welcome:
            raise RuntimeError("transport exploded")
        if self.fail_welcome:
            return False
        self.welcomes.append((email, username))
        return True

    @property
    def last_code(self) -> str:
        return self.otps[-1][2]


class PlainHasher:
    """Reversible stand-in for bcrypt to keep unit tests fast."""

    def __init__(self) -> None:
        self.verify_calls = 0

    def hash(self, password: str) -> str:
        return f"hashed::{password}"

    def verify(self, password: str, password_hash: str | None) -> bool:
        self.verify_calls += 1
        return password_hash is not None and password_hash == f"hashed::{password}"


class FakeTokenIssuer:
    """Tokens of the form token-<account id>."""

    def issue(self, account_id: str) -> str:
        return f"token-{account_id}"

    def resolve(self, token: str) -> str:
        if not token.startswith("token-"):
            raise Unauthenticated("Invalid or expired token")
        return token.removeprefix("token-")


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)
