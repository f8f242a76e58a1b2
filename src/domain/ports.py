"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from typing import Protocol

from .account import Account


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def get_by_id(self, account_id: str) -> Account | None:
        """Return the account with this id, or None."""
        ...

    def get_by_email(self, email: str) -> Account | None:
        """Return the account with this normalized email, or None."""
        ...

    def find_by_email_or_username(self, email: str, username: str) -> Account | None:
        """
        Return an account matching either the email or the username.

        When both match different accounts, the email match wins.
        """
        ...

    def create(self, account: Account) -> Account:
        """
        Insert a new account and return it with its store-assigned id.

        Raises:
            AccountConflict: If the username or email is already taken
        """
        ...

    def save(self, account: Account) -> None:
        """
        Persist all mutable fields of an existing account.

        Verification is one-way: saving an unverified snapshot over an
        account that has since been verified must not write anything.

        Raises:
            AlreadyVerified: If the stored account is verified and the
                snapshot being saved is not
        """
        ...

    def delete(self, account_id: str) -> None:
        """Remove an account (compensating action only)."""
        ...


class Notifier(Protocol):
    """
    Port interface for message delivery.

    Implementations report failure through the return value and never
    raise into the caller.
    """

    def send_otp(self, email: str, username: str, code: str) -> bool:
        """
        Send an OTP code to the address.

        Returns:
            True if the transport accepted the message
        """
        ...

    def send_welcome(self, email: str, username: str) -> bool:
        """Send the post-verification welcome message."""
        ...


class PasswordHasher(Protocol):
    """Port interface for one-way password hashing."""

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, password_hash: str | None) -> bool:
        """
        Constant-time comparison of a password against a stored hash.

        A None hash still performs a full comparison and returns False.
        """
        ...


class TokenIssuer(Protocol):
    """Port interface for access tokens bound to an account id."""

    def issue(self, account_id: str) -> str: ...

    def resolve(self, token: str) -> str:
        """
        Return the account id the token was issued for.

        Raises:
            Unauthenticated: If the token is malformed, tampered or expired
        """
        ...
