"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account registration and OTP verification
state machine. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .account import Account, AccountView
from .exceptions import (
    AccountConflict,
    AccountError,
    AccountNotFound,
    AlreadyVerified,
    DeliveryError,
    InvalidCredentials,
    InvalidOtp,
    RateLimited,
    StorageError,
    TooManyAttempts,
    Unauthenticated,
    ValidationError,
    VerificationRequired,
)
from .ports import AccountRepository, Notifier, PasswordHasher, TokenIssuer
from .registration import AuthResult, RegistrationResult, RegistrationService, ResendResult

__all__ = [
    "Account",
    "AccountConflict",
    "AccountError",
    "AccountNotFound",
    "AccountRepository",
    "AccountView",
    "AlreadyVerified",
    "AuthResult",
    "DeliveryError",
    "InvalidCredentials",
    "InvalidOtp",
    "Notifier",
    "PasswordHasher",
    "RateLimited",
    "RegistrationResult",
    "RegistrationService",
    "ResendResult",
    "StorageError",
    "TokenIssuer",
    "TooManyAttempts",
    "Unauthenticated",
    "ValidationError",
    "VerificationRequired",
]
