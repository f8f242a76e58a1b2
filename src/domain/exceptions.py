"""
Domain exceptions - Semantic error types for the account lifecycle.

Each exception carries the HTTP status the API layer maps it to and a
client-safe message. Infrastructure details never appear in the message.
"""


class AccountError(Exception):
    """Base class for account domain errors."""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AccountError):
    """Malformed or missing input."""

    default_message = "Invalid input"


class AccountConflict(AccountError):
    """Username or email already belongs to another account."""

    default_message = "User already exists"


class AccountNotFound(AccountError):
    """No account with the given id."""

    status_code = 404
    default_message = "User not found"


class AlreadyVerified(AccountError):
    """Account email is already verified."""

    default_message = "Email already verified"


class InvalidOtp(AccountError):
    """Submitted code does not match the pending OTP, or it expired."""

    default_message = "Invalid or expired OTP"


class RateLimited(AccountError):
    """OTP was issued too recently."""

    status_code = 429

    def __init__(self, wait_seconds: int) -> None:
        self.wait_seconds = wait_seconds
        super().__init__(f"Please wait {wait_seconds} seconds before requesting a new OTP")


class TooManyAttempts(AccountError):
    """OTP issuance cap reached for this account."""

    status_code = 429
    default_message = "Too many OTP requests. Please contact support."


class InvalidCredentials(AccountError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    default_message = "Invalid email or password"


class VerificationRequired(AccountError):
    """Login attempted before the email was verified."""

    default_message = "Please verify your email before logging in"

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__()


class DeliveryError(AccountError):
    """Notification transport failed to send the OTP."""

    status_code = 500
    default_message = "Failed to send verification email. Please try again."


class StorageError(AccountError):
    """Unexpected persistence failure."""

    status_code = 500
    default_message = "Storage error"


class Unauthenticated(AccountError):
    """Missing, invalid or expired access token."""

    status_code = 401
    default_message = "Not authenticated"
