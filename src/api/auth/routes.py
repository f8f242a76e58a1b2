"""
Auth API routes.

Defines REST endpoints for registration, OTP verification, OTP resends,
login and profile lookup. Domain errors are not caught here; the exception
handlers registered in src.api.main map them to status codes.
"""

from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import get_current_account, get_registration_service
from src.api.models import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    ResendOtpEmailRequest,
    ResendOtpEmailResponse,
    ResendOtpRequest,
    ResendOtpResponse,
    UserOut,
    VerifyOtpRequest,
)
from src.domain.account import AccountView
from src.domain.registration import RegistrationService

router = APIRouter(tags=["auth"])

GENERIC_RESEND_MESSAGE = "If an account exists for this email, a new OTP has been sent"


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": RegisterResponse, "description": "Existing unverified account, OTP resent"},
        400: {"model": ErrorResponse, "description": "Validation error or user already exists"},
        429: {"model": ErrorResponse, "description": "OTP requested too recently"},
        500: {"model": ErrorResponse, "description": "Verification email could not be sent"},
    },
    summary="Register a new user",
    description="Submit username, email and password. "
    "A 6-digit OTP will be sent to the provided email.",
)
def register(
    request_data: RegisterRequest,
    response: Response,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    """
    Register a new user and send an OTP.

    Registering again with the email of an unverified account refreshes
    the OTP and password and answers 200 instead of 201.
    """
    result = service.register(request_data.username, request_data.email, request_data.password)
    if result.created:
        message = "Registration successful. Please check your email for the OTP."
    else:
        response.status_code = status.HTTP_200_OK
        message = "Account pending verification. A new OTP has been sent."
    return RegisterResponse(
        message=message,
        user_id=result.account_id,
        otp_expiry=result.otp_expires_at,
    )


@router.post(
    "/verify-otp",
    response_model=AuthResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields, invalid OTP or already verified"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Verify email with OTP",
)
def verify_otp(
    request_data: VerifyOtpRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> AuthResponse:
    """Verify the OTP and return an access token for the activated account."""
    result = service.verify_otp(request_data.user_id, request_data.otp)
    return AuthResponse(
        message="Email verified successfully",
        token=result.token,
        user=UserOut.from_view(result.account),
    )


@router.post(
    "/resend-otp",
    response_model=ResendOtpResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing user id or already verified"},
        404: {"model": ErrorResponse, "description": "User not found"},
        429: {"model": ErrorResponse, "description": "OTP requested too recently"},
        500: {"model": ErrorResponse, "description": "Verification email could not be sent"},
    },
    summary="Resend OTP by user id",
)
def resend_otp(
    request_data: ResendOtpRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> ResendOtpResponse:
    result = service.resend_otp(request_data.user_id)
    return ResendOtpResponse(message="New OTP sent to your email", otp_expiry=result.otp_expires_at)


@router.post(
    "/resend-otp-email",
    response_model=ResendOtpEmailResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid email or already verified"},
        429: {"model": ErrorResponse, "description": "Cooldown active or too many OTP requests"},
        500: {"model": ErrorResponse, "description": "Verification email could not be sent"},
    },
    summary="Resend OTP by email",
    description="Answers 200 whether or not an account exists for the email.",
)
def resend_otp_email(
    request_data: ResendOtpEmailRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> ResendOtpEmailResponse:
    result = service.resend_otp_by_email(request_data.email)
    return ResendOtpEmailResponse(
        success=True,
        message=GENERIC_RESEND_MESSAGE,
        otp_expiry=result.otp_expires_at,
        user_id=result.account_id,
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid credentials or verification required"},
    },
    summary="Log in with email and password",
)
def login(
    request_data: LoginRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> AuthResponse:
    """
    Log in a verified account.

    Unknown email and wrong password produce the same error body.
    Unverified accounts get 400 with their userId so the client can
    continue the OTP flow.
    """
    result = service.login(request_data.email, request_data.password)
    return AuthResponse(
        message="Login successful",
        token=result.token,
        user=UserOut.from_view(result.account),
    )


@router.get(
    "/profile",
    response_model=ProfileResponse,
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
    summary="Get the authenticated user's profile",
)
def profile(account: AccountView = Depends(get_current_account)) -> ProfileResponse:
    return ProfileResponse(user=UserOut.from_view(account))
