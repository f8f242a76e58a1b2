"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
Every collaborator is built from Settings; tests override these
factories instead of patching module state.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresAccountRepository
from src.adapters.security.bcrypt_hasher import BcryptPasswordHasher
from src.adapters.security.jwt_tokens import JwtTokenIssuer
from src.adapters.smtp.console import ConsoleNotifier
from src.adapters.smtp.sender import SmtpNotifier
from src.config.settings import Settings, get_settings
from src.domain.account import AccountView
from src.domain.exceptions import Unauthenticated
from src.domain.ports import AccountRepository, Notifier
from src.domain.registration import RegistrationService


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_repository(request: Request) -> AccountRepository:
    """Create repository with connection pool from app state."""
    return PostgresAccountRepository(get_pool(request))


def get_notifier(settings: Settings = Depends(get_settings)) -> Notifier:
    """SMTP notifier when transport credentials are configured, console otherwise."""
    if not settings.smtp_enabled:
        return ConsoleNotifier()
    return SmtpNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.email_user,
        password=settings.email_pass,
        sender=settings.email_from,
        otp_expiry_minutes=settings.otp_expiry,
        timeout=settings.smtp_timeout_seconds,
        start_tls=settings.smtp_start_tls,
    )


def get_registration_service(
    repository: AccountRepository = Depends(get_repository),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository, notifier, hasher and token issuer.
    """
    return RegistrationService(
        repository=repository,
        notifier=notifier,
        hasher=BcryptPasswordHasher(cost=settings.bcrypt_cost),
        tokens=JwtTokenIssuer(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expiry_days=settings.jwt_expiry_days,
        ),
        otp_expiry_minutes=settings.otp_expiry,
        register_cooldown_seconds=settings.register_cooldown_seconds,
        resend_cooldown_seconds=settings.resend_cooldown_seconds,
        email_resend_cooldown_seconds=settings.email_resend_cooldown_seconds,
        max_otp_attempts=settings.max_otp_attempts,
    )


# Bearer security scheme; missing headers are reported as Unauthenticated
http_bearer = HTTPBearer(auto_error=False)


def get_current_account(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: RegistrationService = Depends(get_registration_service),
) -> AccountView:
    """
    Resolve the bearer token to a sanitized account view.

    Raises:
        Unauthenticated: If the header is missing or the token is invalid
    """
    if credentials is None:
        raise Unauthenticated()
    return service.authenticate(credentials.credentials)
