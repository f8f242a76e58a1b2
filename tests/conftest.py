"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory doubles of the domain ports
- A RegistrationService wired to those doubles
"""

import pytest

from src.domain.registration import RegistrationService
from tests.fakes import (
    FakeClock,
    FakeTokenIssuer,
    InMemoryAccountRepository,
    PlainHasher,
    RecordingNotifier,
)


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def hasher() -> PlainHasher:
    return PlainHasher()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(
    repository: InMemoryAccountRepository,
    notifier: RecordingNotifier,
    hasher: PlainHasher,
    clock: FakeClock,
) -> RegistrationService:
    """Service with default policy: 10 min OTP, 60s/120s cooldowns, cap 5."""
    return RegistrationService(
        repository=repository,
        notifier=notifier,
        hasher=hasher,
        tokens=FakeTokenIssuer(),
        clock=clock,
    )
