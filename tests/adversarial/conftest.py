"""
Shared fixtures for adversarial tests.

Provides services wired to the in-memory store and a recording sender.
"""

import pytest

from src.adapters.repository.memory import InMemoryAccountRepository
from src.domain.authentication import AuthService
from src.domain.verification import VerificationService
from tests.fakes import TEST_BCRYPT_COST, RecordingEmailSender


@pytest.fixture
def verification_service(
    repository: InMemoryAccountRepository, email_sender: RecordingEmailSender
) -> VerificationService:
    return VerificationService(
        repository=repository, email_sender=email_sender, bcrypt_cost=TEST_BCRYPT_COST
    )


@pytest.fixture
def auth_service(repository: InMemoryAccountRepository) -> AuthService:
    return AuthService(repository=repository)
