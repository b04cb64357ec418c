"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A recording EmailSender fake
- An in-memory account repository
- A fully wired application over the in-memory store
"""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.repository.memory import InMemoryAccountRepository
from src.api.main import create_app
from src.config.settings import Settings
from tests.fakes import TEST_BCRYPT_COST, RecordingEmailSender


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def settings() -> Settings:
    """Settings for a self-contained app: in-memory store, console mail."""
    return Settings(
        _env_file=None,
        store_backend="memory",
        mail_backend="console",
        bcrypt_cost=TEST_BCRYPT_COST,
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI, email_sender: RecordingEmailSender) -> Generator[TestClient, None, None]:
    """
    Client with the lifespan running.

    The console sender built at startup is swapped for the recording fake
    so tests can read the codes that were "mailed".
    """
    with TestClient(app) as test_client:
        app.state.email_sender = email_sender
        yield test_client
