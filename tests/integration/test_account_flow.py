"""
Integration tests for the account lifecycle.

Drives the full application (lifespan, dependencies, handlers, domain,
in-memory store) through HTTP. Codes are read from the recording sender
that replaces the console mail adapter.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.config.settings import Settings
from tests.fakes import TEST_BCRYPT_COST, FailingEmailSender, RecordingEmailSender

pytestmark = pytest.mark.integration

ALICE = {"username": "alice", "password": "secret1", "email": "a@x.com"}


def wrong_code(code: str) -> str:
    return "000000" if code != "000000" else "111111"


def signup_alice(client: TestClient) -> None:
    response = client.post("/api/signup", json=ALICE)
    assert response.status_code == 201


class TestSignup:
    def test_signup_creates_pending_account_and_mails_code(
        self, client: TestClient, app: FastAPI, email_sender: RecordingEmailSender
    ) -> None:
        response = client.post("/api/signup", json=ALICE)

        assert response.status_code == 201
        assert response.json() == {"message": "User created successfully"}

        stored = app.state.repository.find_by_username("alice")
        assert stored.is_verified is False
        assert len(email_sender.sent) == 1
        assert email_sender.sent[0][0] == "a@x.com"
        assert email_sender.last_code("a@x.com") == stored.verification_code

    def test_password_not_stored_in_plaintext(self, client: TestClient, app: FastAPI) -> None:
        signup_alice(client)

        stored = app.state.repository.find_by_username("alice")
        assert stored.password_hash != "secret1"
        assert stored.password_hash.startswith("$2")

    def test_duplicate_username_returns_409_without_mutation(
        self, client: TestClient, app: FastAPI, email_sender: RecordingEmailSender
    ) -> None:
        signup_alice(client)

        response = client.post("/api/signup", json={**ALICE, "email": "other@x.com"})

        assert response.status_code == 409
        assert response.json() == {"error": "Username already exists"}
        assert app.state.repository.find_by_email("other@x.com") is None
        assert len(email_sender.sent) == 1

    def test_duplicate_email_returns_409(self, client: TestClient) -> None:
        signup_alice(client)

        response = client.post("/api/signup", json={**ALICE, "username": "bob", "email": "A@X.COM"})

        assert response.status_code == 409
        assert response.json() == {"error": "Email already exists"}

    def test_missing_field_returns_400(self, client: TestClient) -> None:
        response = client.post("/api/signup", json={"username": "alice", "password": "secret1"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing fields"}


class TestVerification:
    def test_signup_verify_login_walkthrough(self, client: TestClient, email_sender: RecordingEmailSender) -> None:
        """signup -> wrong code 400 -> right code 200 -> login ok 200 -> bad password 401."""
        signup_alice(client)
        code = email_sender.last_code("a@x.com")

        response = client.post("/api/verify-code", json={"email": "a@x.com", "code": wrong_code(code)})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid verification code"}

        response = client.post("/api/verify-code", json={"email": "a@x.com", "code": code})
        assert response.status_code == 200
        assert response.json() == {"message": "Email verified successfully"}

        response = client.post("/api/login", json={"username": "alice", "password": "secret1"})
        assert response.status_code == 200
        assert response.json() == {"message": "Login successful"}

        response = client.post("/api/login", json={"username": "alice", "password": "wrong"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}

    def test_code_is_single_use(
        self, client: TestClient, app: FastAPI, email_sender: RecordingEmailSender
    ) -> None:
        signup_alice(client)
        code = email_sender.last_code("a@x.com")
        client.post("/api/verify-code", json={"email": "a@x.com", "code": code})

        response = client.post("/api/verify-code", json={"email": "a@x.com", "code": code})

        assert response.status_code == 400
        assert response.json() == {"error": "Account already verified"}
        stored = app.state.repository.find_by_username("alice")
        assert stored.is_verified is True
        assert stored.verification_code is None

    def test_verify_uses_normalized_email(self, client: TestClient, email_sender: RecordingEmailSender) -> None:
        signup_alice(client)
        code = email_sender.last_code("a@x.com")

        response = client.post("/api/verify-code", json={"email": "  A@X.COM", "code": code})

        assert response.status_code == 200

    def test_unknown_email_returns_404(self, client: TestClient) -> None:
        response = client.post("/api/verify-code", json={"email": "nobody@x.com", "code": "123456"})

        assert response.status_code == 404
        assert response.json() == {"error": "Account not found"}


class TestResend:
    def test_resend_invalidates_previous_code(
        self, client: TestClient, email_sender: RecordingEmailSender
    ) -> None:
        signup_alice(client)
        first_code = email_sender.last_code("a@x.com")

        response = client.post("/api/resend-code", json={"email": "a@x.com"})
        assert response.status_code == 200
        assert response.json() == {"message": "Verification code resent"}
        second_code = email_sender.last_code("a@x.com")

        if first_code != second_code:
            response = client.post("/api/verify-code", json={"email": "a@x.com", "code": first_code})
            assert response.status_code == 400
            assert response.json() == {"error": "Invalid verification code"}

        response = client.post("/api/verify-code", json={"email": "a@x.com", "code": second_code})
        assert response.status_code == 200

    def test_two_resends_only_latest_valid(
        self, client: TestClient, app: FastAPI, email_sender: RecordingEmailSender
    ) -> None:
        signup_alice(client)
        client.post("/api/resend-code", json={"email": "a@x.com"})
        client.post("/api/resend-code", json={"email": "a@x.com"})

        codes = email_sender.codes("a@x.com")
        assert len(codes) == 3
        assert app.state.repository.find_by_username("alice").verification_code == codes[-1]

        for stale in set(codes[:-1]) - {codes[-1]}:
            response = client.post("/api/verify-code", json={"email": "a@x.com", "code": stale})
            assert response.status_code == 400

        response = client.post("/api/verify-code", json={"email": "a@x.com", "code": codes[-1]})
        assert response.status_code == 200

    def test_resend_after_verification_returns_400(
        self, client: TestClient, email_sender: RecordingEmailSender
    ) -> None:
        signup_alice(client)
        client.post("/api/verify-code", json={"email": "a@x.com", "code": email_sender.last_code()})

        response = client.post("/api/resend-code", json={"email": "a@x.com"})

        assert response.status_code == 400
        assert response.json() == {"error": "Account already verified"}
        assert len(email_sender.sent) == 1

    def test_resend_unknown_email_returns_404(self, client: TestClient) -> None:
        response = client.post("/api/resend-code", json={"email": "nobody@x.com"})

        assert response.status_code == 404


class TestDeliveryFailure:
    def test_signup_mail_failure_keeps_account_and_resend_recovers(
        self, client: TestClient, app: FastAPI, email_sender: RecordingEmailSender
    ) -> None:
        """No rollback: the pending account survives, resend delivers a usable code."""
        failing = FailingEmailSender()
        app.state.email_sender = failing

        response = client.post("/api/signup", json=ALICE)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send verification email"}
        assert failing.attempts == ["a@x.com"]
        assert app.state.repository.find_by_username("alice").is_verified is False

        app.state.email_sender = email_sender
        assert client.post("/api/resend-code", json={"email": "a@x.com"}).status_code == 200
        code = email_sender.last_code("a@x.com")
        assert client.post("/api/verify-code", json={"email": "a@x.com", "code": code}).status_code == 200

    def test_resend_mail_failure_still_replaces_code(self, client: TestClient, app: FastAPI) -> None:
        signup_alice(client)
        before = app.state.repository.find_by_username("alice").verification_code
        app.state.email_sender = FailingEmailSender()

        codes_seen = set()
        for _ in range(3):
            response = client.post("/api/resend-code", json={"email": "a@x.com"})
            assert response.status_code == 500
            codes_seen.add(app.state.repository.find_by_username("alice").verification_code)

        # Three fresh draws all equal to the first code is a 1-in-10^18 event
        assert codes_seen != {before}


class TestLogin:
    def test_unverified_account_can_log_in(self, client: TestClient) -> None:
        signup_alice(client)

        response = client.post("/api/login", json={"username": "alice", "password": "secret1"})

        assert response.status_code == 200

    def test_unknown_user_and_wrong_password_look_the_same(self, client: TestClient) -> None:
        signup_alice(client)

        unknown = client.post("/api/login", json={"username": "nobody", "password": "secret1"})
        wrong = client.post("/api/login", json={"username": "alice", "password": "wrong"})

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json()

    def test_missing_field_returns_400(self, client: TestClient) -> None:
        response = client.post("/api/login", json={"username": "alice", "password": ""})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing fields"}


class TestRequireVerifiedLogin:
    @pytest.fixture
    def settings(self) -> Settings:
        return Settings(
            _env_file=None,
            store_backend="memory",
            bcrypt_cost=TEST_BCRYPT_COST,
            require_verified_login=True,
        )

    def test_unverified_rejected_then_accepted_after_verification(
        self, client: TestClient, email_sender: RecordingEmailSender
    ) -> None:
        signup_alice(client)
        credentials = {"username": "alice", "password": "secret1"}

        assert client.post("/api/login", json=credentials).status_code == 401

        client.post("/api/verify-code", json={"email": "a@x.com", "code": email_sender.last_code()})

        assert client.post("/api/login", json=credentials).status_code == 200


class TestHealth:
    def test_health_without_database(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_app_factory_uses_memory_store(self) -> None:
        app = create_app(Settings(_env_file=None, store_backend="memory"))
        with TestClient(app):
            assert app.state.pool is None
            assert len(app.state.repository) == 0
