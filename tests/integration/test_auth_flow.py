"""
Integration tests for the full authentication flow.

Drives the real application (routes, dependencies, service, console
email sender) over HTTP with in-memory stores in app state. The
verification link is read back from the console sender's log output.
"""

import logging
import re

import pytest
from fastapi.testclient import TestClient

from src.adapters.repository.memory import (
    InMemoryUserRepository,
    InMemoryVerificationTokenRepository,
)
from src.api.main import app
from tests.helpers import link_params

pytestmark = pytest.mark.integration


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def verification_tokens() -> InMemoryVerificationTokenRepository:
    return InMemoryVerificationTokenRepository()


@pytest.fixture
def client(
    users: InMemoryUserRepository, verification_tokens: InMemoryVerificationTokenRepository
) -> TestClient:
    """Test client with fresh in-memory stores (lifespan not started)."""
    app.state.users = users
    app.state.verification_tokens = verification_tokens
    app.state.pool = None
    return TestClient(app)


def sign_up(
    client: TestClient, caplog: pytest.LogCaptureFixture, email: str = "a@x.com"
) -> tuple[str, str]:
    """Register and return (user id, token) parsed from the logged link."""
    caplog.clear()
    with caplog.at_level(logging.INFO):
        response = client.post(
            "/v1/auth/sign-up", json={"name": "A", "email": email, "password": "pw"}
        )
    assert response.status_code == 201
    return link_params(extract_link(caplog.text))


def extract_link(log_text: str) -> str:
    links = re.findall(r"Link: (\S+)", log_text)
    assert links, "No verification link logged"
    return links[-1]


def sign_in(client: TestClient, email: str = "a@x.com", password: str = "pw"):
    return client.post("/v1/auth/sign-in", json={"email": email, "password": password})


class TestRegistrationAndVerification:
    def test_sign_up_logs_link_and_stores_one_hashed_token(
        self,
        client: TestClient,
        caplog: pytest.LogCaptureFixture,
        verification_tokens: InMemoryVerificationTokenRepository,
    ) -> None:
        user_id, token = sign_up(client, caplog)

        stored = verification_tokens.find_by_owner(user_id)
        assert stored is not None
        assert stored.token_hash != token
        assert "[VERIFICATION] Email: a@x.com" in caplog.text

    def test_duplicate_sign_up_conflicts(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        sign_up(client, caplog)

        response = client.post(
            "/v1/auth/sign-up", json={"name": "B", "email": "a@x.com", "password": "x"}
        )

        assert response.status_code == 409

    def test_verify_twice_is_idempotent(
        self,
        client: TestClient,
        caplog: pytest.LogCaptureFixture,
        users: InMemoryUserRepository,
    ) -> None:
        user_id, token = sign_up(client, caplog)

        first = client.post("/v1/auth/verify", json={"id": user_id, "token": token})
        second = client.post("/v1/auth/verify", json={"id": user_id, "token": token})

        assert first.status_code == second.status_code == 200
        assert first.json() == second.json() == {"message": "Your email is verified."}
        assert users.find_by_id(user_id).verified is True

    def test_wrong_token_returns_401(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        user_id, _ = sign_up(client, caplog)

        response = client.post("/v1/auth/verify", json={"id": user_id, "token": "0" * 72})

        assert response.status_code == 401

    def test_reissue_invalidates_previous_link(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        user_id, old_token = sign_up(client, caplog)
        access = sign_in(client).json()["tokens"]["access"]

        caplog.clear()
        with caplog.at_level(logging.INFO):
            response = client.post(
                "/v1/auth/verify-token", headers={"Authorization": f"Bearer {access}"}
            )
        assert response.status_code == 200
        _, new_token = link_params(extract_link(caplog.text))

        stale = client.post("/v1/auth/verify", json={"id": user_id, "token": old_token})
        fresh = client.post("/v1/auth/verify", json={"id": user_id, "token": new_token})
        assert stale.status_code == 401
        assert fresh.status_code == 200


class TestSignInAndProfile:
    def test_sign_in_then_profile(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        user_id, _ = sign_up(client, caplog)

        body = sign_in(client).json()
        response = client.get(
            "/v1/auth/profile", headers={"Authorization": f"Bearer {body['tokens']['access']}"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "profile": {"id": user_id, "email": "a@x.com", "name": "A", "verified": False}
        }

    def test_wrong_password_and_unknown_email_look_identical(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        sign_up(client, caplog)

        wrong_password = sign_in(client, password="nope")
        unknown_email = sign_in(client, email="ghost@x.com")

        assert wrong_password.status_code == unknown_email.status_code == 403
        assert wrong_password.json() == unknown_email.json()

    def test_refresh_token_cannot_access_profile(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        sign_up(client, caplog)
        refresh = sign_in(client).json()["tokens"]["refresh"]

        response = client.get("/v1/auth/profile", headers={"Authorization": f"Bearer {refresh}"})

        assert response.status_code == 401


class TestRefreshRotation:
    def test_rotation_and_replay(
        self,
        client: TestClient,
        caplog: pytest.LogCaptureFixture,
        users: InMemoryUserRepository,
    ) -> None:
        user_id, _ = sign_up(client, caplog)
        original = sign_in(client).json()["tokens"]["refresh"]
        assert original in users.find_by_id(user_id).tokens

        rotated = client.post("/v1/auth/refresh-token", json={"refresh_token": original})
        assert rotated.status_code == 200
        new_refresh = rotated.json()["tokens"]["refresh"]
        stored = users.find_by_id(user_id).tokens
        assert original not in stored
        assert new_refresh in stored

        replay = client.post("/v1/auth/refresh-token", json={"refresh_token": original})
        assert replay.status_code == 401
        assert users.find_by_id(user_id).tokens == ()

        after = client.post("/v1/auth/refresh-token", json={"refresh_token": new_refresh})
        assert after.status_code == 401

    def test_missing_refresh_token_is_403(self, client: TestClient) -> None:
        assert client.post("/v1/auth/refresh-token", json={}).status_code == 403

    def test_refresh_without_body_is_403(self, client: TestClient) -> None:
        response = client.post("/v1/auth/refresh-token")

        assert response.status_code == 403
        assert response.json() == {"detail": "Unauthorized request"}


class TestHealth:
    def test_health_without_database(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
