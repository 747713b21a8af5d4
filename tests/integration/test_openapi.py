"""
Integration tests for OpenAPI documentation.

Verifies OpenAPI schema is correctly generated for all endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from src.api.main import app

pytestmark = pytest.mark.integration


@pytest.fixture
def schema() -> dict:
    response = TestClient(app).get("/openapi.json")
    assert response.status_code == 200
    return response.json()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    def test_title_and_version(self, schema: dict) -> None:
        assert schema["info"]["title"] == "authsvc"
        assert schema["info"]["version"] == "0.1.0"

    @pytest.mark.parametrize(
        "path,method",
        [
            ("/v1/auth/sign-up", "post"),
            ("/v1/auth/verify", "post"),
            ("/v1/auth/verify-token", "post"),
            ("/v1/auth/sign-in", "post"),
            ("/v1/auth/refresh-token", "post"),
            ("/v1/auth/profile", "get"),
            ("/health", "get"),
        ],
    )
    def test_endpoint_documented(self, schema: dict, path: str, method: str) -> None:
        assert method in schema["paths"][path]

    def test_protected_endpoints_declare_bearer_security(self, schema: dict) -> None:
        for path, method in [("/v1/auth/verify-token", "post"), ("/v1/auth/profile", "get")]:
            assert schema["paths"][path][method].get("security")

    def test_sign_up_request_schema(self, schema: dict) -> None:
        properties = schema["components"]["schemas"]["SignUpRequest"]["properties"]
        assert set(properties) == {"name", "email", "password"}

    def test_sign_in_response_has_no_password_field(self, schema: dict) -> None:
        profile = schema["components"]["schemas"]["ProfileModel"]["properties"]
        assert "password_hash" not in profile
        assert set(profile) == {"id", "email", "name", "verified"}
