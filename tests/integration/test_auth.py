"""Integration tests for JWT authentication.

Validates:
  - /health is public (plain Django view, no DRF).
  - Tokens are issued by the SimpleJWT endpoints and accepted as Bearer.
  - Protected DRF endpoints return 401 without or with a broken token.
"""

import pytest

pytestmark = pytest.mark.integration

TOKEN_URL = "/api/v1/auth/token/"
ME_URL = "/api/v1/me"


class TestPublicEndpoints:
    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestTokenFlow:
    def test_obtain_token_and_call_me(self, api_client, staff_user):
        response = api_client.post(
            TOKEN_URL, {"username": "operador", "password": "testpass123"}, format="json"
        )
        assert response.status_code == 200
        access = response.json()["access"]

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        data = api_client.get(ME_URL).json()["data"]

        assert data == {"username": "operador", "role": "staff", "client_id": None}

    def test_client_user_sees_linked_profile(self, api_client, client_profile):
        response = api_client.post(
            TOKEN_URL, {"username": "cliente", "password": "testpass123"}, format="json"
        )
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.json()['access']}")

        data = api_client.get(ME_URL).json()["data"]

        assert data["role"] == "client"
        assert data["client_id"] == client_profile.id

    def test_wrong_password(self, api_client, staff_user):
        response = api_client.post(
            TOKEN_URL, {"username": "operador", "password": "nope"}, format="json"
        )
        assert response.status_code == 401


class TestProtectedEndpoints:
    def test_no_token_returns_401(self, api_client):
        assert api_client.get(ME_URL).status_code == 401

    def test_invalid_token_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer invalid.token.here")
        assert api_client.get(ME_URL).status_code == 401

    def test_malformed_auth_header_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Token some-token")
        assert api_client.get(ME_URL).status_code == 401

    def test_401_includes_www_authenticate_header(self, api_client):
        response = api_client.get(ME_URL)
        assert "Bearer" in response.get("WWW-Authenticate", "")
