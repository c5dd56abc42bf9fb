"""Pytest configuration and fixtures for Fisafe SDK tests."""

import pytest

AUTH_URL = "https://auth.fisafe.test"
REALM = "fisafe"
TOKEN_URL = f"{AUTH_URL}/realms/{REALM}/protocol/openid-connect/token"
ORGS_URL = f"{AUTH_URL}/realms/{REALM}/orgs/me"
API_URL = "https://org1.example.cloud/v1/api/"
ORGANIZATIONS = {"org1": {"url": API_URL, "name": "Org One"}}


@pytest.fixture
def client_kwargs() -> dict:
    """Constructor arguments shared by the sync and async clients."""
    return {
        "auth_url": AUTH_URL,
        "realm": REALM,
        "client_id": "fisafe-sdk",
        "username": "operator@example.com",
        "password": "s3cret",
    }
