"""
Authentication and tenant scoping helpers.

The clients authenticate in two phases: a token grant against the identity
provider, then a lookup of the organizations the user belongs to. Each
organization exposes its own base API url, and a client may only be bound
to a url that lives under one of them.

These helpers build requests and interpret responses; the sync and async
clients own the actual HTTP round trips.
"""

import logging
from typing import Any, Optional, Union

import httpx
from pydantic import BaseModel, SecretStr
from pydantic import ValidationError as PydanticValidationError

from ._http import decode, error_detail
from .exceptions import AuthenticationError, ConfigurationError, ParseError
from .models import Organization
from .types import GrantType

logger = logging.getLogger(__name__)


class Credentials(BaseModel):
    """Identity provider location and the user's credentials."""

    auth_url: str
    realm: str
    client_id: Optional[str] = None
    username: str
    password: SecretStr

    @property
    def base_url(self) -> str:
        return self.auth_url.rstrip("/")


def token_request(
    credentials: Credentials,
    grant: Union[str, GrantType] = GrantType.PASSWORD,
) -> tuple[str, str, dict[str, Any]]:
    """
    Describe the token request for the given grant.

    Returns:
        ``(method, url, request kwargs)`` ready for ``httpx.Client.request``
    """
    password = credentials.password.get_secret_value()

    if GrantType(grant) == GrantType.BASIC:
        url = f"{credentials.base_url}/v1/token/auth"
        return "GET", url, {"auth": (credentials.username, password)}

    if not credentials.client_id:
        raise ConfigurationError("client_id is required for the password grant")

    url = f"{credentials.base_url}/realms/{credentials.realm}/protocol/openid-connect/token"
    form = {
        "grant_type": "password",
        "client_id": credentials.client_id,
        "username": credentials.username,
        "password": password,
    }
    return "POST", url, {"data": form}


def parse_token_response(response: httpx.Response) -> str:
    """Extract the bearer token, treating any failure as rejected credentials."""
    if response.status_code >= 400:
        detail = error_detail(response, "Authentication failed")
        raise AuthenticationError(
            f"Identity provider rejected the token request: {detail}",
            status_code=response.status_code,
        )

    body = decode(response)
    token = body.get("access_token") if isinstance(body, dict) else None
    if not token:
        raise AuthenticationError(
            "Token response missing access_token", status_code=response.status_code
        )
    return token


def organizations_url(credentials: Credentials) -> str:
    """Identity provider operation listing the current user's organizations."""
    return f"{credentials.base_url}/realms/{credentials.realm}/orgs/me"


def parse_organizations(data: Any) -> dict[str, str]:
    """
    Build the organization id to base API url mapping.

    Accepts either a mapping of ``id -> {"url": ...}`` (or ``id -> url``) or a
    list of organization objects. Entries without a url are skipped.
    """
    if isinstance(data, dict):
        entries = [
            {**value, "id": key} if isinstance(value, dict) else {"id": key, "url": value}
            for key, value in data.items()
        ]
    elif isinstance(data, list):
        entries = data
    else:
        raise ParseError(f"Unexpected organizations payload of type {type(data).__name__}")

    organizations: dict[str, str] = {}
    for entry in entries:
        try:
            organization = Organization.model_validate(entry)
        except PydanticValidationError as e:
            raise ParseError(f"Malformed organization entry: {entry!r}") from e

        # An empty url would be a prefix of every candidate
        if not organization.url:
            logger.debug("Skipping organization %s without an API url", organization.id)
            continue
        organizations[str(organization.id)] = organization.url

    return organizations


def match_organization(organizations: dict[str, str], api_url: str) -> Optional[str]:
    """Return the first organization whose url is a prefix of ``api_url``."""
    for org_id, org_url in organizations.items():
        if api_url.startswith(org_url):
            return org_id
    return None
