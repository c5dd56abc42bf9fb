"""Async client for the Fisafe access-control API."""

import logging
from datetime import datetime
from typing import Any, Optional, Union

import httpx

from ._http import decode, raise_for_status, transport_error
from .auth import (
    Credentials,
    match_organization,
    organizations_url,
    parse_organizations,
    parse_token_response,
    token_request,
)
from .config import ClientSettings
from .exceptions import AuthenticationError, AuthorizationError, ConfigurationError
from .models import granted_access_payload, identifier_payload, list_params
from .types import GrantType, IdentifierType

logger = logging.getLogger(__name__)


class FisafeClient:
    """
    Python client for the Fisafe API.

    Same semantics as :class:`~fisafe.sync_client.SyncFisafeClient`, with
    coroutine methods. Not safe for concurrent use from several tasks: the
    bound API url and the organization cache are unguarded.

    Usage:
        async with FisafeClient(
            auth_url="https://auth.fisafe.cloud",
            realm="fisafe",
            client_id="fisafe-sdk",
            username="operator@example.com",
            password="secret",
        ) as client:
            await client.authenticate()
            await client.set_api_url("https://org1.fisafe.cloud/v1/api/")

            user = await client.create_user("alice")
            await client.create_granted_access(context_id=7, user_id=user["id"])
    """

    def __init__(
        self,
        auth_url: str,
        realm: str,
        username: str,
        password: str,
        client_id: Optional[str] = None,
        grant: Union[str, GrantType] = GrantType.PASSWORD,
        timeout: float = 30.0,
    ):
        """
        Initialize Fisafe client.

        Args:
            auth_url: Identity provider base URL
            realm: Identity provider realm
            username: Account username
            password: Account password
            client_id: OAuth client ID (required for the password grant)
            grant: Token grant to use (default: password)
            timeout: Request timeout in seconds (default: 30.0)
        """
        self.credentials = Credentials(
            auth_url=auth_url,
            realm=realm,
            client_id=client_id,
            username=username,
            password=password,
        )
        self.grant = GrantType(grant)
        self.timeout = timeout
        self.token: Optional[str] = None
        self.api_url: Optional[str] = None
        self._organizations: Optional[dict[str, str]] = None
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Optional[ClientSettings] = None) -> "FisafeClient":
        """Build a client from settings, reading FISAFE_* environment variables when omitted."""
        settings = settings or ClientSettings()
        return cls(
            auth_url=settings.auth_url,
            realm=settings.realm,
            client_id=settings.client_id,
            username=settings.username,
            password=settings.password.get_secret_value(),
            grant=settings.grant,
            timeout=settings.timeout,
        )

    async def __aenter__(self) -> "FisafeClient":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()

    def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure client is initialized."""
        if self._client is None:
            raise RuntimeError("Client not initialized. Use async with context manager.")
        return self._client

    def _auth_headers(self) -> dict[str, str]:
        if self.token is None:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def authenticate(self) -> "FisafeClient":
        """
        Exchange the stored credentials for a bearer token.

        Returns:
            The client, for chaining

        Raises:
            AuthenticationError: Credentials rejected or identity provider unreachable
        """
        client = self._ensure_client()
        method, url, options = token_request(self.credentials, self.grant)
        logger.debug("Requesting %s token from %s", self.grant.value, url)

        try:
            response = await client.request(method, url, **options)
        except httpx.HTTPError as e:
            raise AuthenticationError(
                f"Identity provider unreachable: {e}", status_code=None
            ) from e

        self.token = parse_token_response(response)
        logger.debug("Authenticated %s", self.credentials.username)
        return self

    async def get_organizations(self) -> dict[str, str]:
        """
        Get the organizations the authenticated user belongs to.

        Queried once per client and cached; authenticates first if needed.

        Returns:
            Mapping of organization ID to organization API base URL
        """
        if self._organizations is None:
            if self.token is None:
                await self.authenticate()

            client = self._ensure_client()
            url = organizations_url(self.credentials)
            logger.debug("Resolving organizations via %s", url)

            try:
                response = await client.get(url, headers=self._auth_headers())
            except httpx.HTTPError as e:
                raise transport_error(e) from e

            raise_for_status(response)
            self._organizations = parse_organizations(decode(response))
            logger.debug("Resolved %d organization(s)", len(self._organizations))

        return dict(self._organizations)

    async def set_api_url(self, api_url: str) -> "FisafeClient":
        """
        Bind the client to an organization API url.

        Raises:
            AuthorizationError: The url does not belong to any of the user's organizations
        """
        org_id = match_organization(await self.get_organizations(), api_url)
        if org_id is None:
            self.api_url = None
            logger.warning("Rejected API url %s: not among the user's organizations", api_url)
            raise AuthorizationError(f"user has no access to {api_url}")

        self.api_url = api_url
        logger.info("Bound client to organization %s at %s", org_id, api_url)
        return self

    async def request(
        self,
        path: str,
        method: str = "GET",
        *,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Make a request against the bound organization API.

        Args:
            path: Path relative to the bound API url
            method: HTTP method
            json: JSON body
            params: Query parameters

        Returns:
            Decoded response JSON (None for empty responses)

        Raises:
            ConfigurationError: No API url bound yet
            UpstreamError: HTTP or transport error
            ParseError: Response body is not valid JSON
        """
        if not self.api_url:
            raise ConfigurationError("API url must be specified first")

        client = self._ensure_client()
        url = f"{self.api_url}{path}"
        logger.debug("%s %s", method, url)

        try:
            response = await client.request(
                method, url, json=json, params=params, headers=self._auth_headers()
            )
        except httpx.HTTPError as e:
            raise transport_error(e) from e

        raise_for_status(response)
        return decode(response)

    # Users

    async def create_user(self, identifier: str) -> Any:
        """Create a user with a caller-chosen identifier."""
        return await self.request("users/", "POST", json={"identifier": identifier})

    async def list_users(
        self,
        filters: Optional[dict[str, Any]] = None,
        page: int = 1,
        per_page: int = 100,
    ) -> Any:
        """
        List users.

        Args:
            filters: Query filters, e.g. ``identifier`` or ``identifierSubstring``
                (at least 3 characters)
            page: Page number (default: 1)
            per_page: Users per page (default: 100)
        """
        return await self.request("users", "GET", params=list_params(filters, page, per_page))

    # Identifiers

    async def create_identifier(
        self,
        user_id: Union[int, str],
        value: str,
        type: Union[str, IdentifierType] = IdentifierType.RFID_TAG,
    ) -> Any:
        """
        Bind an identifier to a user.

        Raises:
            InvalidArgumentError: Unknown identifier type
        """
        payload = identifier_payload(value, type)
        return await self.request(f"users/{user_id}/identifiers", "POST", json=payload)

    # Granted accesses

    async def create_granted_access(
        self,
        context_id: int,
        user_id: Union[int, str],
        valid_from: Optional[datetime] = None,
        valid_to: Optional[datetime] = None,
    ) -> Any:
        """Grant a user access to a context, optionally within a time window."""
        payload = granted_access_payload(context_id, user_id, valid_from, valid_to)
        return await self.request("grants/", "POST", json=payload)

    async def update_granted_access(
        self,
        grant_id: Union[int, str],
        context_id: int,
        user_id: Union[int, str],
        valid_from: Optional[datetime] = None,
        valid_to: Optional[datetime] = None,
    ) -> Any:
        payload = granted_access_payload(context_id, user_id, valid_from, valid_to)
        return await self.request(f"grants/{grant_id}", "PATCH", json=payload)

    async def list_granted_accesses(
        self,
        filters: Optional[dict[str, Any]] = None,
        page: int = 1,
        per_page: int = 100,
    ) -> Any:
        return await self.request("grants", "GET", params=list_params(filters, page, per_page))
