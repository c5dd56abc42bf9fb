"""Synchronous client for the Fisafe access-control API."""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Generator, Optional, Union

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


class SyncFisafeClient:
    """
    Synchronous Python client for the Fisafe API.

    A client moves through three states: unauthenticated, authenticated
    (holds a bearer token) and tenant-scoped (bound to an organization API
    url). Resource operations are only available once scoped.

    Instances are not thread-safe. The active API url and the cached
    organization map are plain attributes with no locking; share a client
    across threads only under the caller's own synchronization.

    Usage:
        with SyncFisafeClient(
            auth_url="https://auth.fisafe.cloud",
            realm="fisafe",
            client_id="fisafe-sdk",
            username="operator@example.com",
            password="secret",
        ) as client:
            client.authenticate()
            client.set_api_url("https://org1.fisafe.cloud/v1/api/")

            user = client.create_user("alice")
            client.create_identifier(user["id"], "04A224B2C15E80", IdentifierType.RFID_TAG)
            client.create_granted_access(context_id=7, user_id=user["id"])
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
        self._client: Optional[httpx.Client] = None

    @classmethod
    def from_settings(cls, settings: Optional[ClientSettings] = None) -> "SyncFisafeClient":
        """
        Build a client from settings, reading FISAFE_* environment variables when omitted.
        """
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

    def __enter__(self) -> "SyncFisafeClient":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def connect(self) -> None:
        """Initialize the HTTP client."""
        self._client = httpx.Client(
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()

    def _ensure_client(self) -> httpx.Client:
        """Ensure client is initialized."""
        if self._client is None:
            raise RuntimeError("Client not initialized. Use context manager or call connect().")
        return self._client

    def _auth_headers(self) -> dict[str, str]:
        if self.token is None:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    # Authentication and tenant scoping

    def authenticate(self) -> "SyncFisafeClient":
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
            response = client.request(method, url, **options)
        except httpx.HTTPError as e:
            raise AuthenticationError(
                f"Identity provider unreachable: {e}", status_code=None
            ) from e

        self.token = parse_token_response(response)
        logger.debug("Authenticated %s", self.credentials.username)
        return self

    def get_organizations(self) -> dict[str, str]:
        """
        Get the organizations the authenticated user belongs to.

        The first call queries the identity provider (authenticating first if
        needed); the result is cached for the lifetime of the client.

        Returns:
            Mapping of organization ID to organization API base URL

        Raises:
            UpstreamError: Organization lookup failed
        """
        if self._organizations is None:
            if self.token is None:
                self.authenticate()

            client = self._ensure_client()
            url = organizations_url(self.credentials)
            logger.debug("Resolving organizations via %s", url)

            try:
                response = client.get(url, headers=self._auth_headers())
            except httpx.HTTPError as e:
                raise transport_error(e) from e

            raise_for_status(response)
            self._organizations = parse_organizations(decode(response))
            logger.debug("Resolved %d organization(s)", len(self._organizations))

        return dict(self._organizations)

    def set_api_url(self, api_url: str) -> "SyncFisafeClient":
        """
        Bind the client to an organization API url.

        The url must start with the API url of one of the user's
        organizations. It is stored as given, so it may point below the
        organization root.

        Args:
            api_url: Organization API base URL

        Returns:
            The client, for chaining

        Raises:
            AuthorizationError: The url does not belong to any of the user's organizations

        Example:
            client.set_api_url("https://org1.fisafe.cloud/v1/api/")
        """
        org_id = match_organization(self.get_organizations(), api_url)
        if org_id is None:
            self.api_url = None
            logger.warning("Rejected API url %s: not among the user's organizations", api_url)
            raise AuthorizationError(f"user has no access to {api_url}")

        self.api_url = api_url
        logger.info("Bound client to organization %s at %s", org_id, api_url)
        return self

    # Generic request

    def request(
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
            AuthenticationError: Authentication failed (401)
            AuthorizationError: Access denied (403)
            NotFoundError: Resource not found (404)
            ValidationError: Validation failed (422)
            ServerError: Server error (5xx)
            UpstreamError: Other HTTP or transport errors
            ParseError: Response body is not valid JSON
        """
        if not self.api_url:
            raise ConfigurationError("API url must be specified first")

        client = self._ensure_client()
        url = f"{self.api_url}{path}"
        logger.debug("%s %s", method, url)

        try:
            response = client.request(
                method, url, json=json, params=params, headers=self._auth_headers()
            )
        except httpx.HTTPError as e:
            raise transport_error(e) from e

        raise_for_status(response)
        return decode(response)

    # Users

    def create_user(self, identifier: str) -> Any:
        """
        Create a user.

        Args:
            identifier: Caller-chosen user identifier, unique within the organization

        Returns:
            Created user

        Example:
            user = client.create_user("alice")
        """
        return self.request("users/", "POST", json={"identifier": identifier})

    def list_users(
        self,
        filters: Optional[dict[str, Any]] = None,
        page: int = 1,
        per_page: int = 100,
    ) -> Any:
        """
        List users.

        Args:
            filters: Query filters, e.g. ``identifier`` (exact match) or
                ``identifierSubstring`` (at least 3 characters)
            page: Page number (default: 1)
            per_page: Users per page (default: 100)

        Returns:
            Users matching the filters

        Raises:
            InvalidArgumentError: ``identifierSubstring`` shorter than 3 characters
        """
        return self.request("users", "GET", params=list_params(filters, page, per_page))

    # Identifiers

    def create_identifier(
        self,
        user_id: Union[int, str],
        value: str,
        type: Union[str, IdentifierType] = IdentifierType.RFID_TAG,
    ) -> Any:
        """
        Bind an identifier (PIN, RFID tag or licence plate) to a user.

        Args:
            user_id: User ID
            value: Identifier value
            type: Identifier type (default: rfid-tag)

        Returns:
            Created identifier

        Raises:
            InvalidArgumentError: Unknown identifier type

        Example:
            client.create_identifier(42, "ABC-123", IdentifierType.LICENCE_PLATE)
        """
        payload = identifier_payload(value, type)
        return self.request(f"users/{user_id}/identifiers", "POST", json=payload)

    # Granted accesses

    def create_granted_access(
        self,
        context_id: int,
        user_id: Union[int, str],
        valid_from: Optional[datetime] = None,
        valid_to: Optional[datetime] = None,
    ) -> Any:
        """
        Grant a user access to a context.

        Args:
            context_id: Access context ID
            user_id: User ID
            valid_from: Start of validity (None = immediately)
            valid_to: End of validity (None = indefinitely)

        Returns:
            Created granted access
        """
        payload = granted_access_payload(context_id, user_id, valid_from, valid_to)
        return self.request("grants/", "POST", json=payload)

    def update_granted_access(
        self,
        grant_id: Union[int, str],
        context_id: int,
        user_id: Union[int, str],
        valid_from: Optional[datetime] = None,
        valid_to: Optional[datetime] = None,
    ) -> Any:
        """Update a granted access; arguments as for :meth:`create_granted_access`."""
        payload = granted_access_payload(context_id, user_id, valid_from, valid_to)
        return self.request(f"grants/{grant_id}", "PATCH", json=payload)

    def list_granted_accesses(
        self,
        filters: Optional[dict[str, Any]] = None,
        page: int = 1,
        per_page: int = 100,
    ) -> Any:
        """List granted accesses, optionally filtered."""
        return self.request("grants", "GET", params=list_params(filters, page, per_page))


@contextmanager
def sync_client(
    auth_url: Optional[str] = None,
    realm: Optional[str] = None,
    client_id: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    api_url: Optional[str] = None,
    grant: Union[str, GrantType] = GrantType.PASSWORD,
    timeout: float = 30.0,
    settings: Optional[ClientSettings] = None,
) -> Generator[SyncFisafeClient, None, None]:
    """
    Context manager yielding an authenticated (and optionally scoped) client.

    Args:
        auth_url: Identity provider base URL
        realm: Identity provider realm
        client_id: OAuth client ID
        username: Account username
        password: Account password
        api_url: Organization API url to bind after authenticating
        grant: Token grant to use (default: password)
        timeout: Request timeout in seconds (default: 30.0)
        settings: Use these settings instead of the individual arguments

    Yields:
        SyncFisafeClient instance

    Example:
        with sync_client(
            auth_url="https://auth.fisafe.cloud",
            realm="fisafe",
            client_id="fisafe-sdk",
            username="operator@example.com",
            password="secret",
            api_url="https://org1.fisafe.cloud/v1/api/",
        ) as client:
            users = client.list_users({"identifierSubstring": "ali"})
    """
    if settings is not None:
        client = SyncFisafeClient.from_settings(settings)
        api_url = api_url or settings.api_url
    elif auth_url is None or realm is None or username is None or password is None:
        raise ConfigurationError(
            "auth_url, realm, username and password are required when no settings are given"
        )
    else:
        client = SyncFisafeClient(
            auth_url=auth_url,
            realm=realm,
            client_id=client_id,
            username=username,
            password=password,
            grant=grant,
            timeout=timeout,
        )

    with client:
        client.authenticate()
        if api_url:
            client.set_api_url(api_url)
        yield client
