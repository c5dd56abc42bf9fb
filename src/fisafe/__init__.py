"""Fisafe Python SDK - access-control API client."""

from .client import FisafeClient
from .config import ClientSettings
from .exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    FisafeError,
    InvalidArgumentError,
    NotFoundError,
    ParseError,
    ServerError,
    UpstreamAuthenticationError,
    UpstreamAuthorizationError,
    UpstreamError,
    ValidationError,
)
from .models import GrantedAccessPayload, IdentifierPayload, Organization
from .sync_client import SyncFisafeClient, sync_client
from .types import GrantType, IdentifierType

__version__ = "0.1.0"

__all__ = [
    # Main clients
    "FisafeClient",
    "SyncFisafeClient",
    "sync_client",
    # Configuration
    "ClientSettings",
    # Models
    "Organization",
    "IdentifierPayload",
    "GrantedAccessPayload",
    # Types
    "IdentifierType",
    "GrantType",
    # Exceptions
    "FisafeError",
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationError",
    "InvalidArgumentError",
    "UpstreamError",
    "UpstreamAuthenticationError",
    "UpstreamAuthorizationError",
    "NotFoundError",
    "ValidationError",
    "ServerError",
    "ParseError",
]
