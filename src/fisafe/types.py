"""Type definitions and enums for the Fisafe SDK."""

from enum import Enum


class IdentifierType(str, Enum):
    """Credential kinds that can be bound to a user."""

    PIN = "pin"
    RFID_TAG = "rfid-tag"
    LICENCE_PLATE = "licence-plate"


class GrantType(str, Enum):
    """How the client obtains its bearer token."""

    PASSWORD = "password"  # Realm-scoped OAuth password grant
    BASIC = "basic"  # Legacy GET v1/token/auth with HTTP basic credentials
