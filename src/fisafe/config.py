"""
Configuration for Fisafe clients.

Loads settings from environment variables with the FISAFE_ prefix, or from a
local .env file.
"""

from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import GrantType


class ClientSettings(BaseSettings):
    """Client settings loaded from environment variables."""

    # Identity provider
    auth_url: str
    realm: str
    client_id: Optional[str] = None
    grant: GrantType = GrantType.PASSWORD

    # User credentials
    username: str
    password: SecretStr

    # Tenant API url to bind after authenticating (optional)
    api_url: Optional[str] = None

    # HTTP
    timeout: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="FISAFE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
