"""Pydantic models and request payload builders for the Fisafe SDK."""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import InvalidArgumentError
from .types import IdentifierType

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
MIN_SUBSTRING_LENGTH = 3


class Organization(BaseModel):
    """An organization (tenant) the authenticated user belongs to."""

    id: Union[int, str]
    url: Optional[str] = None
    name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _url_from_attributes(cls, data: Any) -> Any:
        # Identity providers may carry the API url as a multi-valued attribute
        if isinstance(data, dict) and not data.get("url"):
            attributes = data.get("attributes") or {}
            if not isinstance(attributes, dict):
                raise ValueError(f"attributes must be an object, got {type(attributes).__name__}")
            values = attributes.get("url")
            if isinstance(values, list) and values:
                data = {**data, "url": values[0]}
            elif isinstance(values, str):
                data = {**data, "url": values}
        return data


class IdentifierPayload(BaseModel):
    """Body for binding a credential value to a user."""

    model_config = ConfigDict(use_enum_values=True)

    type: IdentifierType = IdentifierType.RFID_TAG
    value: str


class GrantedAccessPayload(BaseModel):
    """Body for creating or updating a granted access.

    Missing ``expiry_time_start`` means the grant is valid immediately and a
    missing ``expiry_time_end`` means it never expires.
    """

    user_id: Union[int, str]
    expiry_time_start: Optional[datetime] = None
    expiry_time_end: Optional[datetime] = None
    context_id: int

    @field_serializer("expiry_time_start", "expiry_time_end")
    def _format_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        return value.strftime(TIMESTAMP_FORMAT) if value is not None else None


class ListQuery(BaseModel):
    """Pagination parameters for list endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(default=1, ge=1)
    items_per_page: int = Field(default=100, ge=1, alias="itemsPerPage")


def _describe(error: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc']) or 'value'}: {item['msg']}"
        for item in error.errors()
    )


def identifier_payload(value: str, type: Union[str, IdentifierType]) -> dict[str, Any]:
    """Build the body for ``users/{id}/identifiers``, rejecting unknown types."""
    try:
        identifier_type = IdentifierType(type)
    except ValueError as e:
        allowed = ", ".join(t.value for t in IdentifierType)
        raise InvalidArgumentError(
            f"Invalid identifier type {type!r}, expected one of: {allowed}"
        ) from e

    try:
        return IdentifierPayload(type=identifier_type, value=value).model_dump()
    except PydanticValidationError as e:
        raise InvalidArgumentError(f"Invalid identifier: {_describe(e)}") from e


def granted_access_payload(
    context_id: int,
    user_id: Union[int, str],
    valid_from: Optional[datetime] = None,
    valid_to: Optional[datetime] = None,
) -> dict[str, Any]:
    """Build the body for ``grants/`` and ``grants/{id}``."""
    try:
        payload = GrantedAccessPayload(
            user_id=user_id,
            context_id=context_id,
            expiry_time_start=valid_from,
            expiry_time_end=valid_to,
        )
    except PydanticValidationError as e:
        raise InvalidArgumentError(f"Invalid granted access: {_describe(e)}") from e
    return payload.model_dump()


def list_params(
    filters: Optional[dict[str, Any]],
    page: int,
    per_page: int,
) -> dict[str, Any]:
    """
    Merge caller filters with pagination parameters.

    Raises:
        InvalidArgumentError: ``identifierSubstring`` is shorter than three
            characters, or pagination values are not positive integers
    """
    params = {key: value for key, value in (filters or {}).items() if value is not None}

    substring = params.get("identifierSubstring")
    if substring is not None and len(str(substring)) < MIN_SUBSTRING_LENGTH:
        raise InvalidArgumentError(
            f"identifierSubstring must be at least {MIN_SUBSTRING_LENGTH} characters, "
            f"got {substring!r}"
        )

    try:
        query = ListQuery(page=page, items_per_page=per_page)
    except PydanticValidationError as e:
        raise InvalidArgumentError(f"Invalid pagination: {_describe(e)}") from e

    params.update(query.model_dump(by_alias=True))
    return params
