"""Response handling shared by the sync and async clients."""

from typing import Any

import httpx

from .exceptions import (
    NotFoundError,
    ParseError,
    ServerError,
    UpstreamAuthenticationError,
    UpstreamAuthorizationError,
    UpstreamError,
    ValidationError,
)

_DETAIL_KEYS = ("detail", "message", "error_description", "error")


def error_detail(response: httpx.Response, default: str) -> str:
    """Pull a human readable error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or default

    if isinstance(body, dict):
        for key in _DETAIL_KEYS:
            if body.get(key):
                return str(body[key])
    return response.text or default


def raise_for_status(response: httpx.Response) -> None:
    """
    Map a non-2xx response onto the SDK exception hierarchy.

    Raises:
        UpstreamAuthenticationError: Token rejected (401)
        UpstreamAuthorizationError: Access denied (403)
        NotFoundError: Resource not found (404)
        ValidationError: Validation failed (422)
        ServerError: Server error (5xx)
        UpstreamError: Other errors
    """
    status = response.status_code
    if status < 400:
        return

    if status == 401:
        raise UpstreamAuthenticationError(error_detail(response, "Authentication failed"))
    elif status == 403:
        raise UpstreamAuthorizationError(error_detail(response, "Authorization denied"))
    elif status == 404:
        raise NotFoundError(error_detail(response, "Resource not found"))
    elif status == 422:
        raise ValidationError(error_detail(response, "Validation error"))
    elif status >= 500:
        raise ServerError(error_detail(response, "Server error"), status_code=status)
    raise UpstreamError(error_detail(response, "Request failed"), status_code=status)


def decode(response: httpx.Response) -> Any:
    """Decode a JSON response body; No Content decodes to None."""
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise ParseError(
            f"Malformed JSON in response: {e}", status_code=response.status_code
        ) from e


def transport_error(e: httpx.HTTPError) -> UpstreamError:
    """Wrap an httpx transport failure."""
    if isinstance(e, httpx.TimeoutException):
        return UpstreamError(f"Request timeout: {e}")
    return UpstreamError(f"HTTP error: {e}")
