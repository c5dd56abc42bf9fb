"""Custom exceptions for the Fisafe SDK."""


class FisafeError(Exception):
    """Base exception for all Fisafe errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationError(FisafeError):
    """Raised when credentials are rejected or the identity endpoint is unreachable."""

    def __init__(self, message: str = "Authentication failed", status_code: int | None = 401) -> None:
        super().__init__(message, status_code=status_code)


class AuthorizationError(FisafeError):
    """Raised when the user may not reach an API url or resource (403)."""

    def __init__(self, message: str = "Authorization denied") -> None:
        super().__init__(message, status_code=403)


class ConfigurationError(FisafeError):
    """Raised when the client is used before it is fully configured."""


class InvalidArgumentError(FisafeError, ValueError):
    """Raised when an argument is rejected before any request is made."""


class ParseError(FisafeError):
    """Raised when a response body is not valid JSON."""


class UpstreamError(FisafeError):
    """Raised when an endpoint returns a non-2xx status or cannot be reached."""


class NotFoundError(UpstreamError):
    """Raised when a resource is not found (404)."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=404)


class ValidationError(UpstreamError):
    """Raised when request validation fails (422)."""

    def __init__(self, message: str = "Validation error") -> None:
        super().__init__(message, status_code=422)


class ServerError(UpstreamError):
    """Raised when server returns 5xx error."""

    def __init__(self, message: str = "Server error", status_code: int = 500) -> None:
        super().__init__(message, status_code=status_code)


class UpstreamAuthenticationError(AuthenticationError, UpstreamError):
    """Raised when an endpoint rejects the bearer token (401)."""


class UpstreamAuthorizationError(AuthorizationError, UpstreamError):
    """Raised when an endpoint denies access (403)."""
