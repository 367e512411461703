"""Error taxonomy shared by the store, adapters, agents and HTTP layer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class WardrobeAppError(Exception):
    """Base exception for application errors carrying an HTTP mapping."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(WardrobeAppError):
    """Referenced entity does not exist."""

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any = None) -> None:
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message, details={"resource": resource, "id": resource_id})


class ForbiddenError(WardrobeAppError):
    """Entity exists but belongs to another user."""

    status_code = 403
    error_code = "FORBIDDEN"

    def __init__(self, message: str = "You don't have permission to access this resource") -> None:
        super().__init__(message)


class AuthenticationError(WardrobeAppError):
    """No usable authenticated subject on the request."""

    status_code = 401
    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ValidationFailedError(WardrobeAppError):
    """Input or write-boundary invariant check failed."""

    status_code = 400
    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field
        if errors:
            details["errors"] = errors
        super().__init__(message, details=details)
        self.field = field


class UpstreamUnavailableError(WardrobeAppError):
    """An external provider call failed."""

    status_code = 502
    error_code = "UPSTREAM_UNAVAILABLE"

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service} service error: {message}", details={"service": service})
        self.service = service


class WeatherUnavailableError(UpstreamUnavailableError):
    """Weather lookups fail closed; no safe default temperature exists."""

    def __init__(self, message: str) -> None:
        super().__init__("weather", message)


__all__ = [
    "WardrobeAppError",
    "NotFoundError",
    "ForbiddenError",
    "AuthenticationError",
    "ValidationFailedError",
    "UpstreamUnavailableError",
    "WeatherUnavailableError",
]
