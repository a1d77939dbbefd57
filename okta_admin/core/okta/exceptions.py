"""Okta-specific exceptions for error handling."""
from __future__ import annotations
from typing import Any, List, Optional


class OktaError(Exception):
    """Base exception for all Okta operations."""
    pass


class ConfigurationError(OktaError):
    """Client configuration is missing or invalid."""
    pass


class OktaRequestError(OktaError):
    """Request could not be built (bad path, unserializable body)."""
    pass


class OktaAPIError(OktaError):
    """HTTP error from the Okta API.

    Attributes:
        status_code: HTTP status code
        message: Error summary (or raw body when not an Okta error object)
        endpoint: API endpoint that failed
        error_code: Okta error code, e.g. E0000007
        error_id: Okta error correlation id
        error_causes: List of cause summaries
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        endpoint: str,
        error_code: Optional[str] = None,
        error_id: Optional[str] = None,
        error_causes: Optional[List[Any]] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        self.error_code = error_code
        self.error_id = error_id
        self.error_causes = error_causes or []
        prefix = f"[{status_code}]" if not error_code else f"[{status_code} {error_code}]"
        super().__init__(f"{prefix} {endpoint}: {message}")

    @property
    def error_summary(self) -> str:
        return self.message


class OktaDecodeError(OktaError):
    """Response body is not JSON or does not have the expected shape."""
    pass


class RequestCancelledError(OktaError):
    """Caller cancelled the operation before the next request was sent."""
    pass
