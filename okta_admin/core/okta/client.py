"""Low-level HTTP client for the Okta API.

Handles authentication, request construction, rate limiting, and JSON decoding.
"""
from __future__ import annotations
import json
import logging
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import urljoin, urlparse

import requests

from okta_admin.config import settings as okta_settings
from .exceptions import (
    OktaAPIError,
    OktaDecodeError,
    OktaRequestError,
    RequestCancelledError,
)
from .rate_limit import RateLimit, RateLimitCategory, RateLimitTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Used when a 429 carries neither X-Rate-Limit-Reset nor Retry-After
_DEFAULT_RETRY_AFTER = 1.0


@dataclass
class OktaRequest:
    """A fully resolved request, ready to be sent by ``OktaClient.do``."""

    method: str
    url: str
    body: Optional[Any] = None
    data: Optional[bytes] = None
    headers: Dict[str, str] = field(default_factory=dict, repr=False)


@dataclass(frozen=True)
class Pagination:
    """Cursor for the next page; empty string when the list is exhausted."""

    next: str = ""


class OktaResponse:
    """Response wrapper exposing decoded bodies, pagination, and quota metadata."""

    def __init__(self, response: requests.Response, category: RateLimitCategory, rate_limit: RateLimit):
        self.raw = response
        self.category = category
        self.rate_limit = rate_limit
        self.pagination = Pagination(next=_next_link(response))

    @property
    def status_code(self) -> int:
        return self.raw.status_code

    @property
    def headers(self):
        return self.raw.headers

    @property
    def url(self) -> str:
        return self.raw.url

    def json(self) -> Any:
        """Parse the response body as JSON (None for an empty body).

        Raises:
            OktaDecodeError: If the body is not valid JSON
        """
        if not self.raw.content:
            return None
        try:
            return self.raw.json()
        except ValueError as e:
            raise OktaDecodeError(f"Invalid JSON in response from {self.url}: {e}") from e

    def decode(self, model: Type[T]) -> T:
        """Decode the body as a single ``model`` instance."""
        data = self.json()
        try:
            return model.from_dict(data)
        except (TypeError, ValueError, AttributeError) as e:
            raise OktaDecodeError(f"Cannot decode {model.__name__} from {self.url}: {e}") from e

    def decode_list(self, model: Type[T]) -> List[T]:
        """Decode the body as a JSON array of ``model`` instances, preserving order."""
        data = self.json()
        if data is None:
            return []
        if not isinstance(data, list):
            raise OktaDecodeError(
                f"Expected a JSON array of {model.__name__} from {self.url}, got {type(data).__name__}"
            )
        try:
            return [model.from_dict(item) for item in data]
        except (TypeError, ValueError, AttributeError) as e:
            raise OktaDecodeError(f"Cannot decode {model.__name__} list from {self.url}: {e}") from e

    def __repr__(self) -> str:
        return f"<OktaResponse [{self.status_code}] {self.url}>"


def _next_link(response: requests.Response) -> str:
    return (response.links.get("next") or {}).get("url", "")


def _check_cancelled(request: OktaRequest, cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise RequestCancelledError(f"Cancelled before {request.method} {request.url}")


def _pause(seconds: float, cancel_event: Optional[threading.Event]) -> None:
    """Sleep, returning early when ``cancel_event`` is set."""
    if cancel_event is None:
        time.sleep(seconds)
    else:
        cancel_event.wait(seconds)


def _effective_port(parsed) -> int:
    return parsed.port or (443 if parsed.scheme == "https" else 80)


def _to_json_ready(body: Any) -> Any:
    if hasattr(body, "to_dict"):
        return body.to_dict()
    if isinstance(body, dict):
        return {key: _to_json_ready(value) for key, value in body.items()}
    if isinstance(body, (list, tuple)):
        return [_to_json_ready(item) for item in body]
    return body


class OktaClient:
    """HTTP client for the Okta API.

    Features:
    - SSWS API token authentication
    - Per-category rate-limit tracking with wait-before-send on exhausted quotas
    - Automatic retry on 429 Too Many Requests
    - Centralized error handling

    Usage:
        client = OktaClient("https://example.okta.com", "00abc...")
        response = client.get("groups?limit=100", category=RateLimitCategory.GROUPS_CREATE_LIST)

    The client holds no per-request state and may be shared between threads.
    """

    def __init__(
        self,
        org_url: Optional[str] = None,
        api_token: Optional[str] = None,
        config: Optional[okta_settings.OktaConfig] = None,
    ):
        """Initialize Okta client.

        Args:
            org_url: Okta org URL (defaults to OKTA_ORG_URL env var)
            api_token: API token (defaults to /run/secrets/okta_api_token or OKTA_API_TOKEN)
            config: Complete configuration; takes precedence over the other arguments
        """
        if config is None:
            if org_url is None and api_token is None:
                config = okta_settings.load_settings()
            else:
                # Whichever of the two is missing comes from the environment
                config = okta_settings.OktaConfig(
                    org_url=org_url or os.environ.get("OKTA_ORG_URL", ""),
                    api_token=api_token or okta_settings._load_secret_from_file("okta_api_token", "OKTA_API_TOKEN") or "",
                )
        self.config = config
        self.base_url = config.api_base_url
        self.rate_limits = RateLimitTracker()

    @classmethod
    def from_env(cls) -> "OktaClient":
        return cls(config=okta_settings.load_settings())

    # ─────────────────────────────────────────────────────────────────────
    # Request construction and execution
    # ─────────────────────────────────────────────────────────────────────

    def new_request(self, method: str, path: str, body: Any = None, data: Optional[bytes] = None) -> OktaRequest:
        """Build a request against the API base URL.

        Args:
            method: HTTP method
            path: Path relative to /api/v1/ (e.g. "groups/00g1"), or an absolute
                URL on the same org (pagination cursors)
            body: JSON payload; dataclass models are converted with ``to_dict``
            data: Pre-encoded JSON body, sent byte for byte (exclusive with ``body``)

        Returns:
            OktaRequest ready for ``do``

        Raises:
            OktaRequestError: If the path or body is invalid
        """
        if not path:
            raise OktaRequestError("Request path must not be empty")
        if body is not None and data is not None:
            raise OktaRequestError("Pass either a JSON body or raw data, not both")

        parsed = urlparse(path)
        if parsed.scheme:
            if parsed.scheme not in ("http", "https") or not self._is_same_origin(parsed):
                raise OktaRequestError(f"Refusing to send credentials to foreign URL '{path}'")
            url = path
        else:
            if path.startswith("/") or ".." in parsed.path.split("/"):
                raise OktaRequestError(f"Request path must be relative to the API base: '{path}'")
            url = urljoin(self.base_url, path)

        payload = None
        if body is not None:
            payload = _to_json_ready(body)
            try:
                json.dumps(payload)
            except (TypeError, ValueError) as e:
                raise OktaRequestError(f"Request body for {method} {path} is not JSON-serializable: {e}") from e

        return OktaRequest(method=method.upper(), url=url, body=payload, data=data, headers=self._build_headers())

    def do(
        self,
        request: OktaRequest,
        category: RateLimitCategory = RateLimitCategory.CORE,
        cancel_event: Optional[threading.Event] = None,
    ) -> OktaResponse:
        """Execute a request, retrying on 429.

        Args:
            request: Request built by ``new_request``
            category: Rate-limit bucket the endpoint belongs to
            cancel_event: When set, no further request is sent

        Returns:
            OktaResponse wrapper

        Raises:
            RequestCancelledError: If ``cancel_event`` is set
            OktaAPIError: On HTTP error
            requests.RequestException: On network failure
        """
        max_retries = self.config.max_retries
        attempt = 0
        retried_after_429 = False
        while True:
            _check_cancelled(request, cancel_event)
            # A 429 retry has already waited out the reset
            if not retried_after_429:
                self._wait_for_quota(category, cancel_event)
                _check_cancelled(request, cancel_event)

            logger.debug("%s %s [%s]", request.method, request.url, category.value)
            resp = requests.request(
                request.method,
                request.url,
                json=request.body,
                data=request.data,
                headers=request.headers,
                timeout=self.config.request_timeout,
            )
            rate_limit = RateLimit.from_headers(resp.headers)
            self.rate_limits.update(category, rate_limit)

            if resp.status_code == 429 and attempt < max_retries:
                attempt += 1
                delay = self._retry_delay(resp, rate_limit)
                logger.warning(
                    "Rate limited on %s %s [%s], retrying in %.1fs (%d/%d)",
                    request.method, request.url, category.value, delay, attempt, max_retries,
                )
                _pause(delay, cancel_event)
                retried_after_429 = True
                continue

            self._handle_error(resp, request)
            return OktaResponse(resp, category, rate_limit)

    # ─────────────────────────────────────────────────────────────────────
    # Convenience wrappers
    # ─────────────────────────────────────────────────────────────────────

    def get(self, path: str, category: RateLimitCategory = RateLimitCategory.CORE, **kwargs) -> OktaResponse:
        """Execute GET request."""
        return self.do(self.new_request("GET", path), category, **kwargs)

    def post(
        self,
        path: str,
        body: Any = None,
        category: RateLimitCategory = RateLimitCategory.CORE,
        data: Optional[bytes] = None,
        **kwargs,
    ) -> OktaResponse:
        """Execute POST request with a JSON body (or pre-encoded ``data``)."""
        return self.do(self.new_request("POST", path, body, data=data), category, **kwargs)

    def put(self, path: str, body: Any = None, category: RateLimitCategory = RateLimitCategory.CORE, **kwargs) -> OktaResponse:
        """Execute PUT request with a JSON body."""
        return self.do(self.new_request("PUT", path, body), category, **kwargs)

    def delete(self, path: str, category: RateLimitCategory = RateLimitCategory.CORE, **kwargs) -> OktaResponse:
        """Execute DELETE request."""
        return self.do(self.new_request("DELETE", path), category, **kwargs)

    # ─────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"SSWS {self.config.api_token}",
            "User-Agent": self.config.user_agent,
        }

    def _is_same_origin(self, parsed) -> bool:
        base = urlparse(self.base_url)
        try:
            return (parsed.hostname, _effective_port(parsed)) == (base.hostname, _effective_port(base))
        except ValueError:
            # malformed port
            return False

    def _wait_for_quota(self, category: RateLimitCategory, cancel_event: Optional[threading.Event] = None) -> None:
        wait = self.rate_limits.wait_time(category)
        if wait <= 0:
            return
        wait = min(wait, self.config.max_rate_limit_wait)
        logger.warning("Quota for %s exhausted, waiting %.1fs for reset", category.value, wait)
        _pause(wait, cancel_event)

    def _retry_delay(self, resp: requests.Response, rate_limit: RateLimit) -> float:
        if rate_limit.reset is not None:
            delay = rate_limit.seconds_until_reset()
        else:
            try:
                delay = float(resp.headers.get("Retry-After", _DEFAULT_RETRY_AFTER))
            except ValueError:
                delay = _DEFAULT_RETRY_AFTER
        # Reset is second-granular; never busy-loop
        delay = max(delay, _DEFAULT_RETRY_AFTER)
        return min(delay, self.config.max_rate_limit_wait)

    def _handle_error(self, resp: requests.Response, request: OktaRequest) -> None:
        """Centralized error handling for HTTP responses.

        Args:
            resp: Response object to check
            request: Request that produced it

        Raises:
            OktaAPIError: If response status indicates error
        """
        if resp.status_code < 400:
            return

        error_body: Dict[str, Any] = {}
        try:
            parsed = resp.json()
            if isinstance(parsed, dict):
                error_body = parsed
        except ValueError:
            pass  # not an Okta error object; fall back to the raw body

        causes = [
            cause.get("errorSummary", cause) if isinstance(cause, dict) else cause
            for cause in error_body.get("errorCauses") or []
        ]
        raise OktaAPIError(
            resp.status_code,
            error_body.get("errorSummary") or resp.text,
            resp.url or request.url,
            error_code=error_body.get("errorCode"),
            error_id=error_body.get("errorId"),
            error_causes=causes,
        )
