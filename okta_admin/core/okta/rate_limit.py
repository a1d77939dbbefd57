"""Rate-limit categories and per-category quota tracking.

Okta enforces separate request quotas per endpoint family. Every request is
tagged with a category so the client can track the quota headers
(``X-Rate-Limit-Limit``, ``X-Rate-Limit-Remaining``, ``X-Rate-Limit-Reset``)
for that family and wait before sending into an exhausted bucket.
"""
from __future__ import annotations
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional


class RateLimitCategory(str, Enum):
    """Server-side quota buckets used by the groups and users endpoints."""

    CORE = "core"
    GROUPS_CREATE_LIST = "groups-create-list"
    GROUPS_GET_UPDATE_DELETE = "groups-get-update-delete"
    USERS_GET_BY_ID = "users-get-by-id"
    USERS_CREATE_UPDATE_DELETE_BY_ID = "users-create-update-delete-by-id"


@dataclass(frozen=True)
class RateLimit:
    """Quota snapshot parsed from one response."""

    limit: Optional[int] = None
    remaining: Optional[int] = None
    reset: Optional[float] = None  # epoch seconds

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimit":
        return cls(
            limit=_int_header(headers, "X-Rate-Limit-Limit"),
            remaining=_int_header(headers, "X-Rate-Limit-Remaining"),
            reset=_int_header(headers, "X-Rate-Limit-Reset"),
        )

    @property
    def is_known(self) -> bool:
        return self.remaining is not None and self.reset is not None

    def seconds_until_reset(self, now: Optional[float] = None) -> float:
        if self.reset is None:
            return 0.0
        now = time.time() if now is None else now
        return max(0.0, self.reset - now)


def _int_header(headers: Mapping[str, str], name: str) -> Optional[int]:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class RateLimitTracker:
    """Remembers the latest quota snapshot for each category.

    Thread-safe: one tracker is shared by every request issued through a client.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._limits: Dict[RateLimitCategory, RateLimit] = {}

    def update(self, category: RateLimitCategory, rate_limit: RateLimit) -> None:
        if not rate_limit.is_known:
            return
        with self._lock:
            self._limits[category] = rate_limit

    def get(self, category: RateLimitCategory) -> Optional[RateLimit]:
        with self._lock:
            return self._limits.get(category)

    def wait_time(self, category: RateLimitCategory, now: Optional[float] = None) -> float:
        """Seconds to wait before the category has quota again (0 if available)."""
        rate_limit = self.get(category)
        if rate_limit is None or rate_limit.remaining is None or rate_limit.remaining > 0:
            return 0.0
        return rate_limit.seconds_until_reset(now)
