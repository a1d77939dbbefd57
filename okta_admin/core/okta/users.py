"""Okta user management operations."""
from __future__ import annotations
import threading
from typing import Any, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote, urlencode

from .client import OktaClient, OktaResponse
from .models import User
from .pagination import paginate
from .rate_limit import RateLimitCategory

USERS_PAGE_SIZE = 200
USERS_FILTER_PAGE_SIZE = 100

RawProfile = Union[str, bytes, Mapping[str, Any]]


class UserService:
    """Service for managing Okta users."""

    def __init__(self, client: OktaClient):
        """Initialize user service.

        Args:
            client: Configured Okta client
        """
        self.client = client

    def get_by_id(self, user_id: str) -> Tuple[User, OktaResponse]:
        """Fetch a user by ID (or login)."""
        resp = self.client.get(_user_path(user_id), category=RateLimitCategory.USERS_GET_BY_ID)
        return resp.decode(User), resp

    def update_profile_delta(self, user_id: str, raw_profile: RawProfile) -> Tuple[User, OktaResponse]:
        """Partially update a user's profile.

        Only the attributes present in ``raw_profile`` change; the server merges
        them into the existing profile. The payload is forwarded as given.

        Text and bytes are spliced into the request body unparsed, so the
        server receives exactly the fragment supplied.

        Args:
            user_id: User ID
            raw_profile: JSON fragment as text or bytes, or a mapping to serialize
        """
        if isinstance(raw_profile, Mapping):
            body, data = {"profile": dict(raw_profile)}, None
        else:
            body, data = None, _profile_delta_body(raw_profile)
        resp = self.client.post(
            _user_path(user_id),
            body,
            data=data,
            category=RateLimitCategory.USERS_CREATE_UPDATE_DELETE_BY_ID,
        )
        return resp.decode(User), resp

    def list(self, cancel_event: Optional[threading.Event] = None) -> Tuple[List[User], OktaResponse]:
        """Fetch every user, following pagination."""
        path = "users?" + urlencode({"limit": USERS_PAGE_SIZE})
        return paginate(self.client, path, User, RateLimitCategory.CORE, cancel_event)

    def list_filter(
        self, filter_expression: str, cancel_event: Optional[threading.Event] = None
    ) -> Tuple[List[User], OktaResponse]:
        """Fetch users matching a filter expression, e.g. ``status eq "ACTIVE"``."""
        path = "users?" + urlencode({"limit": USERS_FILTER_PAGE_SIZE, "filter": filter_expression})
        # Okta bills filtered user listing against the same bucket as group listing
        return paginate(self.client, path, User, RateLimitCategory.GROUPS_CREATE_LIST, cancel_event)


def _profile_delta_body(raw_profile: Union[str, bytes]) -> bytes:
    raw = raw_profile.encode("utf-8") if isinstance(raw_profile, str) else bytes(raw_profile)
    return b'{"profile":' + raw + b'}'


def _user_path(user_id: str) -> str:
    return f"users/{quote(user_id, safe='')}"
