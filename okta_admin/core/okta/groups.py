"""Okta group management operations."""
from __future__ import annotations
import logging
import threading
from typing import List, Optional, Tuple
from urllib.parse import quote, urlencode

from .client import OktaClient, OktaResponse
from .models import Group, GroupProfile, User
from .pagination import paginate
from .rate_limit import RateLimitCategory

logger = logging.getLogger(__name__)

GROUPS_PAGE_SIZE = 100
MEMBERS_PAGE_SIZE = 200


class GroupService:
    """Service for managing Okta groups."""

    def __init__(self, client: OktaClient):
        """Initialize group service.

        Args:
            client: Configured Okta client
        """
        self.client = client

    def get_by_id(self, group_id: str) -> Tuple[Group, OktaResponse]:
        """Fetch a group by ID.

        Raises:
            OktaAPIError: 404 when the group does not exist
        """
        resp = self.client.get(_group_path(group_id), category=RateLimitCategory.GROUPS_GET_UPDATE_DELETE)
        return resp.decode(Group), resp

    def list(self, cancel_event: Optional[threading.Event] = None) -> Tuple[List[Group], OktaResponse]:
        """Fetch every group, following pagination."""
        path = "groups?" + urlencode({"limit": GROUPS_PAGE_SIZE})
        return self._list(path, cancel_event)

    def list_search_by_name(
        self, partial_name: str, cancel_event: Optional[threading.Event] = None
    ) -> Tuple[List[Group], OktaResponse]:
        """Fetch groups whose name starts with ``partial_name``.

        Name search and ``list_filter`` are mutually exclusive on the server side.
        """
        path = "groups?" + urlencode({"limit": GROUPS_PAGE_SIZE, "q": partial_name})
        return self._list(path, cancel_event)

    def list_filter(
        self, filter_expression: str, cancel_event: Optional[threading.Event] = None
    ) -> Tuple[List[Group], OktaResponse]:
        """Fetch groups matching a filter expression, e.g. ``type eq "BUILT_IN"``."""
        path = "groups?" + urlencode({"limit": GROUPS_PAGE_SIZE, "filter": filter_expression})
        return self._list(path, cancel_event)

    def _list(self, path: str, cancel_event: Optional[threading.Event]) -> Tuple[List[Group], OktaResponse]:
        return paginate(self.client, path, Group, RateLimitCategory.GROUPS_CREATE_LIST, cancel_event)

    def add(self, profile: GroupProfile) -> Tuple[Group, OktaResponse]:
        """Create a group.

        Returns:
            The created group, with server-assigned ID and timestamps
        """
        resp = self.client.post(
            "groups",
            {"profile": profile},
            category=RateLimitCategory.GROUPS_CREATE_LIST,
        )
        group = resp.decode(Group)
        logger.info("Group '%s' created (id=%s)", group.profile.name, group.id)
        return group, resp

    def update(self, group_id: str, profile: GroupProfile) -> Tuple[Group, OktaResponse]:
        """Replace a group's profile.

        Delta updates are not supported: ``profile`` must be the complete
        desired profile. Fields left as None are removed on the server.
        """
        resp = self.client.put(
            _group_path(group_id),
            {"profile": profile},
            category=RateLimitCategory.GROUPS_GET_UPDATE_DELETE,
        )
        return resp.decode(Group), resp

    def update_with_profile(self, group_id: str, profile: GroupProfile) -> Tuple[Group, OktaResponse]:
        """Alias of ``update``."""
        return self.update(group_id, profile)

    def update_with_group(self, group_id: str, group: Group) -> Tuple[Group, OktaResponse]:
        """Replace a group's profile with the one carried by ``group``."""
        return self.update(group_id, group.profile)

    def remove(self, group_id: str) -> OktaResponse:
        """Delete a group."""
        resp = self.client.delete(_group_path(group_id), category=RateLimitCategory.GROUPS_GET_UPDATE_DELETE)
        logger.info("Group %s removed", group_id)
        return resp

    def list_members(
        self, group_id: str, cancel_event: Optional[threading.Event] = None
    ) -> Tuple[List[User], OktaResponse]:
        """Fetch every user who is a member of the group."""
        path = f"{_group_path(group_id)}/users?" + urlencode({"limit": MEMBERS_PAGE_SIZE})
        return paginate(self.client, path, User, RateLimitCategory.CORE, cancel_event)


def _group_path(group_id: str) -> str:
    return f"groups/{quote(group_id, safe='')}"
