"""Okta API client library.

This package provides a modular, testable interface to the Okta groups and users APIs.

Architecture:
- client.py: HTTP client with authentication, rate limiting and 429 retry
- rate_limit.py: Rate-limit categories and quota tracking
- models.py: Group, GroupProfile and User representations
- pagination.py: Follows rel="next" links to drain list endpoints
- groups.py: Group CRUD and membership listing
- users.py: User lookup, listing and delta profile updates
- exceptions.py: Typed exceptions for error handling

Usage:
    from okta_admin.core.okta import OktaClient, GroupService

    client = OktaClient("https://example.okta.com", "00abc...")
    groups, _ = GroupService(client).list_filter('type eq "OKTA_GROUP"')
"""
from .client import (
    OktaClient,
    OktaRequest,
    OktaResponse,
    Pagination,
)
from .exceptions import (
    OktaError,
    ConfigurationError,
    OktaRequestError,
    OktaAPIError,
    OktaDecodeError,
    RequestCancelledError,
)
from .models import (
    Group,
    GroupProfile,
    User,
)
from .pagination import iter_pages, paginate
from .rate_limit import RateLimit, RateLimitCategory, RateLimitTracker
from .groups import GroupService
from .users import UserService

__all__ = [
    # Client
    "OktaClient",
    "OktaRequest",
    "OktaResponse",
    "Pagination",

    # Exceptions
    "OktaError",
    "ConfigurationError",
    "OktaRequestError",
    "OktaAPIError",
    "OktaDecodeError",
    "RequestCancelledError",

    # Models
    "Group",
    "GroupProfile",
    "User",

    # Pagination
    "iter_pages",
    "paginate",

    # Rate limiting
    "RateLimit",
    "RateLimitCategory",
    "RateLimitTracker",

    # Services
    "GroupService",
    "UserService",
]
