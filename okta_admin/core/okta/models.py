"""Typed representations of Okta group and user resources.

Models are plain dataclasses decoded from API responses. Optional fields that
are absent (None or empty) are omitted when serializing, never defaulted.
Unknown keys such as ``_links`` and ``_embedded`` are ignored on decode.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an Okta ISO-8601 timestamp (``2015-02-06T10:11:28.000Z``)."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _require_mapping(data: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"{kind} must be a JSON object, got {type(data).__name__}")
    return data


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value not in (None, "", [])}


@dataclass
class GroupProfile:
    """Mutable, user-supplied part of a group.

    Updates always replace this object wholesale.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    sam_account_name: Optional[str] = None
    dn: Optional[str] = None
    windows_domain_qualified_name: Optional[str] = None
    external_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "GroupProfile":
        data = _require_mapping(data or {}, "Group profile")
        return cls(
            name=data.get("name"),
            description=data.get("description"),
            sam_account_name=data.get("samAccountName"),
            dn=data.get("dn"),
            windows_domain_qualified_name=data.get("windowsDomainQualifiedName"),
            external_id=data.get("externalId"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "name": self.name,
            "description": self.description,
            "samAccountName": self.sam_account_name,
            "dn": self.dn,
            "windowsDomainQualifiedName": self.windows_domain_qualified_name,
            "externalId": self.external_id,
        })


@dataclass
class Group:
    """An Okta group."""

    id: Optional[str] = None
    created: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    last_membership_updated: Optional[datetime] = None
    object_class: List[str] = field(default_factory=list)
    type: Optional[str] = None
    profile: GroupProfile = field(default_factory=GroupProfile)

    @classmethod
    def from_dict(cls, data: Any) -> "Group":
        data = _require_mapping(data, "Group")
        return cls(
            id=data.get("id"),
            created=parse_timestamp(data.get("created")),
            last_updated=parse_timestamp(data.get("lastUpdated")),
            last_membership_updated=parse_timestamp(data.get("lastMembershipUpdated")),
            object_class=list(data.get("objectClass") or []),
            type=data.get("type"),
            profile=GroupProfile.from_dict(data.get("profile")),
        )


@dataclass
class User:
    """An Okta user.

    ``profile`` and ``credentials`` are kept as raw JSON objects: user
    profiles are schema-extensible per org and are updated with delta
    semantics, so the client does not impose a shape on them.
    """

    id: Optional[str] = None
    status: Optional[str] = None
    created: Optional[datetime] = None
    activated: Optional[datetime] = None
    status_changed: Optional[datetime] = None
    last_login: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    password_changed: Optional[datetime] = None
    type: Optional[Dict[str, Any]] = None
    profile: Dict[str, Any] = field(default_factory=dict)
    credentials: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "User":
        data = _require_mapping(data, "User")
        return cls(
            id=data.get("id"),
            status=data.get("status"),
            created=parse_timestamp(data.get("created")),
            activated=parse_timestamp(data.get("activated")),
            status_changed=parse_timestamp(data.get("statusChanged")),
            last_login=parse_timestamp(data.get("lastLogin")),
            last_updated=parse_timestamp(data.get("lastUpdated")),
            password_changed=parse_timestamp(data.get("passwordChanged")),
            type=data.get("type"),
            profile=dict(data.get("profile") or {}),
            credentials=dict(data.get("credentials") or {}),
        )
