from __future__ import annotations

from enum import Enum


class RoleType(str, Enum):
    """Role category stored in the catalog."""

    PRIMARY = "primary"
    SUB = "sub"


class MatchMode(str, Enum):
    """How a list of required roles is matched against the held roles."""

    ANY = "any"
    ALL = "all"


class DenyReason(str, Enum):
    NOT_AUTHENTICATED = "not authenticated"
    INSUFFICIENT_PERMISSION = "insufficient permission"


class AnnouncementPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
