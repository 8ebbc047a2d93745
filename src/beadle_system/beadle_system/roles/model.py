from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RoleType


@dataclass(frozen=True)
class RoleDefinition:
    """Seed entry for the role catalog (no surrogate key yet)."""

    role_name: str
    role_type: RoleType
    display_name: str
    permission_level: int
    description: str = ""
    parent_role: Optional[str] = None


@dataclass(frozen=True)
class Role:
    role_id: int
    role_name: str
    role_type: RoleType
    display_name: str
    description: str
    permission_level: int
    parent_role: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "role_id": self.role_id,
            "role_name": self.role_name,
            "role_type": self.role_type.value,
            "display_name": self.display_name,
            "description": self.description,
            "permission_level": self.permission_level,
            "parent_role": self.parent_role,
        }


@dataclass(frozen=True)
class RoleAssignment:
    user_id: int
    role: Role
    assigned_at: datetime
    assigned_by: Optional[int] = None


@dataclass(frozen=True)
class RoleMutationResult:
    """Outcome of a role mutation, rendered directly by callers."""

    success: bool
    message: str = ""
    error: Optional[str] = None
    missing_role: Optional[str] = None

    @classmethod
    def ok(cls, message: str) -> "RoleMutationResult":
        return cls(success=True, message=message)

    @classmethod
    def failed(cls, error: str, *, missing_role: Optional[str] = None) -> "RoleMutationResult":
        return cls(success=False, error=error, missing_role=missing_role)

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "message": self.message}
        return {"success": False, "error": self.error}
