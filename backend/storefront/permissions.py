# backend/storefront/permissions.py
"""
Role definitions and capability checks.

Roles are a closed set. There is deliberately no ordering between them:
every call site spells out the exact set of roles it accepts, e.g.
MANAGER_OR_ADMIN rather than "manager and above".
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    USER = "user"
    MANAGER = "manager"
    ADMIN = "admin"

    @classmethod
    def values(cls) -> list[str]:
        return [r.value for r in cls]

    @classmethod
    def parse(cls, value: str) -> "Role | None":
        try:
            return cls(value)
        except ValueError:
            return None


ADMIN_ONLY = frozenset({Role.ADMIN})
MANAGER_OR_ADMIN = frozenset({Role.MANAGER, Role.ADMIN})


@dataclass(frozen=True)
class Principal:
    """The authenticated identity resolved from a bearer token for one request."""
    id: str
    email: str
    role: Role
    is_active: bool
    name: str | None = None


def has_role(principal_role: Role | str, required_roles: frozenset[Role] | set[Role]) -> bool:
    """Pure membership test; unknown role strings never match."""
    role = principal_role if isinstance(principal_role, Role) else Role.parse(principal_role)
    return role is not None and role in required_roles


def can_access(principal: Principal, owner_id: str | None) -> bool:
    """Owner of the resource, or any admin."""
    if principal.role == Role.ADMIN:
        return True
    return owner_id is not None and principal.id == owner_id
