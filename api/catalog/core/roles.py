"""User role codes and normalization helpers."""
from __future__ import annotations

import enum
from typing import Optional, Dict, TYPE_CHECKING

if TYPE_CHECKING:
    from catalog.models.user import User


class RoleCode(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


ROLE_ALIASES: Dict[str, str] = {
    "user": RoleCode.USER.value,
    "admin": RoleCode.ADMIN.value,
    "administrator": RoleCode.ADMIN.value,
}


def normalize_role_code(value: str | None) -> Optional[str]:
    if not value:
        return None
    normalized = value.strip().lower()
    if not normalized:
        return None
    return ROLE_ALIASES.get(normalized)


def is_admin(user: "User | None") -> bool:
    """Admins are the only users allowed to mutate the catalog."""
    if user is None:
        return False
    return normalize_role_code(user.role) == RoleCode.ADMIN.value
