"""Permission bitmask and the gate every privileged operation passes through."""
from dataclasses import dataclass
from enum import Enum
from typing import List

from sqlalchemy.orm import Session

from catalog_service import crud
from catalog_service.core.exceptions import (
    DatabaseError, Forbidden, InternalServerError, UnknownPermission
)
from catalog_service.core.logging_config import logger
from catalog_service.models import User


class Permission(Enum):
    """One bit per privileged action."""
    BOOK_ADD = 1 << 0
    BOOK_UPDATE = 1 << 1
    BOOK_DELETE = 1 << 2
    USER_ADD = 1 << 3
    USER_UPDATE = 1 << 4
    USER_DELETE = 1 << 5
    PERMISSIONS_UPDATE = 1 << 6


ALL_PERMISSION_BITS = sum(p.value for p in Permission)


@dataclass(frozen=True)
class PermissionMask:
    """Immutable set of granted actions backed by an integer bitmask."""
    bits: int = 0

    @classmethod
    def of(cls, *actions: Permission) -> "PermissionMask":
        return cls().grant(*actions)

    @classmethod
    def from_bits(cls, bits: int) -> "PermissionMask":
        """Build a mask from stored or client-supplied bits, rejecting unknown ones."""
        if bits < 0 or bits & ~ALL_PERMISSION_BITS:
            raise UnknownPermission()
        return cls(bits)

    @classmethod
    def everything(cls) -> "PermissionMask":
        return cls(ALL_PERMISSION_BITS)

    def allows(self, action: Permission) -> bool:
        return (self.bits & action.value) != 0

    def union(self, other: "PermissionMask") -> "PermissionMask":
        return PermissionMask(self.bits | other.bits)

    def grant(self, *actions: Permission) -> "PermissionMask":
        bits = self.bits
        for action in actions:
            bits |= action.value
        return PermissionMask(bits)

    def revoke(self, *actions: Permission) -> "PermissionMask":
        bits = self.bits
        for action in actions:
            bits &= ~action.value
        return PermissionMask(bits)

    def actions(self) -> List[Permission]:
        return [p for p in Permission if self.allows(p)]


def load_permissions(db: Session, identity: User) -> PermissionMask:
    """Load the identity's permission set.

    Every identity owns exactly one set, so a missing or unreadable set is an
    integrity failure rather than a denial.
    """
    try:
        permission_set = crud.get_permission_set(db, identity)
    except DatabaseError:
        raise InternalServerError()
    if permission_set is None:
        logger.warning(
            f"Failed to locate expected permission set: user {identity.id} -> {identity.permission_id}"
        )
        raise InternalServerError()
    return PermissionMask(permission_set.granted_actions)


def require_permission(db: Session, identity: User, action: Permission) -> None:
    """Raise Forbidden unless the identity has been granted action."""
    if not load_permissions(db, identity).allows(action):
        logger.info(f"Permission denied: user {identity.id} lacks {action.name}")
        raise Forbidden()
