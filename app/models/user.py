from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


@dataclass(frozen=True, slots=True)
class NewUser:
    """A validated creation record. No id yet; role may still be unset."""

    first_name: str
    last_name: str
    email: str
    city: str | None = None
    role: UserRole | None = None


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    first_name: str
    last_name: str
    email: str
    city: str | None = None
    role: UserRole = UserRole.USER


# Fields a patch may touch. ``id`` is never in here.
UPDATABLE_FIELDS = frozenset({"first_name", "last_name", "email", "city", "role"})


def check_patch(patch: dict[str, object]) -> None:
    """Raise ValueError if the patch names a field outside UPDATABLE_FIELDS."""
    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"cannot update fields: {sorted(unknown)}")
