from __future__ import annotations

from dataclasses import replace
from typing import Any, Protocol
from uuid import UUID, uuid4

from app.core.errors import UserAlreadyExistsError
from app.models.user import NewUser, User, UserRole, check_patch


class UserRepo(Protocol):
    async def add(self, new_user: NewUser) -> User: ...
    async def get_by_id(self, user_id: UUID) -> User | None: ...
    async def list_all(self) -> list[User]: ...
    async def list_by_city(self, city: str) -> list[User]: ...
    async def list_by_role(self, role: UserRole) -> list[User]: ...
    async def update(self, user_id: UUID, patch: dict[str, Any]) -> User | None: ...
    async def delete(self, user_id: UUID) -> bool: ...


class InMemoryUserRepo:
    """Process-local UserRepo, used when no database is configured."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, User] = {}
        self._id_by_email: dict[str, UUID] = {}

    async def add(self, new_user: NewUser) -> User:
        if new_user.email in self._id_by_email:
            raise UserAlreadyExistsError(new_user.email)

        user = User(
            id=uuid4(),
            first_name=new_user.first_name,
            last_name=new_user.last_name,
            email=new_user.email,
            city=new_user.city,
            role=new_user.role or UserRole.USER,
        )
        self._by_id[user.id] = user
        self._id_by_email[user.email] = user.id
        return user

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._by_id.get(user_id)

    async def list_all(self) -> list[User]:
        return list(self._by_id.values())

    async def list_by_city(self, city: str) -> list[User]:
        needle = city.casefold()
        return [
            u
            for u in self._by_id.values()
            if u.city is not None and needle in u.city.casefold()
        ]

    async def list_by_role(self, role: UserRole) -> list[User]:
        return [u for u in self._by_id.values() if u.role == role]

    async def update(self, user_id: UUID, patch: dict[str, Any]) -> User | None:
        check_patch(patch)
        current = self._by_id.get(user_id)
        if current is None:
            return None

        new_email = patch.get("email", current.email)
        if new_email != current.email and new_email in self._id_by_email:
            raise UserAlreadyExistsError(new_email)

        updated = replace(current, **patch)
        if updated.email != current.email:
            del self._id_by_email[current.email]
            self._id_by_email[updated.email] = user_id
        self._by_id[user_id] = updated
        return updated

    async def delete(self, user_id: UUID) -> bool:
        user = self._by_id.pop(user_id, None)
        if user is None:
            return False
        del self._id_by_email[user.email]
        return True

    def clear(self) -> None:
        self._by_id.clear()
        self._id_by_email.clear()
