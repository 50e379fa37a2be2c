from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from app.core.errors import UserAlreadyExistsError, UserNotFoundError
from app.core.metrics import USER_OPERATIONS
from app.models.user import NewUser, User, UserRole
from app.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)


class UsersService:
    """User CRUD on top of a UserRepo.

    Empty results for filtered listings, and ids that match nothing, are
    turned into UserNotFoundError here; the repo only reports what it found.
    """

    def __init__(self, repo: UserRepo) -> None:
        self._repo = repo

    async def create(self, new_user: NewUser) -> User:
        try:
            user = await self._repo.add(new_user)
        except UserAlreadyExistsError:
            USER_OPERATIONS.labels(operation="create", outcome="conflict").inc()
            logger.warning("Rejected duplicate email=%s", new_user.email)
            raise

        USER_OPERATIONS.labels(operation="create", outcome="ok").inc()
        logger.info(
            "Created user id=%s email=%s role=%s", user.id, user.email, user.role.value
        )
        return user

    async def get(self, user_id: UUID) -> User:
        user = await self._repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    async def list_all(self) -> list[User]:
        return await self._repo.list_all()

    async def list_by_city(self, city: str) -> list[User]:
        users = await self._repo.list_by_city(city)
        if not users:
            USER_OPERATIONS.labels(operation="list_by_city", outcome="not_found").inc()
            raise UserNotFoundError(f"No users found in city: {city}")
        return users

    async def list_by_role(self, role: UserRole) -> list[User]:
        users = await self._repo.list_by_role(role)
        if not users:
            USER_OPERATIONS.labels(operation="list_by_role", outcome="not_found").inc()
            raise UserNotFoundError(f"No users found with role {role.value}")
        return users

    async def update(self, user_id: UUID, patch: dict[str, Any]) -> User:
        if not patch:
            return await self.get(user_id)

        try:
            user = await self._repo.update(user_id, patch)
        except UserAlreadyExistsError as e:
            USER_OPERATIONS.labels(operation="update", outcome="conflict").inc()
            logger.warning("Rejected update to duplicate email=%s id=%s", e.email, user_id)
            raise

        if user is None:
            USER_OPERATIONS.labels(operation="update", outcome="not_found").inc()
            logger.warning("Update of unknown user id=%s", user_id)
            raise UserNotFoundError(f"User {user_id} not found")

        USER_OPERATIONS.labels(operation="update", outcome="ok").inc()
        logger.info("Updated user id=%s fields=%s", user_id, sorted(patch))
        return user

    async def remove(self, user_id: UUID) -> None:
        # Unknown ids are reported, not treated as a successful no-op.
        if not await self._repo.delete(user_id):
            USER_OPERATIONS.labels(operation="remove", outcome="not_found").inc()
            logger.warning("Delete of unknown user id=%s", user_id)
            raise UserNotFoundError(f"User {user_id} not found")

        USER_OPERATIONS.labels(operation="remove", outcome="ok").inc()
        logger.info("Deleted user id=%s", user_id)
