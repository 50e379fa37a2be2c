"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import UserAlreadyExistsError
from app.db.tables import UserRow
from app.models.user import NewUser, User, UserRole, check_patch

_LIKE_ESCAPE = "\\"


def _escape_like(value: str) -> str:
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


class PgUserRepo:
    """Satisfies the UserRepo Protocol using SQLAlchemy.

    Each method issues a single statement on the request-scoped session.
    Writes that can hit the unique email index run inside a SAVEPOINT so
    a conflict leaves the outer transaction usable.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, new_user: NewUser) -> User:
        row = UserRow(
            id=uuid4(),
            first_name=new_user.first_name,
            last_name=new_user.last_name,
            email=new_user.email,
            city=new_user.city,
            role=new_user.role or UserRole.USER,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError:
            raise UserAlreadyExistsError(new_user.email) from None
        return _row_to_user(row)

    async def get_by_id(self, user_id: UUID) -> User | None:
        stmt = select(UserRow).where(UserRow.id == user_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_user(row)

    async def list_all(self) -> list[User]:
        rows = (await self._session.execute(select(UserRow))).scalars().all()
        return [_row_to_user(r) for r in rows]

    async def list_by_city(self, city: str) -> list[User]:
        pattern = f"%{_escape_like(city)}%"
        stmt = select(UserRow).where(UserRow.city.ilike(pattern, escape=_LIKE_ESCAPE))
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_user(r) for r in rows]

    async def list_by_role(self, role: UserRole) -> list[User]:
        stmt = select(UserRow).where(UserRow.role == role)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_user(r) for r in rows]

    async def update(self, user_id: UUID, patch: dict[str, Any]) -> User | None:
        check_patch(patch)
        if not patch:
            return await self.get_by_id(user_id)

        # UPDATE ... RETURNING: write and read-back in one statement.
        stmt = (
            update(UserRow)
            .where(UserRow.id == user_id)
            .values(**patch)
            .returning(UserRow)
        )
        try:
            async with self._session.begin_nested():
                row = (await self._session.execute(stmt)).scalar_one_or_none()
        except IntegrityError:
            # Only the unique email index can clash with another row.
            if "email" not in patch:
                raise
            raise UserAlreadyExistsError(patch["email"]) from None
        if row is None:
            return None
        return _row_to_user(row)

    async def delete(self, user_id: UUID) -> bool:
        stmt = delete(UserRow).where(UserRow.id == user_id)
        result = await self._session.execute(stmt)
        return result.rowcount > 0


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        city=row.city,
        role=UserRole(row.role),
    )
