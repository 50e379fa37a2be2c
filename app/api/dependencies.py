"""FastAPI dependencies that build the users request handler.

Construction is explicit: each request gets a UsersService wrapped
around a concrete repository. With a database configured that is a
PgUserRepo bound to a request-scoped session (commit on success,
rollback on error); otherwise the process-wide InMemoryUserRepo.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends

from app.db import engine as db
from app.repos.pg_user_repo import PgUserRepo
from app.repos.user_repo import InMemoryUserRepo, UserRepo
from app.services.users_service import UsersService

memory_user_repo = InMemoryUserRepo()


async def get_user_repo() -> AsyncGenerator[UserRepo, None]:
    if db.async_session_factory is None:
        yield memory_user_repo
        return

    async with db.session_scope() as session:
        yield PgUserRepo(session)


def get_users_service(
    repo: Annotated[UserRepo, Depends(get_user_repo)],
) -> UsersService:
    return UsersService(repo)
