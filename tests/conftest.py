from __future__ import annotations

import os
from collections.abc import AsyncIterator
from pathlib import Path

# Settings are read once at import; pin them before importing the app so a
# developer's DATABASE_URL never points the suite at a real database.
os.environ["APP_ENV"] = "test"
for _name in ("DATABASE_URL", "DB_HOST", "DB_NAME"):
    os.environ.pop(_name, None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

from app.api.dependencies import memory_user_repo  # noqa: E402
from app.db import engine as db  # noqa: E402
from app.db.engine import Base, build_session_factory  # noqa: E402
from app.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def reset_users_state() -> None:
    memory_user_repo.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def user_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "firstName": "Ann",
        "lastName": "Lee",
        "email": "ann@x.com",
        "city": "Boston",
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# SQLite-backed SQLAlchemy fixtures
# ---------------------------------------------------------------------------


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy drive BEGIN itself so SAVEPOINT works on (aio)sqlite."""

    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection, _connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")


def create_sqlite_schema(path: Path) -> None:
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()


@pytest.fixture
async def db_session(tmp_path: Path) -> AsyncIterator[AsyncSession]:
    """A session on a fresh SQLite database with the users table created."""
    path = tmp_path / "users.db"
    create_sqlite_schema(path)

    engine = db.build_engine(f"sqlite+aiosqlite:///{path}")
    enable_sqlite_savepoints(engine)
    factory = build_session_factory(engine)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def sql_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    """TestClient whose users API runs on PgUserRepo over SQLite.

    NullPool because TestClient drives each request on its own event loop.
    """
    path = tmp_path / "api.db"
    create_sqlite_schema(path)

    engine = create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
    enable_sqlite_savepoints(engine)
    monkeypatch.setattr(db, "async_session_factory", build_session_factory(engine))
    return TestClient(app)
