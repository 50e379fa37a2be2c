"""The users API running on PgUserRepo (SQLite stands in for PostgreSQL)."""

from __future__ import annotations

import uuid
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from app.api.dependencies import memory_user_repo
from app.db import engine as db
from app.db.engine import build_session_factory
from app.main import app
from tests.conftest import user_payload


def test_scenario_against_sql_store(sql_client: TestClient) -> None:
    resp = sql_client.post("/users", json=user_payload())
    assert resp.status_code == 201
    created = resp.json()
    assert created["role"] == "user"

    by_city = sql_client.get("/users/city/bos")
    assert by_city.status_code == 200
    assert by_city.json() == [created]

    updated = sql_client.patch(f"/users/{created['id']}", json={"city": "Denver"})
    assert updated.status_code == 200
    assert updated.json() == {**created, "city": "Denver"}

    assert sql_client.delete(f"/users/{created['id']}").status_code == 204
    assert sql_client.get("/users").json() == []

    # Nothing leaked into the in-memory fallback.
    assert memory_user_repo._by_id == {}


def test_duplicate_email_is_409_and_transaction_survives(
    sql_client: TestClient,
) -> None:
    assert sql_client.post("/users", json=user_payload()).status_code == 201
    resp = sql_client.post("/users", json=user_payload(firstName="Twin"))
    assert resp.status_code == 409

    users = sql_client.get("/users").json()
    assert [u["firstName"] for u in users] == ["Ann"]


def test_filters_and_not_found(sql_client: TestClient) -> None:
    sql_client.post("/users", json=user_payload(email="a@x.com", city="New York"))
    sql_client.post(
        "/users", json=user_payload(email="b@x.com", city="Paris", role="admin")
    )

    assert len(sql_client.get("/users/city/new").json()) == 1
    assert sql_client.get("/users/city/rome").status_code == 404
    assert [u["email"] for u in sql_client.get("/users/role/admin").json()] == [
        "b@x.com"
    ]


def test_unknown_ids_are_404(sql_client: TestClient) -> None:
    missing = uuid.uuid4()
    assert sql_client.patch(f"/users/{missing}", json={"city": "X"}).status_code == 404
    assert sql_client.delete(f"/users/{missing}").status_code == 404


def test_unreachable_store_returns_503(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    # Parent directory does not exist, so sqlite cannot open the file.
    url = f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'users.db'}"
    engine = create_async_engine(url, poolclass=NullPool)
    monkeypatch.setattr(db, "async_session_factory", build_session_factory(engine))

    client = TestClient(app)
    resp = client.get("/users")
    assert resp.status_code == 503
    assert resp.json() == {"detail": "user store unavailable"}
