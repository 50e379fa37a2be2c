"""Demo: create → filter → update → delete a user through the HTTP API.

Uses FastAPI TestClient, so no server needs to be running. Without a
database configured, requests hit the in-memory repository.

Run with:
    python scripts/demo_users_flow.py
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.main import app


def main() -> None:
    client = TestClient(app)

    # ── Step 1: POST /users ─────────────────────────────────────────
    r = client.post(
        "/users",
        json={
            "firstName": "Ann",
            "lastName": "Lee",
            "email": "ann@x.com",
            "city": "Boston",
        },
    )
    user = r.json()
    print(f"1. POST   /users              → {r.status_code}  id={user['id']} role={user['role']}")

    # ── Step 2: duplicate email ─────────────────────────────────────
    r = client.post(
        "/users",
        json={"firstName": "Ann", "lastName": "Other", "email": "ann@x.com"},
    )
    print(f"2. POST   /users (duplicate)  → {r.status_code}  {r.json()['detail']}")

    # ── Step 3: GET /users/city/bos ─────────────────────────────────
    r = client.get("/users/city/bos")
    print(f"3. GET    /users/city/bos     → {r.status_code}  {[u['email'] for u in r.json()]}")

    # ── Step 4: GET /users/role/admin ───────────────────────────────
    r = client.get("/users/role/admin")
    print(f"4. GET    /users/role/admin   → {r.status_code}  {r.json()['detail']}")

    # ── Step 5: PATCH /users/{id} ───────────────────────────────────
    r = client.patch(f"/users/{user['id']}", json={"city": "Denver"})
    body = r.json()
    print(f"5. PATCH  /users/{{id}}         → {r.status_code}  city={body['city']} firstName={body['firstName']}")

    # ── Step 6: DELETE /users/{id} ──────────────────────────────────
    r = client.delete(f"/users/{user['id']}")
    print(f"6. DELETE /users/{{id}}         → {r.status_code}")

    r = client.delete(f"/users/{user['id']}")
    print(f"7. DELETE /users/{{id}} (again) → {r.status_code}")

    r = client.get("/users")
    print(f"8. GET    /users              → {r.status_code}  {len(r.json())} user(s)")


if __name__ == "__main__":
    main()
