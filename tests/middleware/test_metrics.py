"""Prometheus metrics middleware.

Counters live in the global registry and never reset, so every test
asserts on the delta around the request it makes.
"""

from __future__ import annotations

import uuid

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import user_payload


def _get_sample(name: str, labels: dict | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/users", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/users")
    assert _get_sample("http_requests_total", labels) - before == 1


def test_endpoint_label_uses_route_template(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/users/{user_id}", "status_code": "404"}
    before = _get_sample("http_requests_total", labels)
    client.get(f"/users/{uuid.uuid4()}")
    client.get(f"/users/{uuid.uuid4()}")
    assert _get_sample("http_requests_total", labels) - before == 2


def test_unknown_path_labelled_unmatched(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "unmatched", "status_code": "404"}
    before = _get_sample("http_requests_total", labels)
    client.get("/nope/nothing-here")
    assert _get_sample("http_requests_total", labels) - before == 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health"}
    before = _get_sample("http_request_duration_seconds_count", labels)
    client.get("/health")
    assert _get_sample("http_request_duration_seconds_count", labels) - before == 1


def test_user_operation_outcomes_recorded(client: TestClient) -> None:
    ok = {"operation": "create", "outcome": "ok"}
    conflict = {"operation": "create", "outcome": "conflict"}
    ok_before = _get_sample("user_operations_total", ok)
    conflict_before = _get_sample("user_operations_total", conflict)

    client.post("/users", json=user_payload())
    client.post("/users", json=user_payload())

    assert _get_sample("user_operations_total", ok) - ok_before == 1
    assert _get_sample("user_operations_total", conflict) - conflict_before == 1


def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "user_operations_total" in resp.text


def test_active_requests_gauge_exposed(client: TestClient) -> None:
    resp = client.get("/metrics")
    assert "http_requests_active" in resp.text
    # Back to idle once the request that was counted has finished.
    client.get("/health")
    assert _get_sample("http_requests_active") == 0


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before
