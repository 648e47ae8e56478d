"""
tests/test_health.py -- Integration tests for GET /api/v1/health.

Covers:
  - 200 response with status, version, and components fields
  - components.database reports 'ok' against a live engine, 'error' against a dead one
  - No authentication required
"""

from __future__ import annotations

from sqlalchemy import create_engine

from asgi import app


def test_health_returns_200_with_components(api_client):
    """Health endpoint returns 200 with status, version, and components."""
    resp = api_client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["version"]
    assert data["components"] == {"app": "ok", "database": "ok"}


def test_health_no_auth_required(api_client):
    """Health endpoint is accessible without the auth-token cookie."""
    assert "auth-token" not in api_client.cookies
    resp = api_client.get("/api/v1/health")
    assert resp.status_code == 200


def test_health_reports_database_error(api_client):
    """An engine that cannot connect turns the database component to 'error' without failing the health check."""
    live = app.state.engine
    app.state.engine = create_engine("sqlite:////nonexistent-dir/fintrack/health.db")
    try:
        resp = api_client.get("/api/v1/health")
    finally:
        app.state.engine = live
    assert resp.status_code == 200
    assert resp.json()["components"]["database"] == "error"
