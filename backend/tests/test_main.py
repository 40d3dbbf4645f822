"""Tests for the FastAPI main application factory and health checks.

This module validates that:
    - The FastAPI app is correctly instantiated via main.create_app,
    - OpenAPI metadata (title, version) matches the project contract,
    - The schools router and the image mount are registered,
    - The /health endpoint returns the expected response,
    - Shutdown closes the shared database connection.
"""

from __future__ import annotations

from typing import cast

import pytest
from fastapi import testclient

from school_directory import main
from school_directory.db import connection, database


def test_create_app() -> None:
    """Test that create_app returns a configured FastAPI instance."""
    app = main.create_app()
    assert app is not None
    assert app.title == "School Directory"
    assert app.version == "0.1.0"


def test_health_endpoint() -> None:
    """Test the health check endpoint returns ok status."""
    app = main.create_app()
    client = testclient.TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_app_includes_routes() -> None:
    """Test that the schools routes and image mount are registered."""
    app = main.create_app()
    routes: list[str] = [
        cast(str, getattr(route, "path", ""))
        for route in app.routes  # type: ignore[attr-defined]
        if hasattr(route, "path")
    ]
    assert "/health" in routes
    assert "/api/schools" in routes
    assert "/schoolImages" in routes


def test_shutdown_resets_connection_manager(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that leaving the app lifespan closes the shared connection."""
    calls: list[str] = []
    monkeypatch.setattr(
        connection,
        "reset_connection_manager",
        lambda: calls.append("manager"),
    )
    monkeypatch.setattr(
        database,
        "reset_school_repository",
        lambda: calls.append("repository"),
    )
    app = main.create_app()
    with testclient.TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert calls == []
    assert calls == ["repository", "manager"]


def test_restart_rebuilds_repository_on_new_manager(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that a second app run does not reuse the closed manager."""
    managers: list[object] = []

    def fresh_manager() -> object:
        managers.append(object())
        return managers[-1]

    monkeypatch.setattr(connection, "get_connection_manager", fresh_manager)
    monkeypatch.setattr(connection, "reset_connection_manager", lambda: None)
    monkeypatch.setattr(database, "_repository", None)

    for _ in range(2):
        with testclient.TestClient(main.create_app()):
            repo = database.get_school_repository()
            assert isinstance(repo, database.PostgresSchoolRepository)
            assert repo.manager is managers[-1]

    assert len(managers) == 2
    assert database._repository is None
