"""Tests for the FastAPI exception handlers."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from neo_tenancy.api.exception_handlers import register_exception_handlers
from neo_tenancy.core.exceptions import (
    AuthorizationSyncError,
    ExpiredError,
    LimitExceededError,
    NeoTenancyError,
    NotFoundError,
)
from neo_tenancy.features.authz.entities.commands import SyncCommand
from neo_tenancy.features.authz.entities.scope import Scope


def _build_app(**kwargs) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app, **kwargs)

    @app.get("/not-found")
    async def not_found():
        raise NotFoundError("Organization", "org-1")

    @app.get("/limit")
    async def limit():
        raise LimitExceededError("Maximum number of teams (5) for this organization reached.", limit=5, current=5)

    @app.get("/expired")
    async def expired():
        raise ExpiredError("Invitation has expired")

    @app.get("/sync")
    async def sync():
        command = SyncCommand.assign_role("bob", "member", Scope.organization("org-1"), "alice")
        raise AuthorizationSyncError("add_member", [command], command, ConnectionError("down"))

    @app.get("/value")
    async def value():
        raise ValueError("bad input")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("database password is hunter2")

    return app


class TestExceptionHandlers:
    """Test status codes and response bodies."""

    @pytest.fixture
    def client(self):
        return TestClient(_build_app(), raise_server_exceptions=False)

    def test_not_found(self, client):
        response = client.get("/not-found")
        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "NOT_FOUND"
        assert error["message"] == "Organization 'org-1' not found"
        assert error["type"] == "NotFoundError"

    def test_limit_exceeded(self, client):
        response = client.get("/limit")
        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == "LIMIT_EXCEEDED"
        assert error["details"]["limit"] == 5

    def test_expired_is_gone(self, client):
        assert client.get("/expired").status_code == 410

    def test_sync_failure_is_bad_gateway(self, client):
        response = client.get("/sync")
        assert response.status_code == 502
        details = response.json()["error"]["details"]
        assert details["operation"] == "add_member"
        assert details["command_count"] == 1

    def test_value_error(self, client):
        response = client.get("/value")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ARGUMENT"

    def test_unexpected_error_hidden_in_production(self, client):
        response = client.get("/boom")
        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "INTERNAL_ERROR"
        assert "hunter2" not in error["message"]

    def test_unexpected_error_shown_outside_production(self):
        client = TestClient(_build_app(is_production=False), raise_server_exceptions=False)
        assert "hunter2" in client.get("/boom").json()["error"]["message"]

    def test_custom_formatter(self):
        def formatter(exc: NeoTenancyError):
            return {"code": exc.error_code}

        client = TestClient(_build_app(response_formatter=formatter), raise_server_exceptions=False)
        assert client.get("/not-found").json() == {"code": "NOT_FOUND"}
