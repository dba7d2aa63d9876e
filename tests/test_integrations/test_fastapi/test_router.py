"""Tests for the FastAPI simulator router (create_app / create_router)."""

from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from authz_simulator._accountability import Accountability
from authz_simulator.config._config import SimulatorConfig
from authz_simulator.executors._directory import SqlUserDirectory
from authz_simulator.executors._items import SqlItemsExecutor
from authz_simulator.integrations.fastapi._dependencies import (
    get_accountability,
    get_directory,
    get_executor,
)
from authz_simulator.integrations.fastapi._errors import install_error_handlers
from authz_simulator.integrations.fastapi._router import create_app, create_router
from authz_simulator.testing._actors import make_admin, make_user
from authz_simulator.testing._fakes import ScriptedExecutor

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class _UpstreamConflict(Exception):
    status = 409

    def __init__(self) -> None:
        super().__init__("conflict")
        self.extensions = {"reason": "Item is locked"}


@pytest.fixture()
def client(items_executor: SqlItemsExecutor, directory: SqlUserDirectory) -> TestClient:
    app = create_app(
        executor=items_executor,
        directory=directory,
        accountability_provider=lambda: make_admin(),
    )
    return TestClient(app)


@pytest.fixture()
def user_client(items_executor: SqlItemsExecutor) -> TestClient:
    app = create_app(executor=items_executor, accountability_provider=lambda: make_user())
    return TestClient(app)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestHealth:
    def test_default_name(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == {"name": "Policy/Permission Simulator Endpoint", "status": "ok"}

    def test_configured_name_and_prefix(self, items_executor: SqlItemsExecutor) -> None:
        app = create_app(
            executor=items_executor,
            accountability_provider=lambda: make_admin(),
            config=SimulatorConfig(name="Simulator"),
            prefix="/permission-simulator",
        )
        response = TestClient(app).get("/permission-simulator/")
        assert response.json()["name"] == "Simulator"


class TestCallerCheck:
    def test_non_admin_forbidden(self, user_client: TestClient) -> None:
        response = user_client.post("/simulate", json={"mode": "public", "collection": "posts"})
        assert response.status_code == 403
        assert response.json() == {"detail": "Admin access required."}

    def test_non_admin_forbidden_before_body_validation(self, user_client: TestClient) -> None:
        response = user_client.post("/simulate", content=b"{not json")
        assert response.status_code == 403


class TestValidation:
    def test_invalid_json(self, client: TestClient) -> None:
        response = client.post(
            "/simulate", content=b"{not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400

    def test_missing_collection(self, client: TestClient) -> None:
        response = client.post("/simulate", json={"mode": "public"})
        assert response.status_code == 400
        assert response.json()["field"] == "collection"

    def test_empty_body(self, client: TestClient) -> None:
        response = client.post("/simulate")
        assert response.status_code == 400
        assert response.json()["field"] == "collection"

    def test_unknown_mode(self, client: TestClient) -> None:
        response = client.post("/simulate", json={"mode": "root", "collection": "posts"})
        assert response.status_code == 400
        assert response.json()["field"] == "mode"

    def test_role_mode_without_role(self, client: TestClient) -> None:
        response = client.post("/simulate", json={"mode": "role", "collection": "posts"})
        assert response.status_code == 400
        assert response.json()["field"] == "roleId"

    def test_unknown_user(self, client: TestClient) -> None:
        response = client.post(
            "/simulate", json={"mode": "user", "collection": "posts", "userId": "ghost"}
        )
        assert response.status_code == 400
        assert response.json()["field"] == "userId"

    def test_malformed_query_string(self, client: TestClient) -> None:
        response = client.post(
            "/simulate", json={"mode": "public", "collection": "posts", "query": "{oops"}
        )
        assert response.status_code == 400
        assert response.json()["field"] == "query"

    @pytest.mark.parametrize(
        "condition",
        [{"id": {"_in": 5}}, {"title": {"_eq": {"a": 1}}}, {"id": {"_null": "no"}}],
    )
    def test_malformed_filter_operand(self, client: TestClient, condition: dict) -> None:
        response = client.post(
            "/simulate",
            json={
                "mode": "requester",
                "collection": "posts",
                "query": {"fields": ["id"], "filter": condition},
            },
        )
        assert response.status_code == 400
        assert response.json()["field"] == "query"
        assert "SELECT" not in response.json()["detail"]


class TestSimulate:
    def test_user_mode_recovers_from_forbidden_field(self, client: TestClient) -> None:
        response = client.post(
            "/simulate",
            json={
                "mode": "user",
                "collection": "posts",
                "userId": "u1",
                "query": {"fields": ["title", "secret_note"], "limit": 1},
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["mode"] == "user"
        assert body["collection"] == "posts"
        assert body["query"] == {"fields": ["title"], "limit": 1}
        assert len(body["warnings"]) == 1
        assert "'secret_note'" in body["warnings"][0]
        assert body["simulated"] == {"items": [{"title": "Hello"}]}
        assert body["requester"] == {"items": [{"title": "Hello", "secret_note": "launch codes"}]}
        assert [(h["field"], h["type"]) for h in body["hints"]] == [("secret_note", "missing")]

    def test_public_without_baseline(self, client: TestClient) -> None:
        response = client.post(
            "/simulate",
            json={
                "mode": "public",
                "collection": "posts",
                "query": {"fields": ["id", "title"], "sort": ["-id"], "limit": 2},
                "includeRequester": False,
            },
        )
        body = response.json()
        assert response.status_code == 200
        assert "requester" not in body
        assert body["hints"] == []
        assert body["simulated"]["items"] == [
            {"id": 3, "title": "Later"},
            {"id": 2, "title": "Draft"},
        ]

    def test_role_mode_warns(self, client: TestClient) -> None:
        response = client.post(
            "/simulate",
            json={
                "mode": "role",
                "collection": "posts",
                "roleId": "viewer",
                "query": {"fields": ["id", "status"], "limit": 1},
            },
        )
        assert response.status_code == 200
        assert "Role-only simulation" in response.json()["warnings"][0]

    def test_suspended_user_warns(self, client: TestClient) -> None:
        response = client.post(
            "/simulate",
            json={
                "mode": "user",
                "collection": "posts",
                "userId": "u3",
                "query": {"fields": ["title"], "limit": 1},
            },
        )
        assert response.status_code == 200
        assert any("'suspended'" in w for w in response.json()["warnings"])

    def test_unrecoverable_denial_keeps_status(self, client: TestClient) -> None:
        response = client.post(
            "/simulate",
            json={"mode": "public", "collection": "posts", "query": {"fields": ["*"]}},
        )
        assert response.status_code == 403
        assert "don't have permission" in response.json()["detail"]

    def test_unknown_collection(self, client: TestClient) -> None:
        response = client.post("/simulate", json={"mode": "requester", "collection": "nope"})
        assert response.status_code == 403

    def test_request_id_logged(self, client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="authz_simulator"):
            client.post(
                "/simulate",
                json={"mode": "public", "collection": "posts", "query": {"fields": ["id"]}},
                headers={"x-request-id": "req-42"},
            )
        assert "request=req-42" in caplog.text


class TestForeignExecutorErrors:
    def test_wrapped_with_status_and_reason(self) -> None:
        executor = ScriptedExecutor([_UpstreamConflict()])
        app = create_app(executor=executor, accountability_provider=lambda: make_admin())
        response = TestClient(app).post("/simulate", json={"mode": "public", "collection": "x"})
        assert response.status_code == 409
        assert response.json() == {"detail": "Item is locked"}

    def test_plain_exception_is_500(self) -> None:
        executor = ScriptedExecutor([RuntimeError("socket closed")])
        app = create_app(executor=executor, accountability_provider=lambda: make_admin())
        response = TestClient(app).post("/simulate", json={"mode": "public", "collection": "x"})
        assert response.status_code == 500
        assert response.json() == {"detail": "socket closed"}


class TestCreateRouter:
    def test_manual_wiring(self) -> None:
        executor = ScriptedExecutor([[{"id": 1}], [{"id": 1, "title": "A"}]])
        caller = Accountability(user="root", role="admin", admin=True, app=True)

        app = FastAPI()
        app.include_router(create_router(), prefix="/sim")
        install_error_handlers(app)
        app.dependency_overrides[get_accountability] = lambda: caller
        app.dependency_overrides[get_executor] = lambda: executor
        app.dependency_overrides[get_directory] = lambda: None

        response = TestClient(app).post(
            "/sim/simulate", json={"mode": "public", "collection": "posts"}
        )
        assert response.status_code == 200
        assert response.json()["hints"][0]["field"] == "title"
        assert executor.calls[1].accountability == caller
