import inspect

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from policy_authz import (
    AuthzSettings,
    PolicyStore,
    create_authz_router,
    require_any_permission,
    require_permission,
)

POLICY = b"""
roles:
  viewer:
    permissions: [read]
  editor:
    permissions: [write]
    extends: [viewer]
  operator:
    permissions: [reload]
resources:
  reports:
    editor:
      users: [alice]
    viewer:
      groups: [staff]
  authz:
    operator:
      groups: [ops]
"""


@pytest.fixture
def policy_file(tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_bytes(POLICY)
    return path


@pytest.fixture
def client(policy_file):
    settings = AuthzSettings(policy_file=str(policy_file))
    store = PolicyStore(settings.policy_file, settings.cache_file)
    store.reload()
    app = FastAPI()
    app.include_router(create_authz_router(store, settings))

    @app.get("/reports")
    async def reports(user=Depends(require_permission(store, settings, "reports", "read"))):
        return {"user": user}

    @app.get("/reports/edit")
    async def edit(user=Depends(require_any_permission(store, settings, "reports", "write", "admin"))):
        return {"user": user}

    return TestClient(app)


def test_authorize_endpoint(client):
    allowed = client.get("/authorize", params={"user": "alice", "resource": "reports", "permission": "write"})
    assert allowed.status_code == 200
    assert allowed.json() == {"allowed": True}

    denied = client.get("/authorize", params={"user": "bob", "resource": "reports", "permission": "read"})
    assert denied.json() == {"allowed": False}


def test_authorize_endpoint_with_groups(client):
    params = [("user", "bob"), ("group", "other"), ("group", "staff"), ("resource", "reports"), ("permission", "read")]
    assert client.get("/authorize", params=params).json() == {"allowed": True}


def test_index_summary(client):
    body = client.get("/index").json()
    assert body["roles"] == 3
    assert body["users"] == 1
    assert body["groups"] == 2
    assert len(body["source_policy_hash"]) == 64


def test_protected_route_requires_identity(client):
    assert client.get("/reports").status_code == 401


def test_protected_route_by_user_and_group(client):
    assert client.get("/reports", headers={"X-Authz-User": "alice"}).json() == {"user": "alice"}
    assert client.get("/reports", headers={"X-Authz-User": "bob", "X-Authz-Groups": "ops, staff"}).status_code == 200
    assert client.get("/reports", headers={"X-Authz-User": "bob"}).status_code == 403


def test_any_permission_route(client):
    assert client.get("/reports/edit", headers={"X-Authz-User": "alice"}).status_code == 200
    assert client.get("/reports/edit", headers={"X-Authz-User": "bob", "X-Authz-Groups": "staff"}).status_code == 403


def test_reload_requires_permission(client):
    assert client.post("/reload", headers={"X-Authz-User": "alice"}).status_code == 403


def test_reload_swaps_policy(client, policy_file):
    headers = {"X-Authz-User": "bob", "X-Authz-Groups": "ops"}
    policy_file.write_bytes(POLICY.replace(b"users: [alice]", b"users: [bob]"))

    resp = client.post("/reload", headers=headers)

    assert resp.status_code == 200
    assert resp.json()["ok"] is True
    params = {"user": "bob", "resource": "reports", "permission": "write"}
    assert client.get("/authorize", params=params).json() == {"allowed": True}


def test_failed_reload_keeps_serving(client, policy_file):
    headers = {"X-Authz-User": "bob", "X-Authz-Groups": "ops"}
    client.get("/index")
    policy_file.write_bytes(b"roles:\n  a:\n    extends: [a]\n")

    resp = client.post("/reload", headers=headers)

    assert resp.status_code == 422
    assert "Inheritance cycle" in resp.json()["detail"]
    params = {"user": "alice", "resource": "reports", "permission": "read"}
    assert client.get("/authorize", params=params).json() == {"allowed": True}


def test_reload_handler_runs_in_threadpool(policy_file):
    settings = AuthzSettings(policy_file=str(policy_file))
    router = create_authz_router(PolicyStore(settings.policy_file), settings)

    reload_route = next(route for route in router.routes if route.path == "/reload")

    assert not inspect.iscoroutinefunction(reload_route.endpoint)
