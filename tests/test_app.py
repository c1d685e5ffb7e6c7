from fastapi.testclient import TestClient

from rct_connect.db import get_store
from rct_connect.main import create_app

API = "/api"


def test_health_reports_collections(client):
    res = client.get(f"{API}/health")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["timestamp"].endswith("Z")
    assert body["collections"]["users"] == 0


def test_unknown_route_uses_error_envelope(client):
    res = client.get(f"{API}/nowhere")
    assert res.status_code == 404
    assert res.json()["success"] is False


def test_bad_query_parameter_is_400(client):
    res = client.get(f"{API}/posts", params={"limit": "beaucoup"})
    assert res.status_code == 400
    assert res.json()["success"] is False


def test_unhandled_error_is_500(store):
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    res = TestClient(app, raise_server_exceptions=False).get("/boom")
    assert res.status_code == 500
    assert res.json() == {"success": False, "error": "Erreur serveur"}


def test_validation_runs_after_auth(client):
    # no token and an invalid body: authentication wins
    res = client.post(f"{API}/posts", json={"content": ""})
    assert res.status_code == 401
