import os
import uuid

os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from rct_connect.auth import create_access_token, get_password_hash
from rct_connect.db import get_store
from rct_connect.db.store import JsonStore
from rct_connect.main import app
from rct_connect.utils.dates import now_iso

API = "/api"


@pytest.fixture
def store(tmp_path):
    # fresh JSON file per test
    return JsonStore(str(tmp_path / "data" / "rct.json")).load()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(store):
    """Insert a user straight into the store and hand back auth headers."""
    def _make(name="Runner", role="member", group_name=None, password="password123"):
        now = now_iso()
        user = {
            "id": str(uuid.uuid4()),
            "email": f"{uuid.uuid4().hex[:8]}@rct.tn",
            "password": get_password_hash(password),
            "name": name,
            "avatar": None,
            "role": role,
            "group_name": group_name,
            "distance": 0,
            "runs": 0,
            "joined_events": 0,
            "strava_connected": False,
            "strava_id": None,
            "created_at": now,
            "updated_at": now,
        }
        store.data["users"].append(user)
        store.write()
        return {
            "id": user["id"],
            "user": user,
            "headers": {"Authorization": f"Bearer {create_access_token(user)}"},
        }
    return _make


@pytest.fixture
def auth_headers(client):
    """Register + login through the API and return an Authorization header"""
    client.post(f"{API}/auth/register", json={"email": "test@rct.tn", "password": "testpass", "name": "Test User"})
    res = client.post(f"{API}/auth/login", json={"email": "test@rct.tn", "password": "testpass"})
    token = res.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}
