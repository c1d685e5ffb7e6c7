import pytest

from rct_connect.client import RctClient


@pytest.fixture
def api(client):
    # the TestClient speaks the same request() interface as requests.Session
    return RctClient(base_url="http://testserver/api", session=client)


def test_register_keeps_token(api):
    result = api.auth.register("sarra@rct.tn", "runner1", "Sarra", group_name="Loisir")
    assert result["success"] is True
    assert api.token

    me = api.auth.me()
    assert me["data"]["user"]["group_name"] == "Loisir"

    api.auth.logout()
    assert api.token is None
    assert api.auth.me()["error"] == "Token manquant"


def test_failed_login_returns_envelope(api):
    result = api.auth.login("nobody@rct.tn", "whatever")
    assert result["success"] is False
    assert api.token is None


def test_post_and_like_roundtrip(api):
    api.auth.register("yassine@rct.tn", "runner1", "Yassine")
    post = api.posts.create("Premier 10 km !")["data"]

    assert api.posts.toggle_like(post["id"])["data"]["liked"] is True
    api.posts.add_comment(post["id"], "Bravo")

    listing = api.posts.get_all(limit=5)["data"]
    assert listing[0]["like_count"] == 1
    assert listing[0]["comment_count"] == 1


def test_settings_and_notifications(api):
    api.auth.register("ines@rct.tn", "runner1", "Ines")
    assert api.settings.update_theme("dark")["data"]["theme"] == "dark"
    assert api.settings.update_notifications(email_notifications=False)["success"] is True
    assert api.settings.get()["data"]["email_notifications"] is False

    result = api.notifications.get_all(unread_only=True)
    assert result["data"] == []
    assert result["meta"]["unread_count"] == 0


def test_health(api):
    assert api.health()["success"] is True
