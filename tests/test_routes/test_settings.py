API = "/api"


def test_defaults_created_on_first_read(client, make_user, store):
    user = make_user()
    res = client.get(f"{API}/settings", headers=user["headers"])
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["theme"] == "system"
    assert data["language"] == "fr"
    assert data["notifications_enabled"] is True
    assert len(store.data["user_settings"]) == 1

    # a second read does not duplicate the row
    client.get(f"{API}/settings", headers=user["headers"])
    assert len(store.data["user_settings"]) == 1


def test_update_settings(client, make_user):
    user = make_user()
    res = client.put(f"{API}/settings", headers=user["headers"], json={"theme": "dark", "email_notifications": False})
    data = res.json()["data"]
    assert data["theme"] == "dark"
    assert data["email_notifications"] is False
    assert data["language"] == "fr"


def test_update_settings_needs_a_change(client, make_user):
    user = make_user()
    res = client.put(f"{API}/settings", headers=user["headers"], json={})
    assert res.status_code == 400
    assert res.json()["error"] == "Aucune modification fournie"

    res = client.put(f"{API}/settings", headers=user["headers"], json={"language": "de"})
    assert res.status_code == 400
    assert res.json()["error"] == "Langue invalide"


def test_theme_and_language_shortcuts(client, make_user):
    user = make_user()
    res = client.put(f"{API}/settings/theme", headers=user["headers"], json={"theme": "neon"})
    assert res.status_code == 400
    assert res.json()["error"] == "Thème invalide"

    res = client.put(f"{API}/settings/theme", headers=user["headers"], json={})
    assert res.json()["error"] == "Thème invalide"

    assert client.put(f"{API}/settings/theme", headers=user["headers"], json={"theme": "light"}).status_code == 200
    assert client.put(f"{API}/settings/language", headers=user["headers"], json={"language": "ar"}).status_code == 200

    data = client.get(f"{API}/settings", headers=user["headers"]).json()["data"]
    assert data["theme"] == "light" and data["language"] == "ar"


def test_notification_preferences(client, make_user):
    user = make_user()
    res = client.put(f"{API}/settings/notifications", headers=user["headers"], json={"notifications_enabled": False})
    assert res.status_code == 200

    data = client.get(f"{API}/settings", headers=user["headers"]).json()["data"]
    assert data["notifications_enabled"] is False
    assert data["email_notifications"] is True


def test_settings_require_auth(client):
    assert client.get(f"{API}/settings").status_code == 401


def test_boolean_preferences_reject_strings_and_numbers(client, make_user):
    user = make_user()
    for value in ("yes", 1, "true"):
        res = client.put(f"{API}/settings", headers=user["headers"], json={"notifications_enabled": value})
        assert res.status_code == 400

        res = client.put(f"{API}/settings/notifications", headers=user["headers"], json={"email_notifications": value})
        assert res.status_code == 400

    data = client.get(f"{API}/settings", headers=user["headers"]).json()["data"]
    assert data["notifications_enabled"] is True and data["email_notifications"] is True
