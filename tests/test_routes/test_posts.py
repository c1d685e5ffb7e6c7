API = "/api"


def _create_post(client, headers, content="Sortie du dimanche"):
    res = client.post(f"{API}/posts", headers=headers, json={"content": content})
    assert res.status_code == 201
    return res.json()["data"]


def test_post_flow(client, make_user):
    author = make_user(name="Mohamed")
    post = _create_post(client, author["headers"])
    assert post["author"]["name"] == "Mohamed"
    assert post["like_count"] == 0 and post["is_liked"] is False

    # anonymous read is allowed
    res = client.get(f"{API}/posts")
    assert res.status_code == 200
    assert [p["id"] for p in res.json()["data"]] == [post["id"]]


def test_create_post_rejects_empty_content_and_bad_image(client, make_user):
    user = make_user()
    res = client.post(f"{API}/posts", headers=user["headers"], json={"content": ""})
    assert res.status_code == 400
    assert res.json()["error"] == "Le contenu ne peut pas être vide"

    res = client.post(f"{API}/posts", headers=user["headers"], json={"content": "ok", "image": "not a url"})
    assert res.status_code == 400
    assert res.json()["error"] == "URL d'image invalide"


def test_toggle_like_twice_restores_state(client, make_user):
    author = make_user()
    fan = make_user(name="Leila")
    post = _create_post(client, author["headers"])

    res = client.post(f"{API}/posts/{post['id']}/like", headers=fan["headers"])
    assert res.json()["data"] == {"liked": True, "like_count": 1}

    res = client.get(f"{API}/posts/{post['id']}", headers=fan["headers"])
    assert res.json()["data"]["is_liked"] is True

    res = client.post(f"{API}/posts/{post['id']}/like", headers=fan["headers"])
    assert res.json()["data"] == {"liked": False, "like_count": 0}


def test_like_unknown_post(client, make_user):
    user = make_user()
    res = client.post(f"{API}/posts/missing/like", headers=user["headers"])
    assert res.status_code == 404
    assert res.json()["error"] == "Publication non trouvée"


def test_only_author_or_admin_can_edit(client, make_user):
    author = make_user()
    other = make_user()
    admin = make_user(role="admin")
    post = _create_post(client, author["headers"])

    res = client.put(f"{API}/posts/{post['id']}", headers=other["headers"], json={"content": "hack"})
    assert res.status_code == 403

    res = client.put(f"{API}/posts/{post['id']}", headers=admin["headers"], json={"content": "modéré"})
    assert res.status_code == 200
    assert res.json()["data"]["content"] == "modéré"


def test_update_keeps_unsent_fields(client, make_user):
    author = make_user()
    res = client.post(
        f"{API}/posts",
        headers=author["headers"],
        json={"content": "avec photo", "image": "https://img.rct.tn/1.jpg"},
    )
    post_id = res.json()["data"]["id"]

    res = client.put(f"{API}/posts/{post_id}", headers=author["headers"], json={"content": "edit"})
    assert res.json()["data"]["image"] == "https://img.rct.tn/1.jpg"

    res = client.put(f"{API}/posts/{post_id}", headers=author["headers"], json={"image": None})
    assert res.json()["data"]["image"] is None


def test_comments(client, make_user):
    author = make_user()
    commenter = make_user(name="Karim")
    post = _create_post(client, author["headers"])

    res = client.post(f"{API}/posts/{post['id']}/comments", headers=commenter["headers"], json={"content": "Bravo"})
    assert res.status_code == 201
    comment = res.json()["data"]
    assert comment["author"]["name"] == "Karim"

    res = client.get(f"{API}/posts/{post['id']}/comments")
    assert [c["content"] for c in res.json()["data"]] == ["Bravo"]

    # post author cannot delete someone else's comment
    res = client.delete(f"{API}/posts/{post['id']}/comments/{comment['id']}", headers=author["headers"])
    assert res.status_code == 403

    res = client.delete(f"{API}/posts/{post['id']}/comments/{comment['id']}", headers=commenter["headers"])
    assert res.status_code == 200
    assert client.get(f"{API}/posts/{post['id']}").json()["data"]["comment_count"] == 0


def test_delete_post_cascades(client, make_user, store):
    author = make_user()
    fan = make_user()
    post = _create_post(client, author["headers"])
    client.post(f"{API}/posts/{post['id']}/like", headers=fan["headers"])
    client.post(f"{API}/posts/{post['id']}/comments", headers=fan["headers"], json={"content": "Top"})

    res = client.delete(f"{API}/posts/{post['id']}", headers=author["headers"])
    assert res.status_code == 200

    assert store.data["posts"] == []
    assert store.data["post_likes"] == []
    assert store.data["comments"] == []


def test_pagination_and_author_filter(client, make_user, store):
    a = make_user()
    b = make_user()
    for i in range(3):
        store.data["posts"].append({
            "id": f"a{i}", "author_id": a["id"], "content": str(i), "image": None,
            "created_at": f"2024-05-0{i + 1}T10:00:00.000Z", "updated_at": f"2024-05-0{i + 1}T10:00:00.000Z",
        })
    store.data["posts"].append({
        "id": "b0", "author_id": b["id"], "content": "b", "image": None,
        "created_at": "2024-05-09T10:00:00.000Z", "updated_at": "2024-05-09T10:00:00.000Z",
    })

    res = client.get(f"{API}/posts", params={"limit": 2, "offset": 1})
    assert [p["id"] for p in res.json()["data"]] == ["a2", "a1"]

    res = client.get(f"{API}/posts", params={"authorId": a["id"]})
    assert [p["id"] for p in res.json()["data"]] == ["a2", "a1", "a0"]
