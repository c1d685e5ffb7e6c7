import json

API = "/api"

COURSE = {
    "name": "Tour du Lac",
    "distance": 10.5,
    "difficulty": "Facile",
    "location": "Lac de Tunis",
    "start_point": {"lat": 36.83, "lng": 10.23},
}


def _create_course(client, headers, **overrides):
    res = client.post(f"{API}/courses", headers=headers, json={**COURSE, **overrides})
    assert res.status_code == 201
    return res.json()["data"]


def test_create_course_defaults(client, make_user, store):
    user = make_user()
    body = {k: v for k, v in COURSE.items() if k != "difficulty"}
    res = client.post(f"{API}/courses", headers=user["headers"], json=body)
    assert res.status_code == 201
    course = res.json()["data"]
    assert course["difficulty"] == "Moyen"
    assert course["route_points"] == [COURSE["start_point"]]
    assert course["average_rating"] == 0 and course["rating_count"] == 0

    # coordinates are serialized in the data file
    stored = store.data["courses"][0]
    assert json.loads(stored["start_point"]) == COURSE["start_point"]


def test_create_course_validation(client, make_user):
    user = make_user()
    res = client.post(f"{API}/courses", headers=user["headers"], json={**COURSE, "name": "ab"})
    assert res.status_code == 400
    assert res.json()["error"] == "Le nom doit contenir au moins 3 caractères"

    res = client.post(f"{API}/courses", headers=user["headers"], json={**COURSE, "distance": -1})
    assert res.json()["error"] == "La distance doit être positive"

    res = client.post(f"{API}/courses", headers=user["headers"], json={**COURSE, "difficulty": "Extrême"})
    assert res.json()["error"] == "Difficulté invalide"


def test_rating_upsert_later_values_win(client, make_user, store):
    owner = make_user()
    rater = make_user(name="Amira")
    course = _create_course(client, owner["headers"])

    res = client.post(f"{API}/courses/{course['id']}/rate", headers=rater["headers"], json={"rating": 4, "comment": "Joli"})
    assert res.json()["data"] == {"average_rating": 4.0, "rating_count": 1}

    res = client.post(f"{API}/courses/{course['id']}/rate", headers=rater["headers"], json={"rating": 2})
    assert res.json()["data"] == {"average_rating": 2.0, "rating_count": 1}

    ratings = store.data["ratings"]
    assert len(ratings) == 1
    assert ratings[0]["rating"] == 2 and ratings[0]["comment"] is None


def test_rating_average_over_users(client, make_user):
    owner = make_user()
    course = _create_course(client, owner["headers"])
    for score in (5, 4, 4):
        rater = make_user()
        res = client.post(f"{API}/courses/{course['id']}/rate", headers=rater["headers"], json={"rating": score})
    assert res.json()["data"] == {"average_rating": 4.3, "rating_count": 3}


def test_rating_out_of_range(client, make_user):
    owner = make_user()
    course = _create_course(client, owner["headers"])
    res = client.post(f"{API}/courses/{course['id']}/rate", headers=owner["headers"], json={"rating": 6})
    assert res.status_code == 400
    res = client.post(f"{API}/courses/{course['id']}/rate", headers=owner["headers"], json={"rating": 3.5})
    assert res.status_code == 400


def test_course_detail_includes_user_rating(client, make_user):
    owner = make_user(name="Fatma")
    rater = make_user()
    course = _create_course(client, owner["headers"])
    client.post(f"{API}/courses/{course['id']}/rate", headers=rater["headers"], json={"rating": 5})

    res = client.get(f"{API}/courses/{course['id']}", headers=rater["headers"])
    data = res.json()["data"]
    assert data["creator"]["name"] == "Fatma"
    assert data["user_rating"]["rating"] == 5
    assert data["ratings"][0]["user"]["id"] == rater["id"]

    res = client.get(f"{API}/courses/{course['id']}")
    assert res.json()["data"]["user_rating"] is None


def test_list_filters(client, make_user):
    user = make_user()
    _create_course(client, user["headers"], name="Court", distance=5, difficulty="Facile")
    _create_course(client, user["headers"], name="Long", distance=21, difficulty="Difficile")

    res = client.get(f"{API}/courses", params={"difficulty": "Difficile"})
    assert [c["name"] for c in res.json()["data"]] == ["Long"]

    res = client.get(f"{API}/courses", params={"minDistance": 6, "maxDistance": 30})
    assert [c["name"] for c in res.json()["data"]] == ["Long"]


def test_update_course_reserializes_points(client, make_user, store):
    user = make_user()
    course = _create_course(client, user["headers"])
    route = [{"lat": 36.8, "lng": 10.2}, {"lat": 36.9, "lng": 10.3}]

    res = client.put(f"{API}/courses/{course['id']}", headers=user["headers"], json={"route_points": route})
    assert res.status_code == 200
    assert res.json()["data"]["route_points"] == route
    assert json.loads(store.data["courses"][0]["route_points"]) == route


def test_delete_course_cascades_ratings(client, make_user, store):
    owner = make_user()
    other = make_user()
    course = _create_course(client, owner["headers"])
    client.post(f"{API}/courses/{course['id']}/rate", headers=other["headers"], json={"rating": 3})

    res = client.delete(f"{API}/courses/{course['id']}", headers=other["headers"])
    assert res.status_code == 403

    res = client.delete(f"{API}/courses/{course['id']}", headers=owner["headers"])
    assert res.status_code == 200
    assert store.data["courses"] == [] and store.data["ratings"] == []

    res = client.get(f"{API}/courses/{course['id']}")
    assert res.status_code == 404
    assert res.json()["error"] == "Parcours non trouvé"


def test_rating_and_distance_are_not_coerced(client, make_user):
    user = make_user()
    course = _create_course(client, user["headers"])

    for rating in ("4", True):
        res = client.post(f"{API}/courses/{course['id']}/rate", headers=user["headers"], json={"rating": rating})
        assert res.status_code == 400
        assert res.json()["error"] == "La note doit être un entier entre 1 et 5"

    res = client.post(f"{API}/courses", headers=user["headers"], json={**COURSE, "distance": "10"})
    assert res.status_code == 400
    assert res.json()["error"] == "La distance doit être positive"

    res = client.post(
        f"{API}/courses",
        headers=user["headers"],
        json={**COURSE, "start_point": {"lat": "36.83", "lng": 10.23}},
    )
    assert res.status_code == 400
    assert res.json()["error"] == "Point de départ invalide"
