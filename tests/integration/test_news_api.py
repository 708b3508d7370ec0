"""API tests: school news feed."""

from eduopps.services import news_service


def test_moderator_posts_to_own_school(client, make_user, school, other_school, auth_headers):
    moderator = make_user("moderator", school)

    response = client.post(
        "/api/news",
        json={"title": "Careers fair", "content": "Friday in the hall", "school_id": other_school["id"]},
        headers=auth_headers(moderator),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["school_id"] == school["id"]
    assert body["author_id"] == moderator["id"]
    assert body["likes"] == 0


def test_publishing_needs_news_permission(client, teacher, make_user, school, superadmin, auth_headers):
    moderator = make_user("moderator", school)
    post = {"title": "Hello", "content": "World", "is_global": True}

    assert client.post("/api/news", json=post, headers=auth_headers(teacher)).status_code == 403
    assert client.post("/api/news", json=post, headers=auth_headers(moderator)).status_code == 403
    assert client.post("/api/news", json=post, headers=auth_headers(superadmin)).json()["is_global"] is True


def test_feed_shows_school_and_global_posts(
    client, make_user, school, other_school, student, superadmin, auth_headers
):
    own = news_service.create_post({"title": "Ours", "content": "x"}, make_user("moderator", school))
    theirs = news_service.create_post({"title": "Theirs", "content": "x"}, make_user("moderator", other_school))
    shared = news_service.create_post({"title": "Everyone", "content": "x", "is_global": True}, superadmin)

    feed = client.get("/api/news", headers=auth_headers(student)).json()

    assert {p["id"] for p in feed} == {own["id"], shared["id"]}
    assert client.get(f"/api/news/{theirs['id']}", headers=auth_headers(student)).status_code == 403
    assert client.get("/api/news/999", headers=auth_headers(student)).status_code == 404
    assert len(client.get("/api/news", headers=auth_headers(superadmin)).json()) == 3


def test_edit_and_delete_rules(client, make_user, school, teacher, auth_headers):
    author = make_user("moderator", school)
    post = news_service.create_post({"title": "Draft", "content": "x"}, author)

    assert client.put(
        f"/api/news/{post['id']}", json={"title": "Hijacked"}, headers=auth_headers(teacher)
    ).status_code == 403
    updated = client.put(f"/api/news/{post['id']}", json={"title": "Final"}, headers=auth_headers(author))
    assert updated.json()["title"] == "Final"
    assert client.put(
        f"/api/news/{post['id']}", json={"is_global": True}, headers=auth_headers(author)
    ).status_code == 403

    assert client.delete(f"/api/news/{post['id']}", headers=auth_headers(teacher)).status_code == 403
    assert client.delete(f"/api/news/{post['id']}", headers=auth_headers(author)).status_code == 200
    assert news_service.get_post_by_id(post["id"]) is None


def test_like_post(client, make_user, school, student, auth_headers):
    post = news_service.create_post({"title": "Results", "content": "x"}, make_user("moderator", school))

    client.post(f"/api/news/{post['id']}/like", headers=auth_headers(student))
    response = client.post(f"/api/news/{post['id']}/like", headers=auth_headers(student))

    assert response.json()["likes"] == 2


def test_update_ignores_null_for_required_fields(client, make_user, school, auth_headers):
    author = make_user("moderator", school)
    post = news_service.create_post({"title": "Open day", "content": "Saturday"}, author)

    response = client.put(
        f"/api/news/{post['id']}",
        json={"title": None, "content": None, "is_global": None, "image_url": "http://img"},
        headers=auth_headers(author),
    )

    assert response.status_code == 200
    body = response.json()
    assert (body["title"], body["content"], body["is_global"]) == ("Open day", "Saturday", False)
    assert body["image_url"] == "http://img"
