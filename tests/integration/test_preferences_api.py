"""API tests: saved student preferences."""


def test_defaults_before_anything_is_saved(client, student, auth_headers):
    response = client.get("/api/student-preferences", headers=auth_headers(student))

    assert response.status_code == 200
    body = response.json()
    assert body["id"] is None
    assert body["industries"] == []
    assert body["has_preferences"] is False


def test_save_then_replace(client, student, auth_headers):
    headers = auth_headers(student)

    saved = client.post(
        "/api/student-preferences",
        json={"industries": ["technology"], "locations": ["London"]},
        headers=headers,
    )
    replaced = client.post("/api/student-preferences", json={"age_groups": ["16-18"]}, headers=headers)

    assert saved.status_code == 201
    assert saved.json()["has_preferences"] is True
    assert replaced.json()["id"] == saved.json()["id"]
    assert replaced.json()["industries"] == []
    assert replaced.json()["age_groups"] == ["16-18"]


def test_locations_alone_do_not_count_as_preferences(client, student, auth_headers):
    body = client.post(
        "/api/student-preferences", json={"locations": ["Leeds"]}, headers=auth_headers(student)
    ).json()

    assert body["locations"] == ["Leeds"]
    assert body["has_preferences"] is False


def test_partial_update(client, student, auth_headers):
    headers = auth_headers(student)

    assert client.put(
        "/api/student-preferences", json={"industries": ["finance"]}, headers=headers
    ).status_code == 404

    client.post(
        "/api/student-preferences",
        json={"industries": ["technology"], "opportunity_types": ["internship"]},
        headers=headers,
    )
    updated = client.put("/api/student-preferences", json={"industries": ["finance"]}, headers=headers).json()

    assert updated["industries"] == ["finance"]
    assert updated["opportunity_types"] == ["internship"]
