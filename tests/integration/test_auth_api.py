"""API tests: login, current user, teacher registration, user and school management."""

from eduopps.services import user_service


def test_login_returns_token_and_user(client, student, password):
    response = client.post("/api/auth/login", json={"email": student["email"], "password": password})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == student["id"]
    assert body["user"]["role"] == "student"
    assert "password_hash" not in body["user"]


def test_login_rejects_wrong_password(client, student):
    response = client.post("/api/auth/login", json={"email": student["email"], "password": "wrong-password"})

    assert response.status_code == 401


def test_login_rejects_deactivated_account(client, student, password):
    user_service.update_user(student["id"], {"is_active": False})

    response = client.post("/api/auth/login", json={"email": student["email"], "password": password})

    assert response.status_code == 403


def test_current_user_includes_permissions_and_school(client, teacher, school, auth_headers):
    response = client.get("/api/auth/current-user", headers=auth_headers(teacher))

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "teacher"
    assert body["school"]["name"] == school["name"]
    assert body["permissions"]["can_create_opportunities"] is True
    assert body["permissions"]["can_manage_users"] is False
    assert body["navigation"]["create_opportunity"] is True


def test_protected_routes_need_a_token(client):
    assert client.get("/api/auth/current-user").status_code == 401
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get("/api/auth/current-user", headers=bad).status_code == 401


def test_logout(client, student, auth_headers):
    response = client.post("/api/auth/logout", headers=auth_headers(student))

    assert response.status_code == 200
    assert response.json()["success"] is True


def test_teacher_self_registration(client, school):
    payload = {
        "email": "New.Teacher@royal.edu",
        "username": "newteacher",
        "first_name": "New",
        "last_name": "Teacher",
        "password": "long-enough-pw",
        "confirm_password": "long-enough-pw",
        "school_id": school["id"],
    }

    response = client.post("/api/auth/register/teacher", json=payload)

    assert response.status_code == 201
    assert response.json()["role"] == "teacher"
    assert response.json()["email"] == "new.teacher@royal.edu"

    login = client.post("/api/auth/login", json={"email": "new.teacher@royal.edu", "password": "long-enough-pw"})
    assert login.status_code == 200

    duplicate = client.post("/api/auth/register/teacher", json={**payload, "username": "other"})
    assert duplicate.status_code == 400


def test_teacher_registration_validation(client, school):
    payload = {
        "email": "t@royal.edu",
        "username": "teach",
        "first_name": "T",
        "last_name": "T",
        "password": "long-enough-pw",
        "confirm_password": "different-pw",
        "school_id": school["id"],
    }
    assert client.post("/api/auth/register/teacher", json=payload).status_code == 422

    payload.update(confirm_password="long-enough-pw", school_id=9999)
    response = client.post("/api/auth/register/teacher", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"] == "School not found"


def test_public_roles_only_offer_teacher(client):
    response = client.get("/api/public/user-roles")

    assert response.status_code == 200
    assert [role["name"] for role in response.json()] == ["teacher"]


def test_admin_creates_users_in_own_school_only(client, admin, school, other_school, auth_headers):
    student_role = user_service.get_role_by_name("student")
    payload = {
        "email": "pupil@royal.edu",
        "username": "pupil",
        "first_name": "Pupil",
        "last_name": "One",
        "password": "long-enough-pw",
        "confirm_password": "long-enough-pw",
        "role_id": student_role["id"],
    }

    created = client.post("/api/users", json=payload, headers=auth_headers(admin))
    assert created.status_code == 201
    assert created.json()["school_id"] == school["id"]

    elsewhere = client.post(
        "/api/users",
        json={**payload, "email": "pupil2@royal.edu", "username": "pupil2", "school_id": other_school["id"]},
        headers=auth_headers(admin),
    )
    assert elsewhere.status_code == 403


def test_user_management_requires_permission(client, teacher, auth_headers):
    response = client.get("/api/user-roles", headers=auth_headers(teacher))

    assert response.status_code == 403
    assert response.json()["detail"] == "Insufficient permissions"


def test_update_user_rules(client, admin, student, auth_headers):
    own = client.put(f"/api/users/{admin['id']}", json={"first_name": "Me"}, headers=auth_headers(admin))
    assert own.status_code == 403

    response = client.put(f"/api/users/{student['id']}", json={"first_name": "Renamed"}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["first_name"] == "Renamed"

    clash = client.put(f"/api/users/{student['id']}", json={"email": admin["email"]}, headers=auth_headers(admin))
    assert clash.status_code == 400


def test_list_users_by_school_and_role(client, admin, student, teacher, school, auth_headers):
    all_users = client.get(f"/api/users/school/{school['id']}", headers=auth_headers(admin))
    students = client.get(f"/api/users/school/{school['id']}?role=student", headers=auth_headers(admin))
    teachers = client.get("/api/users/role/teacher", headers=auth_headers(admin))

    assert {u["id"] for u in all_users.json()} == {admin["id"], student["id"], teacher["id"]}
    assert [u["id"] for u in students.json()] == [student["id"]]
    assert [u["id"] for u in teachers.json()] == [teacher["id"]]


def test_school_crud(client, superadmin, admin, school, auth_headers):
    created = client.post("/api/schools", json={"name": "Zeta School"}, headers=auth_headers(superadmin))
    assert created.status_code == 201
    school_id = created.json()["id"]

    names = [s["name"] for s in client.get("/api/schools").json()]
    assert names == sorted(names)

    # admins with manage-settings may edit their own school only
    own = client.put(f"/api/schools/{school['id']}", json={"description": "Updated"}, headers=auth_headers(admin))
    assert own.status_code == 200
    assert own.json()["description"] == "Updated"
    other = client.put(f"/api/schools/{school_id}", json={"description": "Nope"}, headers=auth_headers(admin))
    assert other.status_code == 403

    assert client.delete(f"/api/schools/{school_id}", headers=auth_headers(admin)).status_code == 403
    assert client.delete(f"/api/schools/{school_id}", headers=auth_headers(superadmin)).status_code == 200
    assert client.get(f"/api/schools/{school_id}").status_code == 404


def test_deleting_school_removes_its_users(client, superadmin, school, student, auth_headers):
    client.delete(f"/api/schools/{school['id']}", headers=auth_headers(superadmin))

    assert user_service.get_user_by_id(student["id"]) is None


def test_update_user_ignores_null_for_required_fields(client, admin, student, auth_headers):
    response = client.put(
        f"/api/users/{student['id']}",
        json={"first_name": None, "email": None, "is_active": None, "last_name": "Kept"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["first_name"] == student["first_name"]
    assert body["email"] == student["email"]
    assert body["is_active"] is True
    assert body["last_name"] == "Kept"


def test_role_requiring_school_cannot_lose_it(client, superadmin, teacher, auth_headers):
    response = client.put(f"/api/users/{teacher['id']}", json={"school_id": None}, headers=auth_headers(superadmin))

    assert response.status_code == 400
    assert response.json()["detail"] == "Role 'teacher' requires a school"
    assert user_service.get_user_by_id(teacher["id"])["school_id"] == teacher["school_id"]


def test_users_by_role_rejects_unknown_roles(client, admin, auth_headers):
    assert client.get("/api/users/role/janitor", headers=auth_headers(admin)).status_code == 422


def test_update_school_ignores_null_name(client, superadmin, school, auth_headers):
    response = client.put(
        f"/api/schools/{school['id']}", json={"name": None, "description": "New"}, headers=auth_headers(superadmin)
    )

    assert response.status_code == 200
    assert response.json()["name"] == school["name"]
    assert response.json()["description"] == "New"
