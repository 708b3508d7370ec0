"""API tests: registering interest, capacity, attendee lists and CSV export."""

import csv
import io

from eduopps.services import interest_service


def test_register_interest_is_idempotent(client, make_opportunity, teacher, student, auth_headers):
    opp = make_opportunity(teacher)

    first = client.post(
        "/api/student-interests", json={"opportunity_id": opp["id"], "notes": "Keen"}, headers=auth_headers(student)
    )
    again = client.post("/api/student-interests", json={"opportunity_id": opp["id"]}, headers=auth_headers(student))

    assert first.status_code == 201
    assert first.json()["status"] == "registered"
    assert first.json()["notes"] == "Keen"
    assert again.json()["id"] == first.json()["id"]
    assert interest_service.get_interest_counts() == {opp["id"]: 1}


def test_register_interest_respects_capacity(client, make_user, make_opportunity, teacher, school, auth_headers):
    opp = make_opportunity(teacher, number_of_spaces=1)
    first, second = make_user("student", school), make_user("student", school)

    assert client.post(
        "/api/student-interests", json={"opportunity_id": opp["id"]}, headers=auth_headers(first)
    ).status_code == 201
    full = client.post("/api/student-interests", json={"opportunity_id": opp["id"]}, headers=auth_headers(second))

    assert full.status_code == 409
    assert full.json()["detail"] == "No spaces left"


def test_register_interest_needs_visibility(client, make_user, make_opportunity, other_school, student, auth_headers):
    opp = make_opportunity(make_user("teacher", other_school))

    response = client.post("/api/student-interests", json={"opportunity_id": opp["id"]}, headers=auth_headers(student))
    missing = client.post("/api/student-interests", json={"opportunity_id": 4242}, headers=auth_headers(student))

    assert response.status_code == 403
    assert missing.status_code == 404


def test_remove_interest(client, make_opportunity, teacher, student, auth_headers):
    opp = make_opportunity(teacher)
    interest_service.register_interest(student["id"], opp)

    assert client.delete(f"/api/student-interests/{opp['id']}", headers=auth_headers(student)).status_code == 200
    assert client.delete(f"/api/student-interests/{opp['id']}", headers=auth_headers(student)).status_code == 404
    assert interest_service.get_registered_opportunity_ids(student["id"]) == set()


def test_my_interests_include_opportunity_details(client, make_opportunity, teacher, student, auth_headers):
    opp = make_opportunity(teacher, title="Coding Club")
    interest_service.register_interest(student["id"], opp)

    response = client.get("/api/student-interests/student", headers=auth_headers(student))

    assert response.status_code == 200
    [interest] = response.json()
    assert interest["opportunity_id"] == opp["id"]
    assert interest["title"] == "Coding Club"
    assert interest["organization"] == "Acme Corp"


def test_counts_are_keyed_by_opportunity(client, make_user, make_opportunity, teacher, school, auth_headers):
    busy = make_opportunity(teacher)
    quiet = make_opportunity(teacher)
    for _ in range(2):
        interest_service.register_interest(make_user("student", school)["id"], busy)
    interest_service.register_interest(make_user("student", school)["id"], quiet)

    response = client.get("/api/student-interests/counts", headers=auth_headers(teacher))

    assert response.json() == {str(busy["id"]): 2, str(quiet["id"]): 1}


def test_attendees_visible_to_school_staff_only(
    client, make_user, make_opportunity, teacher, student, school, other_school, auth_headers
):
    opp = make_opportunity(teacher)
    interest_service.register_interest(student["id"], opp)
    outsider = make_user("teacher", other_school)

    staff = client.get(f"/api/student-interests/opportunity/{opp['id']}", headers=auth_headers(teacher))

    assert staff.status_code == 200
    [attendee] = staff.json()
    assert attendee["id"] == student["id"]
    assert attendee["email"] == student["email"]
    assert attendee["school"]["name"] == school["name"]
    assert client.get(
        f"/api/student-interests/opportunity/{opp['id']}", headers=auth_headers(student)
    ).status_code == 403
    assert client.get(
        f"/api/student-interests/opportunity/{opp['id']}", headers=auth_headers(outsider)
    ).status_code == 403


def test_attendee_csv_export(client, make_opportunity, teacher, student, school, auth_headers):
    opp = make_opportunity(teacher, title="Summer Lab: 2025")
    interest = interest_service.register_interest(student["id"], opp)

    response = client.get(f"/api/student-interests/opportunity/{opp['id']}/csv", headers=auth_headers(teacher))

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="attendees-for-Summer_Lab__2025.csv"' in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["Name", "Email", "Username", "School", "Registration Date"]
    assert rows[1] == [
        f"{student['first_name']} {student['last_name']}",
        student["email"],
        student["username"],
        school["name"],
        interest["registration_date"].strftime("%Y-%m-%d"),
    ]


def test_register_interest_returns_existing_when_insert_races(make_opportunity, teacher, student, monkeypatch):
    opp = make_opportunity(teacher)
    first = interest_service.register_interest(student["id"], opp)
    real_get_interest = interest_service.get_interest
    calls = []

    def stale_then_real(student_id, opportunity_id):
        # The pre-insert lookup misses the row a concurrent request just wrote
        calls.append(opportunity_id)
        return None if len(calls) == 1 else real_get_interest(student_id, opportunity_id)

    monkeypatch.setattr(interest_service, "get_interest", stale_then_real)

    again = interest_service.register_interest(student["id"], opp)

    assert again["id"] == first["id"]
    assert len(calls) == 2
    assert interest_service.get_interest_counts() == {opp["id"]: 1}
