"""API tests: reports dashboard."""

from datetime import datetime, timedelta

from eduopps.services import interest_service


def test_reports_need_permission(client, teacher, auth_headers):
    assert client.get("/api/reports/opportunities", headers=auth_headers(teacher)).status_code == 403


def test_opportunity_report(client, make_opportunity, teacher, admin, auth_headers):
    now = datetime.utcnow()
    make_opportunity(teacher, industry="technology", age_group=["16-18", "19-21"])
    make_opportunity(teacher, industry="technology", age_group=["16-18"])
    make_opportunity(
        teacher,
        industry="finance",
        age_group=["19-21"],
        start_date=now - timedelta(days=30),
        end_date=now - timedelta(days=1),
    )

    report = client.get("/api/reports/opportunities", headers=auth_headers(admin)).json()

    assert report["total_opportunities"] == 3
    assert report["active_opportunities"] == 2
    assert report["expired_opportunities"] == 1
    assert report["by_industry"] == [
        {"industry": "technology", "count": 2},
        {"industry": "finance", "count": 1},
    ]
    assert report["by_age_group"] == [
        {"age_group": "16-18", "count": 2},
        {"age_group": "19-21", "count": 2},
    ]


def test_interest_report(client, make_opportunity, teacher, student, admin, auth_headers):
    opp = make_opportunity(teacher)
    interest_service.register_interest(student["id"], opp)

    response = client.get("/api/reports/interests", headers=auth_headers(admin))

    assert response.json() == {str(opp["id"]): 1}


def test_teacher_activity(client, make_user, make_opportunity, teacher, school, admin, auth_headers):
    now = datetime.utcnow()
    busy = make_user("teacher", school)
    make_opportunity(busy)
    make_opportunity(busy, created_at=now - timedelta(days=20))
    make_opportunity(teacher, created_at=now - timedelta(days=60))
    make_opportunity(admin)

    all_time = client.get("/api/reports/teacher-activity", headers=auth_headers(admin)).json()
    week = client.get("/api/reports/teacher-activity?period=week", headers=auth_headers(admin)).json()
    month = client.get("/api/reports/teacher-activity?period=month", headers=auth_headers(admin)).json()

    assert all_time["period"] == "all"
    assert [(t["teacher_id"], t["count"]) for t in all_time["teacher_activity"]] == [(busy["id"], 2), (teacher["id"], 1)]
    assert week["active_teachers"] == 1
    assert week["teacher_activity"][0]["count"] == 1
    assert [(t["teacher_id"], t["count"]) for t in month["teacher_activity"]] == [(busy["id"], 2)]
    assert client.get(
        "/api/reports/teacher-activity?period=year", headers=auth_headers(admin)
    ).status_code == 422
