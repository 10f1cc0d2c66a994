from datetime import timedelta

import pytest

from app.core.errors import ValidationError
from app.services import leave_workflow, reporting


@pytest.fixture
def history(db, make_user, leave_start):
    """Three teachers across two departments with a mix of decisions."""
    alice = make_user(name="Alice", department="Physics")
    bob = make_user(name="Bob", department="Physics")
    carol = make_user(name="Carol", department="English")
    principal = make_user(role="principal", department="Administration")

    a1 = leave_workflow.submit(db, alice, leave_start, leave_start + timedelta(days=1), "casual", "Wedding")
    leave_workflow.submit(db, alice, leave_start + timedelta(days=7), leave_start + timedelta(days=7), "sick", "Flu")
    b1 = leave_workflow.submit(db, bob, leave_start + timedelta(days=2), leave_start + timedelta(days=2), "sick", "Fever")
    c1 = leave_workflow.submit(db, carol, leave_start + timedelta(days=3), leave_start + timedelta(days=4), "other", "Exam duty")

    leave_workflow.approve(db, a1.leave_id, principal, "ok")
    leave_workflow.reject(db, b1.leave_id, principal, "no cover")
    leave_workflow.approve(db, c1.leave_id, principal, "ok")
    db.commit()
    return {"alice": alice, "bob": bob, "carol": carol, "principal": principal}


def test_month_bounds():
    assert [d.isoformat() for d in reporting.month_bounds(2024, 2)] == ["2024-02-01", "2024-02-29"]
    with pytest.raises(ValidationError):
        reporting.month_bounds(2024, 13)


def test_principal_stats_cover_every_department(db, history, leave_start):
    stats = reporting.monthly_stats(db, history["principal"], leave_start.year, leave_start.month)

    assert stats["total"] == 4
    assert stats["by_status"] == {"pending": 1, "approved": 2, "rejected": 1}
    assert stats["by_leave_type"] == {"casual": 1, "sick": 2, "emergency": 0, "other": 1}
    assert stats["by_department"] == {"English": 1, "Physics": 3}
    assert stats["days_approved"] == 4
    assert stats["top_employees"][0]["name"] == "Alice"
    assert stats["top_employees"][0]["count"] == 2


def test_stats_respect_visibility(db, history, make_user, leave_start):
    hod = make_user(role="hod", department="English")

    teacher_stats = reporting.monthly_stats(db, history["bob"], leave_start.year, leave_start.month)
    hod_stats = reporting.monthly_stats(db, hod, leave_start.year, leave_start.month)

    assert teacher_stats["total"] == 1
    assert teacher_stats["by_status"]["rejected"] == 1
    assert hod_stats["total"] == 1
    assert hod_stats["by_department"] == {"English": 1}


def test_stats_for_an_empty_month(db, history, leave_start):
    earlier = leave_start - timedelta(days=40)
    stats = reporting.monthly_stats(db, history["principal"], earlier.year, earlier.month)
    assert stats["total"] == 0
    assert stats["top_employees"] == []


def test_calendar_lists_each_day_and_skips_rejected(db, history, leave_start):
    days = reporting.leave_calendar(db, history["principal"], leave_start.year, leave_start.month)
    by_date = {day["date"]: [applicant.name for _, applicant in day["leaves"]] for day in days}

    assert days[0]["date"] == leave_start
    assert by_date[leave_start] == ["Alice"]
    assert by_date[leave_start + timedelta(days=1)] == ["Alice"]
    assert by_date[leave_start + timedelta(days=2)] == []
    assert by_date[leave_start + timedelta(days=4)] == ["Carol"]
    assert by_date[leave_start + timedelta(days=7)] == ["Alice"]


def test_calendar_over_http(client, history, auth_headers, leave_start):
    r = client.get(
        "/api/v1/leaves/calendar",
        params={"year": leave_start.year, "month": leave_start.month},
        headers=auth_headers(history["carol"]),
    )
    assert r.status_code == 200
    body = r.json()
    busy = [day for day in body["days"] if day["leaves"]]
    assert [day["date"] for day in busy] == [
        (leave_start + timedelta(days=3)).isoformat(),
        (leave_start + timedelta(days=4)).isoformat(),
    ]
    assert busy[0]["leaves"][0]["employee_name"] == "Carol"


def test_stats_over_http(client, history, auth_headers, leave_start):
    r = client.get(
        "/api/v1/leaves/stats",
        params={"year": leave_start.year, "month": leave_start.month},
        headers=auth_headers(history["principal"]),
    )
    assert r.status_code == 200
    assert r.json()["total"] == 4

    r = client.get("/api/v1/leaves/stats", params={"month": 13}, headers=auth_headers(history["principal"]))
    assert r.status_code == 400
