# tests/test_analytics.py
from datetime import timedelta

from conftest import auth
from models.helper import utcnow


def seed(org, make_task):
    past = utcnow() - timedelta(days=2)
    future = utcnow() + timedelta(days=2)
    return {
        "done": make_task(org["m10"], manager_id=10, assigned_to_id=101, status="completed", due_date=past),
        "late": make_task(org["m10"], manager_id=10, assigned_to_id=101, due_date=past),
        "open": make_task(org["m10"], manager_id=10, assigned_to_id=101, due_date=future),
        "nodue": make_task(org["m10"], manager_id=10, assigned_to_id=102),
        "other": make_task(org["m20"], manager_id=20, assigned_to_id=201, due_date=past),
        "odd": make_task(org["m10"], manager_id=10, assigned_to_id=102, status="blocked"),
    }


def test_employee_counts(client, org, make_task):
    seed(org, make_task)
    r = client.get("/api/analytics/employee", headers=auth(org["e101"]))
    assert r.status_code == 200
    assert r.json() == {"completed": 1, "pending": 2, "overdue": 1, "total": 3}


def test_employee_bucket_lists(client, org, make_task):
    tasks = seed(org, make_task)
    h = auth(org["e101"])
    assert [t["id"] for t in client.get("/api/analytics/employee/completed", headers=h).json()] == [tasks["done"].id]
    assert [t["id"] for t in client.get("/api/analytics/employee/overdue", headers=h).json()] == [tasks["late"].id]
    pending = {t["id"] for t in client.get("/api/analytics/employee/pending", headers=h).json()}
    assert pending == {tasks["late"].id, tasks["open"].id}
    assert client.get("/api/analytics/employee/someday", headers=h).status_code == 422


def test_manager_counts_are_scoped(client, org, make_task):
    seed(org, make_task)
    r = client.get("/api/analytics/manager", headers=auth(org["m10"]))
    assert r.json() == {"completed": 1, "pending": 3, "overdue": 1, "total": 5}

    r = client.get("/api/analytics/manager", headers=auth(org["admin"]))
    assert r.json() == {"completed": 1, "pending": 4, "overdue": 2, "total": 6}


def test_manager_bucket_lists(client, org, make_task):
    tasks = seed(org, make_task)
    r = client.get("/api/analytics/manager/overdue", headers=auth(org["m20"]))
    assert [t["id"] for t in r.json()] == [tasks["other"].id]


def test_manager_analytics_forbidden_for_staff(client, org):
    assert client.get("/api/analytics/manager", headers=auth(org["e101"])).status_code == 403
    assert client.get("/api/analytics/manager/pending", headers=auth(org["e102"])).status_code == 403
    assert client.get("/api/analytics/assignees", headers=auth(org["e101"])).status_code == 403


def test_counts_by_assignee(client, org, make_task):
    seed(org, make_task)
    r = client.get("/api/analytics/assignees", headers=auth(org["m10"]))
    assert r.status_code == 200
    rows = r.json()
    assert [row["employee_id"] for row in rows] == [101, 102]
    assert rows[0]["counts"] == {"completed": 1, "pending": 2, "overdue": 1, "total": 3}
    assert rows[1]["counts"] == {"completed": 0, "pending": 1, "overdue": 0, "total": 2}

    r = client.get("/api/analytics/assignees", headers=auth(org["admin"]))
    assert [row["employee_id"] for row in r.json()] == [101, 102, 201]
