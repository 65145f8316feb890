# tests/test_auth.py
from conftest import PASSWORD, auth
from core.rate_limit import login_limiter
from models.users import Role, User


def register(client, employee_id, **overrides):
    body = {
        "name": f"Person {employee_id}",
        "email": f"person{employee_id}@example.com",
        "password": PASSWORD,
        "employee_id": employee_id,
    }
    body.update(overrides)
    return client.post("/api/auth/register", json=body)


def test_first_registration_becomes_admin(client, session):
    r = register(client, 1, role="employee")
    assert r.status_code == 201
    assert r.json()["token_type"] == "bearer"

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {r.json()['access_token']}"})
    assert me.status_code == 200
    assert me.json()["role"] == "admin"
    assert "password_hash" not in me.json()


def test_later_registration_cannot_self_elevate(client, make_user):
    make_user(1, Role.admin)
    assert register(client, 2, role="manager").status_code == 403
    assert register(client, 3, role="admin").status_code == 403
    r = register(client, 4, role="intern")
    assert r.status_code == 201


def test_registration_rejects_duplicates(client, make_user):
    make_user(1, Role.admin, email="taken@example.com")
    r = register(client, 2, email="Taken@Example.com")
    assert r.status_code == 400
    assert r.json()["detail"] == "User already exists"

    r = register(client, 1)
    assert r.status_code == 400
    assert r.json()["detail"] == "Employee ID already registered"


def test_registration_validates_fields(client):
    assert register(client, 1, password="weakpass").status_code == 422
    assert register(client, 1, email="not-an-email").status_code == 422
    assert register(client, 0).status_code == 422
    assert register(client, 1, name="   ").status_code == 422
    assert register(client, 1, password=PASSWORD + "a" * 62).status_code == 422


def test_long_password_registers_and_logs_in(client):
    long_password = PASSWORD + "a" * 60
    assert register(client, 1, password=long_password).status_code == 201
    r = client.post("/api/auth/login", data={"username": "person1@example.com", "password": long_password})
    assert r.status_code == 200


def test_registration_manager_must_exist(client, make_user):
    make_user(1, Role.admin)
    make_user(5, Role.employee)
    assert register(client, 2, manager_id=99).status_code == 400
    assert register(client, 3, manager_id=5).status_code == 400

    make_user(10, Role.manager)
    assert register(client, 4, manager_id=10).status_code == 201


def test_login_with_email_and_password(client, make_user):
    make_user(7, email="henry@company.com")
    r = client.post("/api/auth/login", data={"username": "HENRY@company.com", "password": PASSWORD})
    assert r.status_code == 200
    token = r.json()["access_token"]
    assert client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"}).json()["employee_id"] == 7


def test_login_rejects_bad_credentials(client, make_user):
    make_user(7, email="henry@company.com")
    r = client.post("/api/auth/login", data={"username": "henry@company.com", "password": "Wr0ng!Pass"})
    assert r.status_code == 401
    r = client.post("/api/auth/login", data={"username": "nobody@company.com", "password": PASSWORD})
    assert r.status_code == 401


def test_login_is_rate_limited(client, make_user, monkeypatch):
    make_user(7, email="henry@company.com")
    monkeypatch.setattr(login_limiter, "max_requests", 2)
    form = {"username": "henry@company.com", "password": "Wr0ng!Pass"}
    assert client.post("/api/auth/login", data=form).status_code == 401
    assert client.post("/api/auth/login", data=form).status_code == 401
    r = client.post("/api/auth/login", data=form)
    assert r.status_code == 429
    assert int(r.headers["Retry-After"]) >= 1


def test_logout_revokes_token(client, make_user):
    user = make_user(7)
    headers = auth(user)
    assert client.get("/api/users/me", headers=headers).status_code == 200

    r = client.post("/api/auth/logout", headers=headers)
    assert r.status_code == 200

    r = client.get("/api/users/me", headers=headers)
    assert r.status_code == 401
    assert r.json()["detail"] == "Token has been revoked"

    # a fresh token still works
    assert client.get("/api/users/me", headers=auth(user)).status_code == 200


def test_missing_or_garbage_token(client):
    assert client.get("/api/users/me").status_code == 401
    r = client.get("/api/users/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"


def test_token_for_unknown_user(client):
    ghost = User(id="ghost123", name="Ghost", email="g@example.com", employee_id=9, role=Role.employee, password_hash="x")
    assert client.get("/api/users/me", headers=auth(ghost)).status_code == 401


def test_unique_race_is_reported_as_conflict(client, make_user, monkeypatch):
    import routers.auth

    make_user(1, Role.admin)
    # simulate a concurrent registration slipping past the pre-check
    monkeypatch.setattr(routers.auth, "get_user_by_employee_id", lambda db, employee_id: None)
    r = register(client, 1)
    assert r.status_code == 409
