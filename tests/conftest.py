# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from app import app
from core.rate_limit import login_limiter
from core.security import get_password_hash
from core.token_blocklist import blocklist
from data.database import get_session, init_db
from models.tasks import Task
from models.users import User, Role
from routers.auth import issue_token

PASSWORD = "Str0ng!Pass"
_PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def client(engine):
    def _override():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _override
    blocklist.clear()
    login_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
    blocklist.clear()
    login_limiter.reset()


@pytest.fixture
def make_user(session):
    def _make(employee_id: int, role: Role = Role.employee, manager_id=None, name=None, email=None) -> User:
        u = User(
            name=name or f"User {employee_id}",
            email=email or f"user{employee_id}@example.com",
            employee_id=employee_id,
            manager_id=manager_id,
            role=role,
            password_hash=_PASSWORD_HASH,
        )
        session.add(u)
        session.commit()
        session.refresh(u)
        return u
    return _make


@pytest.fixture
def make_task(session):
    def _make(owner: User, **fields) -> Task:
        data = {"title": "Quarterly report", "description": "Compile the numbers"}
        data.update(fields)
        t = Task(owner_id=owner.id, username=owner.name, **data)
        session.add(t)
        session.commit()
        session.refresh(t)
        return t
    return _make


def auth(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_token(user)['access_token']}"}


@pytest.fixture
def org(make_user):
    """admin 1; managers 10 and 20; 101/102 report to 10, 201 to 20; 300 unmanaged."""
    admin = make_user(1, Role.admin, name="Ada Admin")
    m10 = make_user(10, Role.manager, manager_id=1, name="Maya Manager")
    m20 = make_user(20, Role.manager, manager_id=1, name="Omar Manager")
    e101 = make_user(101, Role.employee, manager_id=10, name="Henry Smith")
    e102 = make_user(102, Role.intern, manager_id=10, name="Ivy Intern")
    e201 = make_user(201, Role.employee, manager_id=20, name="Jane Doe")
    e300 = make_user(300, Role.employee, name="Lone Wolf")
    return {
        "admin": admin, "m10": m10, "m20": m20,
        "e101": e101, "e102": e102, "e201": e201, "e300": e300,
    }
