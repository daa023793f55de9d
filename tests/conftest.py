import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from hrms.config import settings
from hrms.database import Base, get_db
from hrms.main import app
from hrms.models.user import User

TEST_DB_URL = "sqlite:///./test_hrms.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def fixed_policy(monkeypatch):
    # a local .env must not change calendar or policy expectations
    monkeypatch.setattr(settings, "STANDARD_WORK_HOURS", 8.0)
    monkeypatch.setattr(settings, "HALF_DAY_MIN_HOURS", 4.0)
    monkeypatch.setattr(settings, "LATE_IN_HOUR", 11)
    monkeypatch.setattr(settings, "EARLY_OUT_HOUR", 17)
    monkeypatch.setattr(settings, "BUSINESS_TIMEZONE", "UTC")
    monkeypatch.setattr(settings, "OPEN_SHIFT_DAY_CREDIT", 0.0)
    monkeypatch.setattr(settings, "GEOFENCE_POLICY", "flag")
    monkeypatch.setattr(settings, "MONTHLY_LEAVE_QUOTA", 2)
    monkeypatch.setattr(settings, "LEAVE_REASON_MIN_LENGTH", 10)
    monkeypatch.setattr(settings, "WEEKLY_OFF_DAYS", [6])
    monkeypatch.setattr(settings, "EXTRA_HOLIDAYS", [])


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    users = {
        "admin": User(emp_id="admin001", name="Admin", role="Admin", department="Management"),
        "sub_admin": User(emp_id="sub001", name="Sub Admin", role="Sub-Admin", department="Management"),
        "hr": User(emp_id="hr001", name="HR Manager", role="HR", department="HR"),
        "lead": User(emp_id="lead001", name="Team Lead", role="Team Lead", department="Dev"),
        "employee": User(emp_id="emp001", name="Employee", role="Employee", department="Dev"),
        "other": User(emp_id="emp002", name="Other Employee", role="Employee", department="Ops"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    users["employee"].manager_id = users["lead"].user_id
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


def get_token(client, emp_id: str) -> str:
    resp = client.post("/api/auth/login", json={"emp_id": emp_id})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, emp_id: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, emp_id)}"}
