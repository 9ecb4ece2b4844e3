import os

# Must be set before taskdesk is imported: settings and engine are built at import time.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["OPEN_CRUD_ROUTES"] = "false"

import pytest
from fastapi.testclient import TestClient

from taskdesk.core.config import settings
from taskdesk.core.security import get_password_hash
from taskdesk.db.session import SessionLocal, engine
from taskdesk.main import app
from taskdesk.models.base import Base
from taskdesk.models.user import User

PASSWORD = "testpass"


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def open_routes(monkeypatch):
    """Switch to the permissive legacy contract for one test."""
    monkeypatch.setattr(settings, "open_crud_routes", True)


def ensure_user(email: str, role: str = "employee", name: str | None = None, password: str = PASSWORD) -> User:
    db = SessionLocal()
    try:
        u = db.query(User).filter(User.email == email).first()
        if not u:
            u = User(name=name or email.split("@")[0], email=email, hashed_password=get_password_hash(password), role=role)
            db.add(u)
            db.commit()
            db.refresh(u)
        return u
    finally:
        db.close()


def login(client: TestClient, email: str, role: str = "employee") -> dict:
    ensure_user(email, role=role)
    r = client.post("/api/users/login", json={"email": email, "password": PASSWORD})
    assert r.status_code == 200, r.text
    return r.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin(client):
    data = login(client, "admin@example.com", role="admin")
    return {"id": data["id"], "headers": bearer(data["token"])}


@pytest.fixture()
def employee(client):
    data = login(client, "emp1@example.com", role="employee")
    return {"id": data["id"], "headers": bearer(data["token"])}
