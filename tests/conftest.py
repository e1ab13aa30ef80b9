import os
import tempfile
import uuid

# Point the app at a throwaway SQLite file before anything imports taskdesk.config
_DB_DIR = tempfile.mkdtemp(prefix="taskdesk-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"

import pytest
from fastapi.testclient import TestClient
from taskdesk.main import app
from taskdesk.database import SessionLocal, Base, engine
from taskdesk.models.user import User


# Recreate all tables for each test
@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def register(client, username=None, password="Pass123!"):
    """Register and log in a fresh user; returns (user dict, auth headers)."""
    username = username or f"user_{uuid.uuid4().hex[:8]}"
    email = f"{username}@example.com"
    r = client.post("/api/auth/register", json={"username": username, "email": email, "password": password})
    assert r.status_code == 201, r.text
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    return data["user"], {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture
def promote():
    def _promote(user_id: int):
        session = SessionLocal()
        try:
            session.query(User).filter(User.id == user_id).update({"role": "admin"})
            session.commit()
        finally:
            session.close()
    return _promote


@pytest.fixture
def signup(client):
    def _signup(username=None, password="Pass123!"):
        return register(client, username, password)
    return _signup
