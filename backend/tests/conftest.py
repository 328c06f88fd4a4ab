import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the environment must be ready first.
_TMP = Path(tempfile.mkdtemp(prefix="bookstore_test_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["ENV"] = "dev"
os.environ["JWT_SECRET"] = "test-secret-not-for-prod"
os.environ["SEED_ON_STARTUP"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from bookstore import main, services
from bookstore.database import engine
from bookstore.models import UserRole
from bookstore.utils.rate_limit import FailedLoginThrottle

ADMIN_EMAIL = "admin@example.com"
USER_EMAIL = "reader@example.com"
PASSWORD = "s3cret-pass"


@pytest.fixture(autouse=True)
def reset_db(monkeypatch):
    """Give every test empty tables and a fresh login throttle."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    monkeypatch.setattr(main, "_login_throttle", FailedLoginThrottle(3, 60))
    yield


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def client():
    # entering the context runs the lifespan (table creation + seeding)
    with TestClient(main.app) as c:
        yield c


def login(client, email, password=PASSWORD):
    r = client.post('/auth/login', json={'email': email, 'password': password})
    assert r.status_code == 200, r.text
    return r.json()['access_token']


@pytest.fixture
def admin_headers(client, session):
    services.UserService(session).create(ADMIN_EMAIL, PASSWORD, UserRole.ADMIN)
    return {'Authorization': f'Bearer {login(client, ADMIN_EMAIL)}'}


@pytest.fixture
def user_headers(client, session):
    services.UserService(session).create(USER_EMAIL, PASSWORD)
    return {'Authorization': f'Bearer {login(client, USER_EMAIL)}'}
