import mongomock
import pytest
from fastapi.testclient import TestClient
from passlib.context import CryptContext

import auth
import config
import database
import media
from auth import TokenClaims
from main import app
from ratelimit import limiter

ADMIN_EMAIL = "admin@school.edu"
ADMIN_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def mock_db(monkeypatch, tmp_path):
    db = mongomock.MongoClient()["school-cms-test"]
    monkeypatch.setattr(database, "db", db)
    monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(limiter, "enabled", False)
    # cheap hashes keep the suite fast
    monkeypatch.setattr(auth, "pwd_context", CryptContext(schemes=["bcrypt"], bcrypt__rounds=4))
    monkeypatch.setattr(media, "_client", None)
    yield db
    app.dependency_overrides.clear()


@pytest.fixture
def client(mock_db):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_user(mock_db):
    user_id = database.create_document("users", {
        "email": ADMIN_EMAIL,
        "password": auth.hash_password(ADMIN_PASSWORD),
        "name": "Admin User",
        "role": "admin",
        "isActive": True,
    })
    user = mock_db["users"].find_one({"email": ADMIN_EMAIL})
    user["id"] = user_id
    return user


@pytest.fixture
def token(admin_user):
    return auth.issue_token(TokenClaims(user_id=admin_user["id"], email=admin_user["email"], role="admin"))


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
