import mongomock
import pytest
from fastapi.testclient import TestClient

from config import get_settings, settings
from database import get_db
from main import app

OWNER_EMAIL = settings.owner_email


@pytest.fixture
def mongo():
    return mongomock.MongoClient()["wallet_test"]


@pytest.fixture
def client(mongo):
    app.dependency_overrides[get_db] = lambda: mongo
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_identity(mongo):
    def _make(email, password="not-a-real-hash", fullname="Test User"):
        return mongo["auth"].insert_one({
            "emailAddress": email,
            "password": password,
            "fullname": fullname,
            "createdAt": "2024-01-01",
        }).inserted_id
    return _make


@pytest.fixture
def make_account(mongo):
    def _make(owner_id, **fields):
        doc = {"owner": owner_id, "balance": 0, "transactions": []}
        doc.update(fields)
        return mongo["user"].insert_one(doc).inserted_id
    return _make


@pytest.fixture
def make_transaction(mongo):
    def _make(owner_id, transaction_id, status="pending"):
        return mongo["transaction"].insert_one({
            "owner": owner_id,
            "transactionID": transaction_id,
            "status": status,
        }).inserted_id
    return _make


@pytest.fixture
def owner_id(make_identity):
    return make_identity(OWNER_EMAIL, fullname="Shop Owner")
