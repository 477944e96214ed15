from bson import ObjectId

from database import get_db
from main import app


def test_user_info_expands_owner_and_transactions(client, mongo, make_identity, make_account, make_transaction):
    auth_id = make_identity("a@b.com", fullname="Ada Buyer")
    t1 = make_transaction(auth_id, "T1")
    t2 = make_transaction(auth_id, "T2", status="shipped")
    account_id = make_account(auth_id, balance=40, transactions=[t2, t1])

    resp = client.post("/user/info", json={"ownerID": str(auth_id)})

    assert resp.status_code == 200
    body = resp.json()
    assert body["_id"] == str(account_id)
    assert body["owner"] == {"_id": str(auth_id), "emailAddress": "a@b.com", "fullname": "Ada Buyer"}
    assert body["balance"] == 40
    assert [t["transactionID"] for t in body["transactions"]] == ["T2", "T1"]
    assert body["transactions"][1]["status"] == "pending"


def test_user_info_never_exposes_password_hash(client, make_identity, make_account):
    auth_id = make_identity("a@b.com", password="$2b$12$secret")
    make_account(auth_id)

    body = client.post("/user/info", json={"ownerID": str(auth_id)}).json()

    assert "password" not in body["owner"]
    assert "createdAt" not in body["owner"]


def test_user_info_fills_defaults_and_drops_dangling_transactions(client, make_identity, make_account):
    auth_id = make_identity("a@b.com")
    make_account(auth_id, transactions=[ObjectId()])

    body = client.post("/user/info", json={"ownerID": str(auth_id)}).json()

    assert body["pending"] == 0
    assert body["transactionNum"] == 0
    assert body["earnings"] == 0
    assert body["transactions"] == []


def test_user_info_without_account_is_generic_failure(client, make_identity):
    auth_id = make_identity("a@b.com")

    resp = client.post("/user/info", json={"ownerID": str(auth_id)})

    assert resp.status_code == 500
    assert resp.json() == {"message": "Error fetching data, please try again later."}


def test_user_info_with_malformed_id_is_generic_failure(client):
    resp = client.post("/user/info", json={"ownerID": "not-an-object-id"})

    assert resp.status_code == 500
    assert resp.json()["message"] == "Error fetching data, please try again later."


def test_user_info_without_database_is_generic_failure(client):
    app.dependency_overrides[get_db] = lambda: None

    resp = client.post("/user/info", json={"ownerID": str(ObjectId())})

    assert resp.status_code == 500
    assert resp.json()["message"] == "Error fetching data, please try again later."
