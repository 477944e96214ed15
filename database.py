"""
MongoDB wiring and document helpers.

The client is created once when DATABASE_URL and DATABASE_NAME are set;
otherwise `db` stays None and every store call fails as an operational
error.
"""
import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi.encoders import jsonable_encoder
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import settings
from schemas import account_defaults

logger = logging.getLogger(__name__)

AUTH = "auth"
USER = "user"
TRANSACTION = "transaction"

client: Optional[MongoClient] = None
db: Optional[Database] = None

if settings.database_url and settings.database_name:
    client = MongoClient(settings.database_url)
    db = client[settings.database_name]


def get_db() -> Optional[Database]:
    return db


def _collection(database: Optional[Database], name: str):
    if database is None:
        raise RuntimeError("Database is not configured")
    return database[name]


def ensure_indexes(database: Database) -> None:
    _collection(database, USER).create_index([("owner", ASCENDING)], unique=True)
    _collection(database, AUTH).create_index([("emailAddress", ASCENDING)])
    _collection(database, TRANSACTION).create_index([("owner", ASCENDING), ("transactionID", ASCENDING)])
    logger.info("Indexes ensured on %s", database.name)


def to_object_id(value: Any) -> ObjectId:
    # bson raises InvalidId for malformed strings; ObjectId(None) would mint a new id
    if value is None:
        raise ValueError("missing document id")
    return value if isinstance(value, ObjectId) else ObjectId(value)


# ----------------------
# Identity
# ----------------------

def find_auth_by_id(database: Database, auth_id: Any) -> Optional[Dict[str, Any]]:
    return _collection(database, AUTH).find_one({"_id": to_object_id(auth_id)})


def find_auth_by_email(database: Database, email: str) -> Optional[Dict[str, Any]]:
    return _collection(database, AUTH).find_one({"emailAddress": email})


def save_auth(database: Database, auth_doc: Dict[str, Any], *fields: str) -> None:
    _collection(database, AUTH).update_one(
        {"_id": auth_doc["_id"]},
        {"$set": {f: auth_doc[f] for f in fields}},
    )


# ----------------------
# Account
# ----------------------

def find_account_by_owner(database: Database, owner_id: Any) -> Optional[Dict[str, Any]]:
    return _collection(database, USER).find_one({"owner": to_object_id(owner_id)})


def save_account(database: Database, account_doc: Dict[str, Any], *fields: str) -> None:
    _collection(database, USER).update_one(
        {"_id": account_doc["_id"]},
        {"$set": {f: account_doc[f] for f in fields}},
    )


def populate_account(database: Database, account_doc: Dict[str, Any]) -> Dict[str, Any]:
    """Expand `owner` to its public identity fields and `transactions` to
    full documents, keeping list order and dropping dangling references."""
    populated = {**account_defaults(), **account_doc}

    populated["owner"] = _collection(database, AUTH).find_one(
        {"_id": account_doc["owner"]},
        {"emailAddress": 1, "fullname": 1},
    )

    tx_ids = list(populated["transactions"])
    by_id = {t["_id"]: t for t in _collection(database, TRANSACTION).find({"_id": {"$in": tx_ids}})}
    populated["transactions"] = [by_id[i] for i in tx_ids if i in by_id]
    return populated


# ----------------------
# Transaction
# ----------------------

def find_transaction(database: Database, owner_id: Any, transaction_id: str) -> Optional[Dict[str, Any]]:
    return _collection(database, TRANSACTION).find_one({
        "owner": to_object_id(owner_id),
        "transactionID": transaction_id,
    })


def save_transaction(database: Database, tx_doc: Dict[str, Any], *fields: str) -> None:
    _collection(database, TRANSACTION).update_one(
        {"_id": tx_doc["_id"]},
        {"$set": {f: tx_doc[f] for f in fields}},
    )


def serialize(doc: Any) -> Any:
    return jsonable_encoder(doc, custom_encoder={ObjectId: str})


def collection_names(database: Database, limit: int = 10) -> List[str]:
    return database.list_collection_names()[:limit]
