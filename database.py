"""
MongoDB access

One client per process. Route handlers go through `Repository` (one per
collection) or `SingletonRepository` (one document per collection) rather
than touching `db` directly, so tests can swap `database.db` for a mock.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from bson import ObjectId
from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient, ReturnDocument

import config

logger = logging.getLogger(__name__)

SortSpec = Sequence[Tuple[str, int]]

client = MongoClient(
    config.DATABASE_URL,
    maxPoolSize=config.DB_MAX_POOL_SIZE,
    serverSelectionTimeoutMS=config.DB_SERVER_SELECTION_TIMEOUT_MS,
    socketTimeoutMS=config.DB_SOCKET_TIMEOUT_MS,
)
db = client[config.DATABASE_NAME]


def utcnow() -> datetime:
    # BSON dates carry no zone; everything is stored as naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_db():
    if db is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return db


def object_id(value: str, label: str = "document") -> ObjectId:
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID")
    return ObjectId(value)


def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a document, stamping createdAt/updatedAt. Returns the new id."""
    if isinstance(data, BaseModel):
        doc = data.model_dump(by_alias=True)
    else:
        doc = dict(data)
    now = utcnow()
    doc.setdefault("createdAt", now)
    doc["updatedAt"] = now
    result = get_db()[collection_name].insert_one(doc)
    return str(result.inserted_id)


def ensure_indexes():
    database = get_db()
    database["users"].create_index([("email", ASCENDING)], unique=True)
    database["analytics"].create_index([("date", ASCENDING)], unique=True)
    database["events"].create_index([("date", ASCENDING)])
    database["banners"].create_index([("order", ASCENDING)])


class Repository:
    """The four document operations the CRUD routes are written against."""

    def __init__(self, collection_name: str):
        self.collection_name = collection_name

    @property
    def collection(self):
        return get_db()[self.collection_name]

    def find(
        self,
        filter_dict: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[dict]:
        cursor = self.collection.find(filter_dict or {})
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def count(self, filter_dict: Optional[Dict[str, Any]] = None) -> int:
        return self.collection.count_documents(filter_dict or {})

    def find_one(self, doc_id: ObjectId) -> Optional[dict]:
        return self.collection.find_one({"_id": doc_id})

    def insert_one(self, data: dict, created_by: Optional[str] = None) -> dict:
        doc = dict(data)
        if created_by is not None:
            doc["createdBy"] = created_by
        inserted_id = create_document(self.collection_name, doc)
        return self.find_one(ObjectId(inserted_id))

    def update_one(self, doc_id: ObjectId, fields: dict, updated_by: Optional[str] = None) -> Optional[dict]:
        changes = dict(fields)
        changes.pop("_id", None)
        changes["updatedAt"] = utcnow()
        if updated_by is not None:
            changes["updatedBy"] = updated_by
        return self.collection.find_one_and_update(
            {"_id": doc_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

    def delete_one(self, doc_id: ObjectId) -> bool:
        return self.collection.delete_one({"_id": doc_id}).deleted_count > 0


class SingletonRepository:
    """A collection holding exactly one document, written by upsert."""

    def __init__(self, collection_name: str, selector: Optional[Dict[str, Any]] = None):
        self.collection_name = collection_name
        self.selector = selector or {}

    @property
    def collection(self):
        return get_db()[self.collection_name]

    def get(self) -> Optional[dict]:
        return self.collection.find_one(self.selector)

    def replace(self, data: dict) -> dict:
        doc = {**self.selector, **data}
        doc.pop("_id", None)
        self.collection.replace_one(self.selector, doc, upsert=True)
        return self.get()

    def merge(self, fields: dict) -> dict:
        changes = {**self.selector, **fields}
        changes.pop("_id", None)
        self.collection.update_one(self.selector, {"$set": changes}, upsert=True)
        return self.get()
