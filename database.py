"""
MongoDB access for the Storefront API

The connection is configured from DATABASE_URL / DATABASE_NAME. When no URL
is set, `db` stays None and the API answers 503 until one is configured.
"""
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from dotenv import load_dotenv
from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "storefront")

db: Optional[Database] = None

if DATABASE_URL:
    _client = MongoClient(DATABASE_URL, serverSelectionTimeoutMS=5000)
    db = _client[DATABASE_NAME]


def get_db() -> Database:
    if db is None:
        raise HTTPException(status_code=503, detail="Database not configured")
    return db


def now() -> datetime:
    return datetime.now(timezone.utc)


def today() -> str:
    return now().date().isoformat()


def create_document(database: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document, stamping created_at/updated_at, and return its id as a string."""
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = dict(data)
    data_dict.pop("id", None)
    stamp = now()
    data_dict.setdefault("created_at", stamp)
    data_dict["updated_at"] = stamp
    result = database[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(database: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None,
                  limit: Optional[int] = None, sort: Optional[List] = None) -> List[Dict[str, Any]]:
    cursor = database[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def to_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def to_public(doc: Optional[Dict[str, Any]]):
    if not doc:
        return doc
    doc["id"] = str(doc.pop("_id"))
    doc.pop("updated_at", None)
    return doc


def ensure_indexes(database: Database) -> None:
    database["order"].create_index([("order_id", ASCENDING)], unique=True)
    database["product"].create_index([("product_id", ASCENDING)], unique=True)
    logger.info(f"Indexes ensured on database {database.name}")
