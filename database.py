"""
Database Helper Functions with Fallback

Primary: MongoDB via environment variables DATABASE_URL and DATABASE_NAME
Fallback: Mongita (embedded, file-based MongoDB-compatible client) when env vars
          are not provided. This lets the app keep its data on-device without
          an external DB.
"""

import logging
from datetime import datetime, timezone
from typing import Union

from pydantic import BaseModel

import config

logger = logging.getLogger(__name__)

_client = None
_db = None


def connect():
    """Open the configured database, falling back to embedded Mongita."""
    global _client
    try:
        if config.DATABASE_URL and config.DATABASE_NAME:
            from pymongo import MongoClient  # type: ignore
            _client = MongoClient(config.DATABASE_URL)
            return _client[config.DATABASE_NAME]
        # Fallback to Mongita (embedded MongoDB-like client)
        from mongita import MongitaClientDisk  # type: ignore
        _client = MongitaClientDisk()
        return _client[config.FALLBACK_DATABASE_NAME]  # local file-based DB
    except Exception:
        logger.exception("Primary database unavailable, using in-memory Mongita")
        # As an ultimate fallback, use Mongita in-memory so the API stays usable
        from mongita import MongitaClientMemory  # type: ignore
        _client = MongitaClientMemory()
        return _client[f"{config.FALLBACK_DATABASE_NAME}_runtime"]


def get_db():
    """Return the process-wide database handle, connecting on first use."""
    global _db
    if _db is None:
        _db = connect()
    return _db


# Helper functions for common database operations

def create_document(db, collection_name: str, data: Union[BaseModel, dict]):
    """Insert a single document with timestamps. Returns inserted id (str)."""
    # Convert Pydantic model to dict if needed
    if isinstance(data, BaseModel):
        data_dict = data.model_dump(mode="json")
    else:
        # Copy to avoid mutating caller's data
        data_dict = dict(data)

    now = datetime.now(timezone.utc)
    data_dict.setdefault("created_at", now)
    data_dict["updated_at"] = now

    result = db[collection_name].insert_one(data_dict)
    inserted_id = getattr(result, "inserted_id", None)
    return str(inserted_id) if inserted_id is not None else None


def get_documents(db, collection_name: str, filter_dict: dict | None = None, limit: int | None = None):
    """Get documents from collection as a list, without the internal _id."""
    cursor = db[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return [strip_id(doc) for doc in cursor]


def strip_id(doc: dict | None) -> dict | None:
    if doc is None:
        return None
    doc = dict(doc)
    doc.pop("_id", None)
    return doc
