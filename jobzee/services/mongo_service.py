"""
MongoDB Service - document helpers shared by every route module.

- serialize_doc / serialize_docs: ObjectId -> str, `_id` -> `id`, secrets removed
- parse_object_id: path parameter -> ObjectId (404 when malformed)
- paginate: skip/limit a cursor and build the pagination block
- naive_utc: request datetimes -> naive UTC for comparisons with stored values
"""

import math
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from pymongo.collection import Collection

# Never leave the API
PRIVATE_FIELDS = {"password_hash"}


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def _serialize_value(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def serialize_doc(doc: Optional[dict], exclude: tuple = ()) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    out = {}
    for key, value in doc.items():
        if key in PRIVATE_FIELDS or key in exclude:
            continue
        if key == "_id":
            out["id"] = str(value)
            continue
        out[key] = _serialize_value(value)
    return out


def serialize_docs(docs, exclude: tuple = ()) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc, exclude) for doc in docs]


def parse_object_id(value: str, entity: str = "Resource") -> ObjectId:
    """Parse an id from the URL; malformed ids are treated as missing documents."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=404, detail=f"{entity} not found")


def find_or_404(collection: Collection, doc_id: str, entity: str = "Resource", query: Optional[dict] = None) -> dict:
    """Fetch a document by id (plus optional extra filter) or raise 404."""
    filt = {"_id": parse_object_id(doc_id, entity)}
    if query:
        filt.update(query)
    doc = collection.find_one(filt)
    if not doc:
        raise HTTPException(status_code=404, detail=f"{entity} not found")
    return doc


def pagination_info(page: int, limit: int, total: int) -> dict:
    pages = math.ceil(total / limit) if limit else 0
    return {
        "current": page,
        "pages": pages,
        "total": total,
        "has_next": page < pages,
        "has_prev": page > 1,
    }


def paginate(collection: Collection, query: dict, page: int, limit: int,
             sort: Optional[list] = None, projection: Optional[dict] = None):
    """
    Run a paginated find.

    Returns:
        (documents, pagination dict)
    """
    total = collection.count_documents(query)
    cursor = collection.find(query, projection)
    if sort:
        cursor = cursor.sort(sort)
    docs = list(cursor.skip((page - 1) * limit).limit(limit))
    return docs, pagination_info(page, limit, total)


def utcnow() -> datetime:
    return datetime.utcnow()


def drop_none(data: dict) -> dict:
    """Keep only the keys the client actually sent with a value."""
    return {k: v for k, v in data.items() if v is not None}


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Store request datetimes the way pymongo returns them: naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
