"""Owner-scoped CRUD over the note document collection."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection

from ..models.document import DEFAULT_CONTENT_HTML, DEFAULT_TITLE

logger = logging.getLogger(__name__)

StoredDocument = Dict[str, Any]


class InvalidDocumentId(ValueError):
    """Raised when a path id is not a valid ObjectId."""

    def __init__(self, doc_id: str):
        self.doc_id = doc_id
        super().__init__("invalid id")


class DocumentNotFound(LookupError):
    """Raised when no document matches owner and id."""

    def __init__(self, doc_id: str):
        self.doc_id = doc_id
        super().__init__("not found")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> datetime:
    # pymongo hands back naive datetimes that are already UTC
    if value is None:
        return _utcnow()
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_object_id(doc_id: str) -> ObjectId:
    if not isinstance(doc_id, str) or not ObjectId.is_valid(doc_id):
        raise InvalidDocumentId(str(doc_id))
    return ObjectId(doc_id)


def to_client(doc: StoredDocument) -> Dict[str, Any]:
    """Project a stored document onto the fields the client sees."""
    return {
        "id": str(doc["_id"]),
        "title": doc.get("title", DEFAULT_TITLE),
        "contentHtml": doc.get("contentHtml", DEFAULT_CONTENT_HTML),
        "createdAt": _as_utc(doc.get("createdAt")),
        "updatedAt": _as_utc(doc.get("updatedAt")),
    }


def _clean_messages(messages: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    return [
        {"role": str(message.get("role", "")), "content": str(message.get("content", ""))}
        for message in messages
    ]


class DocumentService:
    """Translate gateway operations into queries against one collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def list_documents(self, owner: str, query: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return the owner's documents, newest edit first.

        ``query`` filters titles by case-insensitive substring; regex
        metacharacters in it are matched literally.
        """
        criteria: Dict[str, Any] = {"owner": owner}
        if query and query.strip():
            criteria["title"] = {"$regex": re.escape(query.strip()), "$options": "i"}
        cursor = self.collection.find(criteria).sort("updatedAt", DESCENDING)
        return [to_client(doc) for doc in cursor]

    def create_document(
        self,
        owner: str,
        *,
        title: Optional[str] = None,
        content_html: Optional[str] = None,
    ) -> Dict[str, Any]:
        now = _utcnow()
        doc: StoredDocument = {
            "owner": owner,
            "title": DEFAULT_TITLE if title is None else title,
            "contentHtml": DEFAULT_CONTENT_HTML if content_html is None else content_html,
            "chat": [],
            "createdAt": now,
            "updatedAt": now,
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("Created document %s for owner %s", result.inserted_id, owner)
        return to_client(doc)

    def get_document(self, owner: str, doc_id: str) -> Dict[str, Any]:
        object_id = parse_object_id(doc_id)
        doc = self.collection.find_one({"_id": object_id, "owner": owner})
        if doc is None:
            raise DocumentNotFound(doc_id)
        return to_client(doc)

    def update_document(
        self,
        owner: str,
        doc_id: str,
        *,
        title: Optional[str] = None,
        content_html: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Apply a partial update; ``updatedAt`` moves even when nothing else does."""
        object_id = parse_object_id(doc_id)
        changes: Dict[str, Any] = {"updatedAt": _utcnow()}
        if title is not None:
            changes["title"] = title
        if content_html is not None:
            changes["contentHtml"] = content_html

        doc = self.collection.find_one_and_update(
            {"_id": object_id, "owner": owner},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise DocumentNotFound(doc_id)
        return to_client(doc)

    def delete_document(self, owner: str, doc_id: str) -> bool:
        """Delete the owner's document; returns whether anything was removed."""
        object_id = parse_object_id(doc_id)
        result = self.collection.delete_one({"_id": object_id, "owner": owner})
        if result.deleted_count:
            logger.info("Deleted document %s for owner %s", doc_id, owner)
        return result.deleted_count > 0

    def get_chat(self, owner: str, doc_id: str) -> List[Dict[str, str]]:
        object_id = parse_object_id(doc_id)
        doc = self.collection.find_one({"_id": object_id, "owner": owner}, {"chat": 1})
        if doc is None:
            raise DocumentNotFound(doc_id)
        return _clean_messages(doc.get("chat") or [])

    def replace_chat(
        self, owner: str, doc_id: str, messages: Iterable[Dict[str, Any]]
    ) -> List[Dict[str, str]]:
        """Overwrite the transcript with ``messages`` and return what was stored."""
        object_id = parse_object_id(doc_id)
        chat = _clean_messages(messages)
        doc = self.collection.find_one_and_update(
            {"_id": object_id, "owner": owner},
            {"$set": {"chat": chat, "updatedAt": _utcnow()}},
            projection={"chat": 1},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise DocumentNotFound(doc_id)
        return _clean_messages(doc.get("chat") or [])


__all__ = [
    "DocumentService",
    "DocumentNotFound",
    "InvalidDocumentId",
    "parse_object_id",
    "to_client",
]
