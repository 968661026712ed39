"""Document-related Pydantic models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TITLE = "Untitled doc"
DEFAULT_CONTENT_HTML = "<h1>Untitled doc</h1><p></p>"


class ChatMessage(BaseModel):
    """One entry of the side-panel chat transcript."""

    role: str = Field(default="", description="user or assistant")
    content: str = Field(default="")


class DocumentOut(BaseModel):
    """Client projection of a stored document."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "665f1c2ab7e4a1d2c3b4a5f6",
                "title": "Biology lecture 3",
                "contentHtml": "<h1>Biology lecture 3</h1><p>Mitochondria...</p>",
                "createdAt": "2025-01-10T09:00:00Z",
                "updatedAt": "2025-01-15T14:30:00Z",
            }
        },
    )

    id: str = Field(..., description="Hex ObjectId")
    title: str
    content_html: str = Field(..., alias="contentHtml")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class DocumentCreate(BaseModel):
    """Request payload to create a document; missing fields get defaults."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    content_html: Optional[str] = Field(None, alias="contentHtml")


class DocumentUpdate(BaseModel):
    """Partial update; only fields that are present are written."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    content_html: Optional[str] = Field(None, alias="contentHtml")


class ChatTranscript(BaseModel):
    """Body and response of the chat endpoints."""

    messages: list[ChatMessage] = Field(default_factory=list)


class DeleteResult(BaseModel):
    ok: bool = True


class ExportFormat(str, Enum):
    HTML = "html"
    TXT = "txt"
    DOCX = "docx"


__all__ = [
    "DEFAULT_TITLE",
    "DEFAULT_CONTENT_HTML",
    "ChatMessage",
    "DocumentOut",
    "DocumentCreate",
    "DocumentUpdate",
    "ChatTranscript",
    "DeleteResult",
    "ExportFormat",
]
