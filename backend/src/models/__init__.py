"""Pydantic models for data validation and serialization."""

from .ai import AnswerResponse, AssistMode, ChatRequest, EnhanceRequest, InlineRequest
from .auth import ANONYMOUS_OWNER, OwnerIdentity, OwnerSource
from .document import (
    DEFAULT_CONTENT_HTML,
    DEFAULT_TITLE,
    ChatMessage,
    ChatTranscript,
    DeleteResult,
    DocumentCreate,
    DocumentOut,
    DocumentUpdate,
    ExportFormat,
)

__all__ = [
    "DEFAULT_TITLE",
    "DEFAULT_CONTENT_HTML",
    "ChatMessage",
    "ChatTranscript",
    "DeleteResult",
    "DocumentCreate",
    "DocumentOut",
    "DocumentUpdate",
    "ExportFormat",
    "AssistMode",
    "InlineRequest",
    "EnhanceRequest",
    "ChatRequest",
    "AnswerResponse",
    "ANONYMOUS_OWNER",
    "OwnerIdentity",
    "OwnerSource",
]
