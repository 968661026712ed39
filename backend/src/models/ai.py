"""Request/response models for the AI endpoints."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .document import ChatMessage


class AssistMode(str, Enum):
    """Instruction templates selectable from the editor toolbar."""

    EXPLAIN = "explain"
    EXPAND = "expand"
    SUMMARIZE = "summarize"
    QUESTION = "question"
    CONNECT = "connect"
    ENHANCE = "enhance"
    CHAT = "chat"


class InlineRequest(BaseModel):
    """Highlight plus surrounding notes for an inline action."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[str] = Field(None, description="Highlighted text")
    # Plain string so unknown tags fall through to the default instruction.
    mode: Optional[str] = None
    context_html: Optional[str] = Field(None, alias="contextHtml")


class EnhanceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[str] = Field(None, description="Highlighted text")
    context_html: Optional[str] = Field(None, alias="contextHtml")


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[str] = None
    context_html: Optional[str] = Field(None, alias="contextHtml")
    messages: list[ChatMessage] = Field(default_factory=list)


class AnswerResponse(BaseModel):
    answer: str


__all__ = ["AssistMode", "InlineRequest", "EnhanceRequest", "ChatRequest", "AnswerResponse"]
