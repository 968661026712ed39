"""HTTP API routes for the Gemini note assistant."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ...models.ai import AnswerResponse, ChatRequest, EnhanceRequest, InlineRequest
from ...services.assistant import NoteAssistant, get_note_assistant

logger = logging.getLogger(__name__)

router = APIRouter()

AI_FAILURE_MESSAGE = "Failed to generate AI response"


def _require(value: Optional[str], message: str) -> str:
    if not value or not value.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "validation_error", "message": message},
        )
    return value


def _ai_failure(action: str, exc: Exception) -> HTTPException:
    logger.error("AI %s failed: %s", action, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "ai_error", "message": AI_FAILURE_MESSAGE},
    )


@router.post("/api/ai/inline", response_model=AnswerResponse)
async def inline(
    request: InlineRequest,
    assistant: NoteAssistant = Depends(get_note_assistant),
):
    """Answer a toolbar action (explain, expand, ...) for the highlighted text."""
    highlight = _require(request.prompt, "Highlight is required")
    try:
        answer = await assistant.inline(highlight, request.context_html, request.mode)
    except Exception as exc:
        raise _ai_failure(request.mode or "inline", exc) from exc
    return AnswerResponse(answer=answer)


@router.post("/api/ai/enhance", response_model=AnswerResponse)
async def enhance(
    request: EnhanceRequest,
    assistant: NoteAssistant = Depends(get_note_assistant),
):
    highlight = _require(request.prompt, "Highlight is required")
    try:
        answer = await assistant.enhance(highlight)
    except Exception as exc:
        raise _ai_failure("enhance", exc) from exc
    return AnswerResponse(answer=answer)


@router.post("/api/ai/chat", response_model=AnswerResponse)
async def chat(
    request: ChatRequest,
    assistant: NoteAssistant = Depends(get_note_assistant),
):
    """Reply in the side-panel chat using the document as context."""
    prompt = _require(request.prompt, "Prompt is required")
    try:
        answer = await assistant.chat(prompt, request.context_html, request.messages)
    except Exception as exc:
        raise _ai_failure("chat", exc) from exc
    return AnswerResponse(answer=answer)


__all__ = ["router", "AI_FAILURE_MESSAGE"]
