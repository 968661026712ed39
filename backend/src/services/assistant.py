"""Gemini-backed note assistant (inline actions, enhance, side-panel chat)."""

from __future__ import annotations

from functools import lru_cache
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from llama_index.core.llms import LLM, ChatMessage as LlamaChatMessage, MessageRole
from llama_index.llms.google_genai import GoogleGenAI

from ..models.ai import AssistMode
from .config import AppConfig, get_config
from .prompt_loader import PromptLoader

logger = logging.getLogger(__name__)

CHAT_HISTORY_LIMIT = 5

MODE_INSTRUCTIONS: Dict[str, str] = {
    AssistMode.EXPLAIN.value: 'Explain the highlighted text in simple terms: "{highlight}"',
    AssistMode.EXPAND.value: (
        'Add relevant details, examples, or elaboration for the highlighted text: "{highlight}"'
    ),
    AssistMode.SUMMARIZE.value: 'Summarize the highlighted text concisely for notes: "{highlight}"',
    AssistMode.QUESTION.value: (
        'Generate a single clear question about the highlighted text for quizzing: "{highlight}"'
    ),
    AssistMode.CONNECT.value: (
        'Show connections between this highlighted text and other parts of the notes: "{highlight}"'
    ),
}
DEFAULT_INSTRUCTION = 'Provide a concise note-friendly insight for the highlighted text: "{highlight}"'

LLMFactory = Callable[[str], LLM]


class AssistantError(RuntimeError):
    """Raised when the hosted model cannot produce an answer."""


def build_instruction(mode: Optional[str], highlight: str) -> str:
    """Pick the mode-specific instruction; unknown or missing modes get the default."""
    template = MODE_INSTRUCTIONS.get((mode or "").strip().lower(), DEFAULT_INSTRUCTION)
    return template.format(highlight=highlight)


def _history_role(role: str) -> MessageRole:
    if role in ("assistant", "model"):
        return MessageRole.ASSISTANT
    return MessageRole.USER


def _field(message: Any, name: str) -> str:
    if isinstance(message, Mapping):
        return str(message.get(name, "") or "")
    return str(getattr(message, name, "") or "")


class NoteAssistant:
    """Build mode-specific conversations and send them to Gemini."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        llm_factory: LLMFactory | None = None,
        prompt_loader: PromptLoader | None = None,
    ) -> None:
        self.config = config or get_config()
        self.prompts = prompt_loader or PromptLoader()
        self._llm_factory = llm_factory or self._default_factory
        self._llms: Dict[str, LLM] = {}

    def _default_factory(self, model: str) -> LLM:
        if not self.config.gemini_api_key:
            raise AssistantError(
                "AI client not initialized (missing GEMINI_API_KEY or bad configuration)"
            )
        return GoogleGenAI(model=model, api_key=self.config.gemini_api_key)

    def _llm(self, model: str) -> LLM:
        if model not in self._llms:
            self._llms[model] = self._llm_factory(model)
        return self._llms[model]

    async def _complete(self, model: str, messages: List[LlamaChatMessage], *, action: str) -> str:
        logger.info("Gemini request", extra={"action": action, "model": model})
        try:
            response = await self._llm(model).achat(messages)
        except AssistantError:
            raise
        except Exception as exc:
            logger.exception("Gemini %s request failed: %s", action, exc)
            raise AssistantError(f"AI {action} failed: {exc}") from exc
        return response.message.content or ""

    async def inline(self, highlight: str, notes: Optional[str], mode: Optional[str]) -> str:
        """Answer an inline toolbar action for the highlighted text."""
        if not highlight:
            raise ValueError("Highlight is required")
        instruction = build_instruction(mode, highlight)
        messages = [
            LlamaChatMessage(role=MessageRole.SYSTEM, content=self.prompts.load("notes/system.md")),
            LlamaChatMessage(
                role=MessageRole.USER,
                content=f"Here are the notes:\n{notes or ''}\n\nInstruction:\n{instruction}",
            ),
            LlamaChatMessage(role=MessageRole.USER, content=highlight),
        ]
        return await self._complete(self.config.gemini_model, messages, action=mode or "inline")

    async def enhance(self, highlight: str) -> str:
        """Lightly polish the highlighted text without changing its meaning."""
        if not highlight:
            raise ValueError("Highlight is required")
        messages = [
            LlamaChatMessage(role=MessageRole.SYSTEM, content=self.prompts.load("notes/enhance.md")),
            LlamaChatMessage(
                role=MessageRole.USER,
                content=f"Enhance this highlighted text:\n\n{highlight}",
            ),
            LlamaChatMessage(role=MessageRole.USER, content=highlight),
        ]
        return await self._complete(self.config.gemini_model, messages, action="enhance")

    async def chat(
        self,
        prompt: str,
        context_html: Optional[str],
        messages: Iterable[Any] = (),
    ) -> str:
        """Continue the side-panel conversation grounded in the document."""
        if not prompt:
            raise ValueError("Prompt is required")
        history = list(messages)[-CHAT_HISTORY_LIMIT:]
        conversation = [
            LlamaChatMessage(role=MessageRole.SYSTEM, content=self.prompts.load("notes/chat.md")),
            LlamaChatMessage(role=MessageRole.USER, content=f"Here are my notes:\n{context_html or ''}"),
        ]
        conversation.extend(
            LlamaChatMessage(role=_history_role(_field(m, "role")), content=_field(m, "content"))
            for m in history
        )
        conversation.append(LlamaChatMessage(role=MessageRole.USER, content=prompt))
        return await self._complete(self.config.gemini_chat_model, conversation, action="chat")


@lru_cache(maxsize=1)
def get_note_assistant() -> NoteAssistant:
    """Shared assistant instance (LLM clients are reused across requests)."""
    return NoteAssistant()


__all__ = [
    "NoteAssistant",
    "AssistantError",
    "build_instruction",
    "get_note_assistant",
    "MODE_INSTRUCTIONS",
    "DEFAULT_INSTRUCTION",
    "CHAT_HISTORY_LIMIT",
]
