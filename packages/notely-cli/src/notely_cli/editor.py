"""Editor-side behaviour: title derivation, debounced autosave, chat history."""

from __future__ import annotations

from html import escape
import logging
import threading
from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup
import httpx

from .client import NotelyAPIError, NotelyClient

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled doc"
CHAT_GREETING = "Hi! Select text and click Ask AI, or send a chat."
EMPTY_SELECTION_REPLY = "Select some text first."
DEFAULT_ASK_MODE = "explain"

Message = Dict[str, str]
SaveCallback = Callable[[str, str], None]


def derive_title(html: Optional[str]) -> str:
    """Text of the first h1/h2/h3/p in document order, else the default title."""
    soup = BeautifulSoup(html or "", "html.parser")
    first = soup.find(["h1", "h2", "h3", "p"])
    if first is None:
        return DEFAULT_TITLE
    return first.get_text().strip() or DEFAULT_TITLE


def mock_inline_answer(selected: str) -> str:
    return f'Mock answer for "{selected}". (Start the API server for real answers.)'


MOCK_CHAT_ANSWER = "(Mock) Start the API server or fix /api/ai/chat"


def insert_answer(html: Optional[str], answer: str) -> str:
    """Append ``answer`` to the document as an escaped blockquote."""
    return f"{html or ''}<blockquote>{escape(answer)}</blockquote>"


class Autosaver:
    """
    Trailing-edge debounce for document saves.

    Each ``schedule`` replaces the pending content and restarts the timer,
    so a burst of edits produces one ``save(title, html)`` call with the
    last content.
    """

    def __init__(self, save: SaveCallback, delay: float = 0.4):
        self._save = save
        self.delay = delay
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[tuple[str, str]] = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def schedule(self, html: str) -> None:
        title = derive_title(html)
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (title, html)
            self._timer = threading.Timer(self.delay, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> bool:
        """Save pending content now; returns whether anything was saved."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            pending, self._pending = self._pending, None
        if pending is None:
            return False
        title, html = pending
        try:
            self._save(title, html)
        except Exception as exc:
            # transient failures are dropped, the next edit saves again
            logger.warning("Autosave failed: %s", exc)
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = None


class ChatSession:
    """Side-panel chat for one document; every change persists the full transcript."""

    def __init__(self, client: NotelyClient, doc_id: str):
        self.client = client
        self.doc_id = doc_id
        self.messages: List[Message] = []

    def load(self) -> List[Message]:
        stored = self.client.get_chat(self.doc_id)
        self.messages = stored or [{"role": "assistant", "content": CHAT_GREETING}]
        return list(self.messages)

    def add_messages(self, new_messages: List[Message]) -> List[Message]:
        self.messages = self.messages + list(new_messages)
        try:
            self.client.save_chat(self.doc_id, self.messages)
        except (NotelyAPIError, httpx.HTTPError) as exc:
            logger.error("Chat save failed: %s", exc)
        return list(self.messages)

    def ask_selection(
        self, selected: str, html: Optional[str] = None, mode: Optional[str] = DEFAULT_ASK_MODE
    ) -> str:
        """Run an inline action on ``selected`` and record the exchange."""
        if not selected or not selected.strip():
            self.add_messages([{"role": "assistant", "content": EMPTY_SELECTION_REPLY}])
            return EMPTY_SELECTION_REPLY
        try:
            answer = self.client.ai_inline(selected, mode=mode, context_html=html)
        except (NotelyAPIError, httpx.HTTPError) as exc:
            logger.warning("Inline AI failed, using mock answer: %s", exc)
            answer = mock_inline_answer(selected)
        self.add_messages(
            [{"role": "user", "content": selected}, {"role": "assistant", "content": answer}]
        )
        return answer

    def send(self, prompt: str, html: Optional[str] = None) -> Optional[str]:
        """Send a chat prompt; returns None when the prompt is blank."""
        prompt = (prompt or "").strip()
        if not prompt:
            return None
        history = list(self.messages)
        self.add_messages([{"role": "user", "content": prompt}])
        try:
            answer = self.client.ai_chat(prompt, context_html=html or "", messages=history)
        except (NotelyAPIError, httpx.HTTPError) as exc:
            logger.warning("Chat AI failed, using mock answer: %s", exc)
            answer = MOCK_CHAT_ANSWER
        self.add_messages([{"role": "assistant", "content": answer}])
        return answer


__all__ = [
    "Autosaver",
    "ChatSession",
    "derive_title",
    "insert_answer",
    "CHAT_GREETING",
    "DEFAULT_TITLE",
    "EMPTY_SELECTION_REPLY",
    "MOCK_CHAT_ANSWER",
    "mock_inline_answer",
]
