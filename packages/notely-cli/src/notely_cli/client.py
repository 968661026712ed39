"""HTTP client for the Notely backend API.

Every request carries the ``x-owner`` header so the backend scopes document
queries to the signed-in user, mirroring the web client's ``api()`` helper.

Example usage:
    with NotelyClient(owner="u1") as client:
        doc = client.create_doc()
        client.update_doc(doc["id"], title="Lecture 3")
"""

from __future__ import annotations

import logging
from pathlib import Path
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import httpx

logger = logging.getLogger(__name__)

ANONYMOUS_OWNER = "anon"
NO_ANSWER = "(no answer)"
_FILENAME = re.compile(r'filename="?([^";]+)"?')


class NotelyAPIError(Exception):
    """Raised for any non-2xx response from the backend."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")


def _answer(response: httpx.Response) -> str:
    body = response.json()
    answer = body.get("answer") if isinstance(body, dict) else None
    return answer or NO_ANSWER


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or response.reason_phrase)
    return response.text


class NotelyClient:
    """Synchronous client with one method per backend endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        owner: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            base_url: Backend server URL. If None, loaded from settings.
            owner: uid sent as x-owner. If None, loaded from settings.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        if base_url is None or owner is None or timeout is None:
            from .config import get_settings

            settings = get_settings()
            base_url = base_url or settings.api_url
            owner = owner if owner is not None else settings.owner
            timeout = timeout or settings.timeout

        self.base_url = base_url.rstrip("/")
        self.owner = (owner or "").strip() or ANONYMOUS_OWNER
        self._http = httpx.Client(
            base_url=self.base_url,
            headers={"Accept": "application/json", "x-owner": self.owner},
            timeout=timeout,
            transport=transport,
        )
        logger.debug(f"NotelyClient initialized with base_url={self.base_url}")

    def __enter__(self) -> "NotelyClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = self._http.request(method, path, **kwargs)
        if response.is_error:
            raise NotelyAPIError(response.status_code, _error_message(response))
        return response

    # System

    def ping(self) -> Dict[str, Any]:
        return self._request("GET", "/api").json()

    # Documents

    def list_docs(self, query: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"q": query} if query else None
        return self._request("GET", "/api/docs", params=params).json()

    def create_doc(
        self, title: Optional[str] = None, content_html: Optional[str] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if title is not None:
            body["title"] = title
        if content_html is not None:
            body["contentHtml"] = content_html
        return self._request("POST", "/api/docs", json=body).json()

    def get_doc(self, doc_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/docs/{doc_id}").json()

    def update_doc(
        self,
        doc_id: str,
        title: Optional[str] = None,
        content_html: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if title is not None:
            body["title"] = title
        if content_html is not None:
            body["contentHtml"] = content_html
        return self._request("PUT", f"/api/docs/{doc_id}", json=body).json()

    def delete_doc(self, doc_id: str) -> bool:
        return bool(self._request("DELETE", f"/api/docs/{doc_id}").json().get("ok"))

    def get_chat(self, doc_id: str) -> List[Dict[str, str]]:
        return self._request("GET", f"/api/docs/{doc_id}/chat").json().get("messages", [])

    def save_chat(self, doc_id: str, messages: Iterable[Mapping[str, str]]) -> List[Dict[str, str]]:
        body = {"messages": [dict(message) for message in messages]}
        return self._request("PUT", f"/api/docs/{doc_id}/chat", json=body).json().get("messages", [])

    def import_pdf(self, path: Path) -> Dict[str, Any]:
        path = Path(path)
        with open(path, "rb") as f:
            files = {"file": (path.name, f, "application/pdf")}
            return self._request("POST", "/api/docs/import", files=files).json()

    def export_doc(self, doc_id: str, fmt: str = "html") -> Tuple[str, bytes]:
        """Return ``(filename, content)`` as offered by the server."""
        response = self._request("GET", f"/api/docs/{doc_id}/export", params={"format": fmt})
        match = _FILENAME.search(response.headers.get("content-disposition", ""))
        filename = match.group(1) if match else f"document.{fmt}"
        return filename, response.content

    # AI

    def ai_inline(
        self, prompt: str, mode: Optional[str] = None, context_html: Optional[str] = None
    ) -> str:
        body = {"prompt": prompt, "mode": mode, "contextHtml": context_html}
        return _answer(self._request("POST", "/api/ai/inline", json=body))

    def ai_enhance(self, prompt: str, context_html: Optional[str] = None) -> str:
        body = {"prompt": prompt, "contextHtml": context_html}
        return _answer(self._request("POST", "/api/ai/enhance", json=body))

    def ai_chat(
        self,
        prompt: str,
        context_html: Optional[str] = None,
        messages: Iterable[Mapping[str, str]] = (),
    ) -> str:
        body = {
            "prompt": prompt,
            "contextHtml": context_html,
            "messages": [dict(message) for message in messages],
        }
        return _answer(self._request("POST", "/api/ai/chat", json=body))


__all__ = ["NotelyClient", "NotelyAPIError", "ANONYMOUS_OWNER", "NO_ANSWER"]
