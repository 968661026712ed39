"""Turn an uploaded PDF into editor HTML, one section per page."""

from __future__ import annotations

from html import escape
import io
import logging
from pathlib import PurePath
import re
from typing import List, Tuple

from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
DEFAULT_IMPORT_TITLE = "Imported PDF"
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_WHITESPACE = re.compile(r"\s+")


class PdfImportError(ValueError):
    """Raised when an upload is not a readable PDF."""


def extract_pages(data: bytes) -> List[str]:
    """Return the extracted text of every page (empty string for image-only pages)."""
    if not data.startswith(PDF_MAGIC):
        raise PdfImportError("File is not a PDF")
    try:
        reader = PdfReader(io.BytesIO(data))
        pages: List[str] = []
        for index, page in enumerate(reader.pages, start=1):
            try:
                pages.append(page.extract_text() or "")
            except Exception as exc:
                logger.warning("Text extraction failed on page %d: %s", index, exc)
                pages.append("")
        return pages
    except (PdfReadError, ValueError, KeyError, TypeError) as exc:
        raise PdfImportError(f"Failed to parse PDF: {exc}") from exc


def split_paragraphs(text: str) -> List[str]:
    paragraphs = []
    for block in _PARAGRAPH_BREAK.split(text.replace("\r\n", "\n")):
        collapsed = _WHITESPACE.sub(" ", block).strip()
        if collapsed:
            paragraphs.append(collapsed)
    return paragraphs


def pages_to_html(title: str, pages: List[str]) -> str:
    parts = [f"<h1>{escape(title)}</h1>"]
    for number, text in enumerate(pages, start=1):
        parts.append(f"<h2>Page {number}</h2>")
        paragraphs = split_paragraphs(text)
        if not paragraphs:
            parts.append("<p></p>")
        parts.extend(f"<p>{escape(paragraph)}</p>" for paragraph in paragraphs)
    return "".join(parts)


def title_from_filename(filename: str | None) -> str:
    stem = PurePath(filename or "").stem.strip()
    return stem or DEFAULT_IMPORT_TITLE


def convert_pdf(filename: str | None, data: bytes) -> Tuple[str, str]:
    """Return ``(title, content_html)`` for an uploaded PDF."""
    title = title_from_filename(filename)
    pages = extract_pages(data)
    logger.info("Imported PDF %r with %d page(s)", filename, len(pages))
    return title, pages_to_html(title, pages)


__all__ = [
    "PdfImportError",
    "extract_pages",
    "split_paragraphs",
    "pages_to_html",
    "title_from_filename",
    "convert_pdf",
]
