"""Word (.docx) rendering of editor HTML."""

from __future__ import annotations

from io import BytesIO

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from docx import Document
from docx.enum.text import WD_COLOR_INDEX
from docx.shared import Inches
from docx.text.paragraph import Paragraph

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

HEADING_LEVELS = {"h1": 1, "h2": 2, "h3": 3}
DOCX_BLOCKS = ("h1", "h2", "h3", "p", "blockquote", "li")


def _add_runs(paragraph: Paragraph, node: Tag) -> None:
    """Copy inline text into runs, keeping bold/italic/underline/highlight."""
    for child in node.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            if str(child):
                paragraph.add_run(str(child))
            continue
        if not isinstance(child, Tag):
            continue
        name = child.name.lower()
        if name == "br":
            paragraph.add_run().add_break()
            continue
        text = child.get_text()
        if not text:
            continue
        run = paragraph.add_run(text)
        if name in ("strong", "b"):
            run.bold = True
        elif name in ("em", "i"):
            run.italic = True
        elif name == "u":
            run.underline = True
        elif name == "mark":
            run.font.highlight_color = WD_COLOR_INDEX.YELLOW


def render_docx(title: str, content_html: str) -> bytes:
    """
    Build a .docx from editor HTML.

    h1-h3 become Word headings, paragraphs keep inline emphasis, blockquotes
    are indented and list items are bulleted. Other markup is flattened to
    its text inside the enclosing block.
    """
    document = Document()
    document.core_properties.title = title or ""

    soup = BeautifulSoup(content_html or "", "html.parser")
    blocks = [
        tag for tag in soup.find_all(DOCX_BLOCKS)
        if tag.find_parent(DOCX_BLOCKS) is None
    ]
    written = 0
    for tag in blocks:
        text = tag.get_text()
        if tag.name in HEADING_LEVELS:
            document.add_heading(text, level=HEADING_LEVELS[tag.name])
        elif tag.name == "p":
            if not text.strip():
                continue
            _add_runs(document.add_paragraph(), tag)
        elif tag.name == "blockquote":
            quote = document.add_paragraph(text.strip())
            quote.paragraph_format.left_indent = Inches(0.5)
        else:
            document.add_paragraph(f"• {text.strip()}")
        written += 1

    if not written:
        document.add_paragraph("")

    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


__all__ = ["render_docx", "DOCX_MEDIA_TYPE"]
