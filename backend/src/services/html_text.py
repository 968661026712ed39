"""HTML helpers for exporting editor content."""

from __future__ import annotations

from html import escape
import re

from bs4 import BeautifulSoup

BLOCK_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6", "p", "li", "blockquote", "pre")
_WHITESPACE = re.compile(r"\s+")
_UNSAFE_FILENAME = re.compile(r"[^a-z0-9]", re.IGNORECASE)

EXPORT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        body {{ font-family: Arial, sans-serif; max-width: 800px; margin: 40px auto; padding: 20px; line-height: 1.6; }}
        h1 {{ font-size: 26pt; margin-bottom: 12px; }}
        h2 {{ font-size: 20pt; margin-top: 24px; margin-bottom: 8px; }}
        h3 {{ font-size: 14pt; font-weight: 600; margin-top: 16px; margin-bottom: 6px; }}
        p {{ margin: 12px 0; }}
        blockquote {{ border-left: 4px solid #ddd; padding-left: 16px; margin: 16px 0; color: #666; }}
        ul, ol {{ margin: 12px 0; padding-left: 24px; }}
        code {{ background: #f5f5f5; padding: 2px 6px; border-radius: 4px; font-family: monospace; }}
        pre {{ background: #f5f5f5; padding: 12px; border-radius: 8px; overflow-x: auto; }}
        mark {{ background: #fff3cd; padding: 2px 4px; }}
        a {{ color: #1a73e8; text-decoration: none; }}
    </style>
</head>
<body>
    {body}
</body>
</html>"""


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def html_to_text(html: str) -> str:
    """Return the text of each top-level block, separated by blank lines."""
    soup = BeautifulSoup(html or "", "html.parser")
    blocks = [
        tag for tag in soup.find_all(BLOCK_TAGS)
        if tag.find_parent(BLOCK_TAGS) is None
    ]
    if not blocks:
        return _collapse(soup.get_text(" "))
    lines = [_collapse(tag.get_text()) for tag in blocks]
    return "\n\n".join(line for line in lines if line)


def render_export_html(title: str, content_html: str) -> str:
    return EXPORT_TEMPLATE.format(title=escape(title or ""), body=content_html or "")


def export_filename(title: str, extension: str) -> str:
    """Build a download name such as ``my_notes.txt`` from a document title."""
    stem = _UNSAFE_FILENAME.sub("_", title or "").lower() or "document"
    return f"{stem}.{extension}"


__all__ = ["html_to_text", "render_export_html", "export_filename", "BLOCK_TAGS"]
