"""Jinja2-based prompt template loader for the note assistant.

Templates live in backend/prompts/ and are reloaded on every call, so the
system instructions can be tuned without restarting the server. Inline
fallbacks cover deployments that ship without the prompts directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import jinja2

logger = logging.getLogger(__name__)

# backend/src/services/prompt_loader.py -> backend/prompts/
DEFAULT_PROMPTS_DIR = Path(__file__).resolve().parent.parent.parent / "prompts"

INLINE_PROMPTS: Dict[str, str] = {
    "notes/system.md": """You are an AI assistant specialized in helping users take high-quality notes.
Always write clearly, concisely, and directly relevant to the highlighted text.
Ensure you are following your main instruction and focusing on doing that.
Keep responses short and note-friendly (1-3 sentences if possible).
Use simple language, proper formatting, and avoid unnecessary filler.
Only provide content for the highlighted section.
""",
    "notes/enhance.md": """You are an AI assistant specialized in enhancing user notes.
Your task is to improve only the highlighted text provided by the user.
Enhancements should be minimal:
- Fix grammar, punctuation, and spelling.
- Improve clarity and readability.
- Format for notes (bold, italics, bullet points) if it helps.
- Use plain text math with actual symbols (², ×, ÷, √) instead of LaTeX ($...$) when showing formulas.
Do NOT change the meaning or add new content.
Keep the text concise and note-friendly.
If you are unsure how to improve it, return the original text exactly as it was.
Do not make large rewrites; keep changes subtle and minimal.
""",
    "notes/chat.md": """You are an AI assistant specialized in helping users with their notes.
You can summarize, explain, or provide insights based on the content of their notes.
Always answer clearly, concisely, and contextually using the notes provided.
""",
}


class PromptLoaderError(Exception):
    """Raised when a prompt cannot be loaded."""

    pass


class PromptLoader:
    """Load and render Jinja2 prompt templates.

    Example:
        >>> loader = PromptLoader()
        >>> system_prompt = loader.load("notes/system.md")
    """

    def __init__(self, prompts_dir: Optional[Path] = None) -> None:
        self.prompts_dir = prompts_dir or DEFAULT_PROMPTS_DIR

        if self.prompts_dir.is_dir():
            self.env = jinja2.Environment(
                loader=jinja2.FileSystemLoader(str(self.prompts_dir)),
                autoescape=False,  # Prompts are plain text, not HTML
                auto_reload=True,
                keep_trailing_newline=True,
            )
            logger.debug(
                "PromptLoader initialized with filesystem templates",
                extra={"prompts_dir": str(self.prompts_dir)},
            )
        else:
            self.env = None
            logger.warning(
                "Prompts directory not found, using inline fallbacks",
                extra={"prompts_dir": str(self.prompts_dir)},
            )

    def load(self, path: str, context: Optional[Dict[str, Any]] = None) -> str:
        """Load and render a prompt template.

        Args:
            path: Relative path to the template file (e.g., "notes/chat.md").
            context: Variables to render into the template.

        Raises:
            PromptLoaderError: If the template cannot be loaded or rendered.
        """
        context = context or {}

        if self.env is not None:
            try:
                template = self.env.get_template(path)
                return template.render(**context)
            except jinja2.TemplateNotFound:
                logger.debug(
                    "Template not found in filesystem, trying inline fallback",
                    extra={"path": path},
                )
            except jinja2.TemplateError as e:
                logger.error(
                    "Failed to render template",
                    extra={"path": path, "error": str(e)},
                )
                raise PromptLoaderError(f"Failed to render template {path}: {e}") from e

        return self._get_inline_prompt(path, context)

    def _get_inline_prompt(self, path: str, context: Dict[str, Any]) -> str:
        template_str = INLINE_PROMPTS.get(path)
        if template_str is None:
            raise PromptLoaderError(
                f"Prompt not found: {path}. "
                f"Available inline prompts: {list(INLINE_PROMPTS.keys())}"
            )
        try:
            return jinja2.Template(template_str, keep_trailing_newline=True).render(**context)
        except jinja2.TemplateError as e:
            raise PromptLoaderError(
                f"Failed to render inline template {path}: {e}"
            ) from e


__all__ = ["PromptLoader", "PromptLoaderError", "DEFAULT_PROMPTS_DIR", "INLINE_PROMPTS"]
