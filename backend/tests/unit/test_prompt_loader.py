"""Unit tests for the note assistant PromptLoader."""

from pathlib import Path

import pytest

from backend.src.services.prompt_loader import (
    DEFAULT_PROMPTS_DIR,
    INLINE_PROMPTS,
    PromptLoader,
    PromptLoaderError,
)


@pytest.fixture
def prompts_dir(tmp_path: Path) -> Path:
    """Create a temporary prompts directory with test templates."""
    prompts = tmp_path / "prompts"
    notes_dir = prompts / "notes"
    notes_dir.mkdir(parents=True)

    (notes_dir / "system.md").write_text("# Notes System\n\nStyle: {{ style or 'concise' }}")
    (notes_dir / "chat.md").write_text("# Chat\n")

    return prompts


@pytest.fixture
def loader(prompts_dir: Path) -> PromptLoader:
    return PromptLoader(prompts_dir=prompts_dir)


class TestPromptLoaderInit:
    def test_init_with_existing_directory(self, prompts_dir: Path) -> None:
        loader = PromptLoader(prompts_dir=prompts_dir)

        assert loader.prompts_dir == prompts_dir
        assert loader.env is not None

    def test_init_with_nonexistent_directory(self, tmp_path: Path) -> None:
        """Loader falls back to inline prompts when directory doesn't exist."""
        loader = PromptLoader(prompts_dir=tmp_path / "nonexistent")

        assert loader.env is None

    def test_default_prompts_dir_is_backend_prompts(self) -> None:
        assert DEFAULT_PROMPTS_DIR.name == "prompts"
        assert DEFAULT_PROMPTS_DIR.parent.name == "backend"


class TestPromptLoaderLoad:
    def test_load_template_from_filesystem(self, loader: PromptLoader) -> None:
        result = loader.load("notes/system.md", {"style": "bullet points"})

        assert "Style: bullet points" in result

    def test_load_template_with_default_values(self, loader: PromptLoader) -> None:
        assert "Style: concise" in loader.load("notes/system.md")

    def test_missing_file_uses_inline_fallback(self, loader: PromptLoader) -> None:
        """notes/enhance.md is not in the fixture dir but has an inline version."""
        result = loader.load("notes/enhance.md")

        assert result == INLINE_PROMPTS["notes/enhance.md"]

    def test_unknown_prompt_raises(self, tmp_path: Path) -> None:
        loader = PromptLoader(prompts_dir=tmp_path / "nonexistent")

        with pytest.raises(PromptLoaderError) as exc_info:
            loader.load("unknown/prompt.md", {})

        assert "Prompt not found" in str(exc_info.value)
        assert "unknown/prompt.md" in str(exc_info.value)

    def test_broken_template_raises(self, prompts_dir: Path) -> None:
        (prompts_dir / "notes" / "chat.md").write_text("{% if %}")
        loader = PromptLoader(prompts_dir=prompts_dir)

        with pytest.raises(PromptLoaderError):
            loader.load("notes/chat.md")


class TestShippedPrompts:
    @pytest.mark.parametrize("name", ["notes/system.md", "notes/enhance.md", "notes/chat.md"])
    def test_every_prompt_is_shipped_and_has_fallback(self, name: str) -> None:
        loader = PromptLoader()

        assert (loader.prompts_dir / name).is_file()
        assert name in INLINE_PROMPTS
        assert loader.load(name).strip()

    def test_enhance_prompt_forbids_rewrites(self) -> None:
        result = PromptLoader().load("notes/enhance.md")

        assert "Do NOT change the meaning" in result

