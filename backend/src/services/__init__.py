"""Service layer for business logic and external integrations."""

from .assistant import AssistantError, NoteAssistant, get_note_assistant
from .auth import AuthError, AuthService, FirebaseTokenValidator, HeaderOwnerResolver
from .config import AppConfig, get_config, reload_config
from .database import DatabaseService, get_database_service
from .docx_export import DOCX_MEDIA_TYPE, render_docx
from .documents import DocumentNotFound, DocumentService, InvalidDocumentId
from .html_text import export_filename, html_to_text, render_export_html
from .pdf_import import PdfImportError, convert_pdf
from .prompt_loader import PromptLoader, PromptLoaderError

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "DatabaseService",
    "get_database_service",
    "DocumentService",
    "DocumentNotFound",
    "InvalidDocumentId",
    "AuthService",
    "AuthError",
    "FirebaseTokenValidator",
    "HeaderOwnerResolver",
    "NoteAssistant",
    "AssistantError",
    "get_note_assistant",
    "PromptLoader",
    "PromptLoaderError",
    "PdfImportError",
    "convert_pdf",
    "html_to_text",
    "render_export_html",
    "export_filename",
    "render_docx",
    "DOCX_MEDIA_TYPE",
]
