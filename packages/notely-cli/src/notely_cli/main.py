import logging
from pathlib import Path
import time
from typing import Optional

from bs4 import BeautifulSoup
import httpx
from rich import print
from rich.panel import Panel
from rich.table import Table
import typer

from notely_cli.client import NotelyAPIError, NotelyClient
from notely_cli.config import env_file_path, get_settings, set_env_value, unset_env_value
from notely_cli.editor import Autosaver, ChatSession, derive_title, insert_answer

logger = logging.getLogger(__name__)

APP_HELP = """
notely: your notes from the terminal.

Documents live on the Notely backend and are scoped to the signed-in uid,
exactly like the web editor. Sign in once with `notely login <uid>`.

CORE WORKFLOW:
1. DASHBOARD: `notely list --search lecture` to find a document.
2. WRITE:     `notely edit <id> notes.html --watch` autosaves while you type.
3. ASK:       `notely ask <id> "mitochondria" --mode explain`.
4. SHARE:     `notely export <id> --format txt`.
"""

app = typer.Typer(name="notely", help=APP_HELP, no_args_is_help=True)


def get_client() -> NotelyClient:
    """Client built from the current settings."""
    return NotelyClient()


def _fail(exc: Exception) -> typer.Exit:
    if isinstance(exc, NotelyAPIError):
        print(f"[red]Error {exc.status_code}: {exc.message}[/red]")
    else:
        print(f"[red]Cannot reach the API: {exc}[/red]")
    return typer.Exit(code=1)


def _text(html: str) -> str:
    return BeautifulSoup(html or "", "html.parser").get_text("\n").strip()


# ============================================================================
# Session
# ============================================================================

@app.command()
def login(uid: str = typer.Argument(..., help="uid to send as x-owner")):
    """
    Remember the signed-in uid.

    Saves NOTELY_OWNER to ~/.notely/.env; every later command sends it as the
    x-owner header, so you only see your own documents.
    """
    uid = uid.strip()
    if not uid:
        print("[red]uid must not be blank[/red]")
        raise typer.Exit(code=1)
    env_path = set_env_value("owner", uid)
    print(f"[green]Signed in as {uid} (saved to {env_path})[/green]")


@app.command()
def logout():
    """Forget the signed-in uid; requests fall back to the shared 'anon' owner."""
    if unset_env_value("owner"):
        print("[green]Signed out[/green]")
    else:
        print(f"[dim]Not signed in ({env_file_path()} has no NOTELY_OWNER)[/dim]")


@app.command()
def whoami():
    """Show the uid and API url in use."""
    settings = get_settings()
    owner = settings.owner if settings.is_signed_in else "anon"
    print(f"owner: [bold]{owner}[/bold]")
    print(f"api:   {settings.api_url}")


# ============================================================================
# Dashboard
# ============================================================================

@app.command("list")
def list_docs(
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Filter titles (case-insensitive)"),
):
    """List your documents, most recently edited first."""
    try:
        with get_client() as client:
            docs = client.list_docs(search)
    except (NotelyAPIError, httpx.HTTPError) as exc:
        raise _fail(exc)

    if not docs:
        print("[dim]No documents yet. Create one with `notely new`.[/dim]")
        return

    table = Table(title="Documents")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Updated", style="dim")
    for doc in docs:
        table.add_row(doc["id"], doc["title"], doc["updatedAt"])
    print(table)


@app.command()
def new(title: Optional[str] = typer.Option(None, "--title", "-t", help="Initial title")):
    """Create a document (blank 'Untitled doc' unless --title is given)."""
    content = f"<h1>{title}</h1><p></p>" if title else None
    try:
        with get_client() as client:
            doc = client.create_doc(title=title, content_html=content)
    except (NotelyAPIError, httpx.HTTPError) as exc:
        raise _fail(exc)
    print(f"[green]Created {doc['id']}[/green] {doc['title']}")


@app.command()
def show(doc_id: str = typer.Argument(..., help="Document id")):
    """Print a document as plain text."""
    try:
        with get_client() as client:
            doc = client.get_doc(doc_id)
    except (NotelyAPIError, httpx.HTTPError) as exc:
        raise _fail(exc)
    print(Panel(_text(doc["contentHtml"]) or "[dim](empty)[/dim]", title=doc["title"]))


@app.command()
def delete(doc_id: str = typer.Argument(..., help="Document id")):
    """Delete a document."""
    try:
        with get_client() as client:
            client.delete_doc(doc_id)
    except (NotelyAPIError, httpx.HTTPError) as exc:
        raise _fail(exc)
    print(f"[green]Deleted {doc_id}[/green]")


@app.command("import")
def import_pdf(path: Path = typer.Argument(..., exists=True, dir_okay=False, help="PDF file")):
    """Create a document from a PDF (one section per page)."""
    try:
        with get_client() as client:
            doc = client.import_pdf(path)
    except (NotelyAPIError, httpx.HTTPError) as exc:
        raise _fail(exc)
    print(f"[green]Imported {doc['id']}[/green] {doc['title']}")


@app.command()
def export(
    doc_id: str = typer.Argument(..., help="Document id"),
    fmt: str = typer.Option("html", "--format", "-f", help="html, txt or docx"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Target file (default: server filename)"),
):
    """Download a document as HTML, plain text or Word."""
    if fmt not in ("html", "txt", "docx"):
        print("[red]--format must be html, txt or docx[/red]")
        raise typer.Exit(code=1)
    try:
        with get_client() as client:
            filename, content = client.export_doc(doc_id, fmt)
    except (NotelyAPIError, httpx.HTTPError) as exc:
        raise _fail(exc)
    target = output or Path(filename)
    target.write_bytes(content)
    print(f"[green]Wrote {target}[/green]")


# ============================================================================
# Editor
# ============================================================================

@app.command()
def edit(
    doc_id: str = typer.Argument(..., help="Document id"),
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="HTML file holding the content"),
    watch: bool = typer.Option(False, "--watch", "-w", help="Keep saving on every change until Ctrl+C"),
    interval: float = typer.Option(0.2, "--interval", help="Polling interval in seconds (watch mode)"),
):
    """
    Save a local HTML file into a document.

    The title is taken from the first heading or paragraph, like the web
    editor. With --watch every change is autosaved after the debounce delay.
    """
    settings = get_settings()
    client = get_client()

    def save(title: str, html: str) -> None:
        client.update_doc(doc_id, title=title, content_html=html)
        print(f"[dim]saved[/dim] {title}")

    saver = Autosaver(save, delay=settings.autosave_delay)
    try:
        last_mtime = file.stat().st_mtime
        saver.schedule(file.read_text(encoding="utf-8"))
        if watch:
            print(f"[dim]Watching {file} (Ctrl+C to stop)[/dim]")
            try:
                while True:
                    time.sleep(interval)
                    mtime = file.stat().st_mtime
                    if mtime != last_mtime:
                        last_mtime = mtime
                        saver.schedule(file.read_text(encoding="utf-8"))
            except KeyboardInterrupt:
                pass
        saver.flush()
    finally:
        saver.cancel()
        client.close()


@app.command()
def ask(
    doc_id: str = typer.Argument(..., help="Document id"),
    text: str = typer.Argument(..., help="Selected text"),
    mode: str = typer.Option("explain", "--mode", "-m", help="explain, expand, summarize, question or connect"),
    insert: bool = typer.Option(False, "--insert", "-i", help="Also append the answer to the document as a quote"),
):
    """Run an inline AI action on a piece of the document and log it to the chat."""
    try:
        with get_client() as client:
            doc = client.get_doc(doc_id)
            session = ChatSession(client, doc_id)
            session.load()
            answer = session.ask_selection(text, doc["contentHtml"], mode)
            if insert and text.strip():
                html = insert_answer(doc["contentHtml"], answer)
                client.update_doc(doc_id, title=derive_title(html), content_html=html)
    except (NotelyAPIError, httpx.HTTPError) as exc:
        raise _fail(exc)
    print(Panel(answer, title=f"AI ({mode})"))


@app.command()
def enhance(
    doc_id: str = typer.Argument(..., help="Document id"),
    text: str = typer.Argument(..., help="Text to polish"),
):
    """Polish grammar and clarity of a passage without changing its meaning."""
    try:
        with get_client() as client:
            doc = client.get_doc(doc_id)
            answer = client.ai_enhance(text, doc["contentHtml"])
    except (NotelyAPIError, httpx.HTTPError) as exc:
        raise _fail(exc)
    print(answer)


@app.command()
def chat(
    doc_id: str = typer.Argument(..., help="Document id"),
    prompt: str = typer.Argument(..., help="Message for the assistant"),
):
    """Ask the side-panel assistant about the document."""
    try:
        with get_client() as client:
            doc = client.get_doc(doc_id)
            session = ChatSession(client, doc_id)
            session.load()
            answer = session.send(prompt, doc["contentHtml"])
    except (NotelyAPIError, httpx.HTTPError) as exc:
        raise _fail(exc)
    if answer is None:
        print("[red]Prompt must not be blank[/red]")
        raise typer.Exit(code=1)
    print(Panel(answer, title="AI"))


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default: PORT or 3000)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the API server."""
    import os

    import uvicorn

    uvicorn.run(
        "backend.src.api.main:app",
        host=host,
        port=port or int(os.getenv("PORT", "3000")),
        reload=reload,
    )


if __name__ == "__main__":
    app()
