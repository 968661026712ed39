"""CLI tests driven by typer's CliRunner against a fake backend."""

import json
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from notely_cli import main
from notely_cli.client import NotelyClient

runner = CliRunner()

DOC = {
    "id": "665f1c2ab7e4a1d2c3b4a5f6",
    "title": "Cell biology",
    "contentHtml": "<h1>Cell biology</h1><p>Mitochondria</p>",
    "createdAt": "2025-01-10T09:00:00Z",
    "updatedAt": "2025-01-15T14:30:00Z",
}


class FakeBackend:
    def __init__(self):
        self.requests = []
        self.chat = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path, method = request.url.path, request.method
        if path == "/api/docs" and method == "GET":
            return httpx.Response(200, json=[DOC])
        if path == "/api/docs" and method == "POST":
            body = json.loads(request.content or b"{}")
            return httpx.Response(201, json={**DOC, "title": body.get("title", "Untitled doc")})
        if path.startswith("/api/ai/"):
            return httpx.Response(200, json={"answer": "Powerhouse of the cell."})
        if path.endswith("/chat"):
            if method == "PUT":
                self.chat = json.loads(request.content)["messages"]
            return httpx.Response(200, json={"messages": self.chat})
        if path.endswith("/export"):
            return httpx.Response(
                200,
                content=b"Cell biology\n\nMitochondria",
                headers={"content-disposition": 'attachment; filename="cell_biology.txt"'},
            )
        if path == f"/api/docs/{DOC['id']}":
            if method == "DELETE":
                return httpx.Response(200, json={"ok": True})
            if method == "PUT":
                return httpx.Response(200, json={**DOC, **json.loads(request.content)})
            return httpx.Response(200, json=DOC)
        return httpx.Response(404, json={"error": "not_found", "message": "not found"})


@pytest.fixture
def backend(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("NOTELY_OWNER", raising=False)
    fake = FakeBackend()
    monkeypatch.setattr(
        main,
        "get_client",
        lambda: NotelyClient(
            base_url="http://notely.test", owner="u1", timeout=5, transport=httpx.MockTransport(fake)
        ),
    )
    return fake


def test_login_whoami_logout(backend, tmp_path):
    result = runner.invoke(main.app, ["login", "student-7"])
    assert result.exit_code == 0
    assert "NOTELY_OWNER=student-7" in (tmp_path / ".notely" / ".env").read_text()

    result = runner.invoke(main.app, ["whoami"])
    assert "student-7" in result.stdout

    result = runner.invoke(main.app, ["logout"])
    assert result.exit_code == 0
    assert "NOTELY_OWNER" not in (tmp_path / ".notely" / ".env").read_text()
    assert "anon" in runner.invoke(main.app, ["whoami"]).stdout


def test_login_rejects_blank_uid(backend):
    result = runner.invoke(main.app, ["login", "  "])

    assert result.exit_code == 1


def test_list_prints_table(backend):
    result = runner.invoke(main.app, ["list", "--search", "cell"])

    assert result.exit_code == 0
    assert "Cell biology" in result.stdout
    assert backend.requests[0].url.params["q"] == "cell"


def test_new_with_title(backend):
    result = runner.invoke(main.app, ["new", "--title", "Week 2"])

    assert result.exit_code == 0
    body = json.loads(backend.requests[0].content)
    assert body == {"title": "Week 2", "contentHtml": "<h1>Week 2</h1><p></p>"}


def test_show_unknown_document_fails(backend):
    result = runner.invoke(main.app, ["show", "missing"])

    assert result.exit_code == 1
    assert "not found" in result.stdout


def test_delete(backend):
    result = runner.invoke(main.app, ["delete", DOC["id"]])

    assert result.exit_code == 0
    assert backend.requests[0].method == "DELETE"


def test_export_writes_server_filename(backend, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(main.app, ["export", DOC["id"], "--format", "txt"])

    assert result.exit_code == 0
    assert (tmp_path / "cell_biology.txt").read_text() == "Cell biology\n\nMitochondria"


def test_export_rejects_unknown_format(backend):
    result = runner.invoke(main.app, ["export", DOC["id"], "--format", "pdf"])

    assert result.exit_code == 1
    assert backend.requests == []


def test_edit_saves_file_with_derived_title(backend, tmp_path: Path):
    page = tmp_path / "notes.html"
    page.write_text("<h2>Revision plan</h2><p>Chapter 4</p>")

    result = runner.invoke(main.app, ["edit", DOC["id"], str(page)])

    assert result.exit_code == 0
    puts = [r for r in backend.requests if r.method == "PUT"]
    assert len(puts) == 1
    assert json.loads(puts[0].content) == {
        "title": "Revision plan",
        "contentHtml": "<h2>Revision plan</h2><p>Chapter 4</p>",
    }


def test_ask_records_chat(backend):
    result = runner.invoke(main.app, ["ask", DOC["id"], "mitochondria", "--mode", "explain"])

    assert result.exit_code == 0
    assert "Powerhouse of the cell." in result.stdout
    assert backend.chat[-2:] == [
        {"role": "user", "content": "mitochondria"},
        {"role": "assistant", "content": "Powerhouse of the cell."},
    ]
    inline = next(r for r in backend.requests if r.url.path == "/api/ai/inline")
    assert json.loads(inline.content)["mode"] == "explain"


def test_chat_command(backend):
    result = runner.invoke(main.app, ["chat", DOC["id"], "Quiz me"])

    assert result.exit_code == 0
    assert [m["role"] for m in backend.chat] == ["assistant", "user", "assistant"]


def test_enhance_prints_answer(backend):
    result = runner.invoke(main.app, ["enhance", DOC["id"], "teh cell"])

    assert result.exit_code == 0
    assert "Powerhouse of the cell." in result.stdout


def test_ask_insert_appends_escaped_quote(backend):
    result = runner.invoke(main.app, ["ask", DOC["id"], "mitochondria", "--insert"])

    assert result.exit_code == 0
    put = next(r for r in backend.requests if r.method == "PUT" and r.url.path == f"/api/docs/{DOC['id']}")
    assert json.loads(put.content) == {
        "title": "Cell biology",
        "contentHtml": DOC["contentHtml"] + "<blockquote>Powerhouse of the cell.</blockquote>",
    }


def test_ask_without_insert_leaves_document(backend):
    runner.invoke(main.app, ["ask", DOC["id"], "mitochondria"])

    assert not [r for r in backend.requests if r.method == "PUT" and r.url.path == f"/api/docs/{DOC['id']}"]


def test_export_docx(backend, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(main.app, ["export", DOC["id"], "--format", "docx"])

    assert result.exit_code == 0
    assert backend.requests[0].url.params["format"] == "docx"
