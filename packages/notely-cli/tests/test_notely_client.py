"""NotelyClient tests against an httpx.MockTransport."""

import json

import httpx
import pytest

from notely_cli.client import NO_ANSWER, NotelyAPIError, NotelyClient


class Recorder:
    def __init__(self, handler):
        self.handler = handler
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


def make_client(handler, owner="u1"):
    recorder = Recorder(handler)
    client = NotelyClient(
        base_url="http://notely.test/",
        owner=owner,
        timeout=5.0,
        transport=httpx.MockTransport(recorder),
    )
    return client, recorder


def test_every_request_carries_owner_header():
    client, recorder = make_client(lambda r: httpx.Response(200, json=[]))

    client.list_docs()

    assert recorder.requests[0].headers["x-owner"] == "u1"
    assert str(recorder.requests[0].url) == "http://notely.test/api/docs"


def test_blank_owner_becomes_anon():
    client, recorder = make_client(lambda r: httpx.Response(200, json=[]), owner="  ")

    client.list_docs()

    assert recorder.requests[0].headers["x-owner"] == "anon"


def test_list_passes_search_query():
    client, recorder = make_client(lambda r: httpx.Response(200, json=[]))

    client.list_docs("bio")

    assert recorder.requests[0].url.params["q"] == "bio"


def test_update_sends_only_given_fields():
    client, recorder = make_client(lambda r: httpx.Response(200, json={"id": "1"}))

    client.update_doc("1", content_html="<p>x</p>")

    request = recorder.requests[0]
    assert request.method == "PUT"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {"contentHtml": "<p>x</p>"}


def test_error_response_raises_with_server_message():
    client, _ = make_client(
        lambda r: httpx.Response(404, json={"error": "not_found", "message": "not found"})
    )

    with pytest.raises(NotelyAPIError) as exc_info:
        client.get_doc("abc")

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "not found"


def test_error_without_json_uses_text():
    client, _ = make_client(lambda r: httpx.Response(502, text="Bad gateway"))

    with pytest.raises(NotelyAPIError, match="Bad gateway"):
        client.ping()


def test_chat_round_trip_payloads():
    def handler(request):
        if request.method == "PUT":
            return httpx.Response(200, json=json.loads(request.content))
        return httpx.Response(200, json={"messages": [{"role": "user", "content": "hi"}]})

    client, recorder = make_client(handler)

    assert client.get_chat("1") == [{"role": "user", "content": "hi"}]
    saved = client.save_chat("1", [{"role": "assistant", "content": "yo"}])

    assert saved == [{"role": "assistant", "content": "yo"}]
    assert recorder.requests[1].url.path == "/api/docs/1/chat"


def test_export_reads_filename_from_header():
    client, recorder = make_client(
        lambda r: httpx.Response(
            200,
            content=b"Cells",
            headers={"content-disposition": 'attachment; filename="cells.txt"'},
        )
    )

    filename, content = client.export_doc("1", "txt")

    assert (filename, content) == ("cells.txt", b"Cells")
    assert recorder.requests[0].url.params["format"] == "txt"


def test_import_uploads_multipart(tmp_path):
    pdf = tmp_path / "lecture.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    client, recorder = make_client(lambda r: httpx.Response(201, json={"id": "1", "title": "lecture"}))

    doc = client.import_pdf(pdf)

    assert doc["title"] == "lecture"
    request = recorder.requests[0]
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b'filename="lecture.pdf"' in request.content


def test_ai_endpoints_return_answer():
    def handler(request):
        return httpx.Response(200, json={"answer": f"reply from {request.url.path}"})

    client, recorder = make_client(handler)

    assert client.ai_inline("ATP", mode="explain") == "reply from /api/ai/inline"
    assert client.ai_enhance("teh") == "reply from /api/ai/enhance"
    assert client.ai_chat("q", "<p/>", [{"role": "user", "content": "hi"}]) == "reply from /api/ai/chat"
    assert json.loads(recorder.requests[2].content)["messages"] == [{"role": "user", "content": "hi"}]


def test_client_reads_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("NOTELY_API_URL", "http://configured.test")
    monkeypatch.setenv("NOTELY_OWNER", "from-env")

    client = NotelyClient()

    assert client.base_url == "http://configured.test"
    assert client.owner == "from-env"


def test_ai_response_without_answer_falls_back():
    client, _ = make_client(lambda r: httpx.Response(200, json={}))

    assert client.ai_chat("q") == NO_ANSWER
    assert client.ai_inline("ATP") == NO_ANSWER
    assert client.ai_enhance("teh") == NO_ANSWER
