from __future__ import annotations

import json

import httpx

from geniewp.assistant import (
    AssistantProxy,
    is_trusted_image_url,
    process_json_from_response,
    register_outputs,
    trusted_image_url,
)
from geniewp.config import DEFAULT_ASSISTANT_ID, GenieSettings
from geniewp.openai_client import ASSISTANTS_BETA, OpenAIClient
from geniewp.outputs import OutputRegistry
from geniewp.store import API_KEY_OPTION, THREAD_ID_OPTION, InMemoryOptionStore


class FakeAssistants:
    """Minimal stand-in for the threads/messages/runs endpoints."""

    def __init__(self, messages=None):
        self.calls = []
        self.messages = messages or []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        path = request.url.path
        self.calls.append((request.method, path, body, request.headers.get("OpenAI-Beta")))
        if request.method == "POST" and path == "/v1/threads":
            return httpx.Response(200, json={"id": "thread_new", "object": "thread"})
        if request.method == "POST" and path.endswith("/messages"):
            return httpx.Response(200, json={"id": "msg_1", "object": "thread.message"})
        if request.method == "POST" and path.endswith("/runs"):
            return httpx.Response(200, json={"id": "run_1", "status": "queued"})
        if request.method == "GET" and "/runs/" in path:
            return httpx.Response(200, json={"id": "run_1", "status": "completed"})
        if request.method == "GET" and path.endswith("/messages"):
            return httpx.Response(200, json={"object": "list", "data": self.messages})
        return httpx.Response(404, json={"error": {"message": "No such route"}})


def _proxy(handler, options=None, outputs=None, **settings):
    store = InMemoryOptionStore({API_KEY_OPTION: "sk-test"} if options is None else options)

    def factory(key):
        return OpenAIClient(key, beta=ASSISTANTS_BETA, http=httpx.Client(transport=httpx.MockTransport(handler)))

    return AssistantProxy(GenieSettings(**settings), store, client_factory=factory, outputs=outputs), store


def _assistant_message(text):
    return {"role": "assistant", "content": [{"type": "text", "text": {"value": text, "annotations": []}}]}


def test_send_creates_thread_and_run():
    api = FakeAssistants()
    proxy, store = _proxy(api)
    out = proxy.send("color-palette", "A bakery in Lisbon", template="bakery")

    assert out == {"success": True, "data": {"thread_id": "thread_new", "run_id": "run_1"}}
    assert store.get_option(THREAD_ID_OPTION) == "thread_new"
    method, path, body, beta = api.calls[0]
    assert (method, path) == ("POST", "/v1/threads")
    assert body == {"messages": [{"role": "user", "content": "A bakery in Lisbon"}], "metadata": {"template": "bakery"}}
    assert api.calls[1][1] == "/v1/threads/thread_new/runs"
    assert api.calls[1][2] == {"assistant_id": "asst_13H3CB33PlF99C3KOX3z9D4x"}
    assert all(call[3] == "assistants=v2" for call in api.calls)


def test_send_appends_to_existing_thread():
    api = FakeAssistants()
    proxy, store = _proxy(api, {API_KEY_OPTION: "sk-test", THREAD_ID_OPTION: "thread_old"})
    out = proxy.send("site-topic", "More details")

    assert out["data"] == {"thread_id": "thread_old", "run_id": "run_1"}
    assert [c[1] for c in api.calls] == ["/v1/threads/thread_old/messages", "/v1/threads/thread_old/runs"]
    assert api.calls[0][2] == {"role": "user", "content": "More details"}


def test_unknown_step_uses_default_assistant():
    api = FakeAssistants()
    proxy, _ = _proxy(api, {API_KEY_OPTION: "sk-test", THREAD_ID_OPTION: "thread_old"})
    proxy.send("something-else")
    assert [c[1] for c in api.calls] == ["/v1/threads/thread_old/runs"]
    assert api.calls[0][2] == {"assistant_id": DEFAULT_ASSISTANT_ID}


def test_welcome_step_starts_a_new_thread():
    api = FakeAssistants()
    proxy, store = _proxy(api, {API_KEY_OPTION: "sk-test", THREAD_ID_OPTION: "thread_old"})
    out = proxy.send("welcome", "Hi")
    assert out["data"]["thread_id"] == "thread_new"
    assert store.get_option(THREAD_ID_OPTION) == "thread_new"


def test_missing_api_key():
    api = FakeAssistants()
    proxy, _ = _proxy(api, options={})
    assert proxy.send("welcome", "Hi") == {"success": False, "data": {"message": "API key is missing."}}
    assert proxy.status("thread_1", "run_1")["data"]["message"] == "API key is missing."
    assert proxy.get("thread_1")["data"]["message"] == "API key is missing."
    assert proxy.export("Acme")["data"]["message"] == "API key is missing."
    assert api.calls == []


def test_remote_error_is_returned():
    def handler(request):
        return httpx.Response(400, json={"error": {"message": "Invalid assistant"}})

    proxy, store = _proxy(handler)
    assert proxy.send("welcome", "Hi") == {"success": False, "data": {"message": "Invalid assistant"}}
    assert store.get_option(THREAD_ID_OPTION) is None


def test_transport_error_text_is_returned():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    proxy, _ = _proxy(handler)
    assert proxy.status("thread_1", "run_1") == {"success": False, "data": {"message": "connection refused"}}


def test_status_returns_run_verbatim():
    api = FakeAssistants()
    proxy, _ = _proxy(api)
    assert proxy.status("thread_1", "run_1") == {"success": True, "data": {"id": "run_1", "status": "completed"}}
    assert api.calls[0][:2] == ("GET", "/v1/threads/thread_1/runs/run_1")


def test_bad_ids_are_rejected_locally():
    api = FakeAssistants()
    proxy, _ = _proxy(api)
    assert proxy.get("../../files")["data"]["message"] == "Invalid thread id."
    assert proxy.status("thread_1", "")["data"]["message"] == "Invalid run id."
    assert api.calls == []


def test_get_registers_outputs_from_fenced_json():
    entries = [
        {
            "slug": "hero",
            "order": 1,
            "strings": [{"slug": "hero-title", "value": "Fresh <Bread> & more"}],
            "images": [
                {"slug": "hero-image", "src": "https://images.pexels.com/photo.jpg"},
                {"slug": "bad-image", "src": "https://evil.example.com/photo.jpg"},
            ],
        },
        {"slug": "incomplete", "strings": [{"slug": "skipped", "value": "x"}]},
    ]
    text = "Here it is:\n```json\n" + json.dumps(entries) + "\n```"
    messages = [_assistant_message(text), {"role": "user", "content": [{"type": "text", "text": {"value": "hi"}}]}]
    outputs = OutputRegistry()
    proxy, _ = _proxy(FakeAssistants(messages), outputs=outputs)

    out = proxy.get("thread_1")
    assert out["success"] is True
    assert out["data"]["data"] == messages
    assert outputs.apply_filters("geniewp/hero-title") == "Fresh &lt;Bread&gt; &amp; more"
    assert outputs.apply_filters("geniewp/hero-image", "default.jpg") == "https://images.pexels.com/photo.jpg"
    assert outputs.apply_filters("geniewp/bad-image", "default.jpg") == "default.jpg"
    assert "geniewp/skipped" not in outputs.names()


def test_only_newest_assistant_message_is_scanned():
    older = _assistant_message(json.dumps([{"slug": "a", "order": 1, "strings": [{"slug": "old", "value": "x"}]}]))
    newest = _assistant_message("No JSON this time.")
    assert process_json_from_response([newest, older]) == []


def test_trusted_image_host():
    assert is_trusted_image_url("https://images.pexels.com/photo.jpg")
    assert is_trusted_image_url("http://pexels.com/photo.jpg")
    assert not is_trusted_image_url("https://evil.example.com/photo.jpg")
    assert not is_trusted_image_url("https://notpexels.com/photo.jpg")
    assert not is_trusted_image_url("https://images.pexels.com.evil.com/photo.jpg")
    assert not is_trusted_image_url("ftp://images.pexels.com/photo.jpg")
    assert not is_trusted_image_url("pexels.com/photo.jpg")
    assert not is_trusted_image_url(None)


def test_trusted_image_url_is_escaped():
    entries = [
        {
            "slug": "gallery",
            "order": 1,
            "strings": [],
            "images": [{"slug": "img", "src": 'https://images.pexels.com/x.jpg"onerror="alert(1)'}],
        }
    ]
    outputs = OutputRegistry()
    register_outputs(entries, outputs)
    value = outputs.apply_filters("geniewp/img", "default.jpg")
    assert value.startswith("https://images.pexels.com/x.jpg")
    assert '"' not in value
    assert trusted_image_url("https://images.pexels.com/a.jpg?w=1&h=2") == "https://images.pexels.com/a.jpg?w=1&amp;h=2"


def test_get_survives_deeply_nested_reply():
    deep = "[" * 100000 + "]" * 100000
    outputs = OutputRegistry()
    proxy, _ = _proxy(FakeAssistants([_assistant_message(deep)]), outputs=outputs)
    assert proxy.get("thread_1")["success"] is True
    assert outputs.names() == []


def test_export_starts_fresh_thread_with_export_assistant():
    api = FakeAssistants()
    proxy, store = _proxy(api, {API_KEY_OPTION: "sk-test", THREAD_ID_OPTION: "thread_old"})
    out = proxy.export("Acme Bakery", "Bread and cakes", ["https://images.pexels.com/1.jpg"])

    assert out == {"success": True, "data": {"thread_id": "thread_new", "run_id": "run_1"}}
    body = api.calls[0][2]
    assert body["messages"][0]["content"] == (
        "Create a WordPress theme named Acme Bakery with the description Bread and cakes "
        'and the images ["https://images.pexels.com/1.jpg"].'
    )
    assert body["metadata"] == {"slug": "acme-bakery"}
    assert api.calls[1][2] == {"assistant_id": DEFAULT_ASSISTANT_ID}
    assert store.get_option(THREAD_ID_OPTION) == "thread_old"


def test_templates_from_directory(tmp_path):
    (tmp_path / "b.json").write_text('{"slug": "b"}', encoding="utf-8")
    (tmp_path / "a.json").write_text('{"slug": "a"}', encoding="utf-8")
    (tmp_path / "broken.json").write_text("{nope", encoding="utf-8")
    (tmp_path / "empty.json").write_text("{}", encoding="utf-8")
    (tmp_path / "notes.txt").write_text('{"slug": "txt"}', encoding="utf-8")
    proxy, _ = _proxy(FakeAssistants(), templates_dir=str(tmp_path))
    assert proxy.templates() == {"success": True, "data": [{"slug": "a"}, {"slug": "b"}]}


def test_packaged_templates():
    proxy, _ = _proxy(FakeAssistants())
    slugs = [t["slug"] for t in proxy.templates()["data"]]
    assert slugs == ["business", "portfolio", "restaurant"]


if __name__ == "__main__":
    test_send_creates_thread_and_run()
    test_send_appends_to_existing_thread()
    test_unknown_step_uses_default_assistant()
    test_welcome_step_starts_a_new_thread()
    test_missing_api_key()
    test_remote_error_is_returned()
    test_transport_error_text_is_returned()
    test_status_returns_run_verbatim()
    test_bad_ids_are_rejected_locally()
    test_get_registers_outputs_from_fenced_json()
    test_only_newest_assistant_message_is_scanned()
    test_trusted_image_host()
    test_trusted_image_url_is_escaped()
    test_get_survives_deeply_nested_reply()
    test_export_starts_fresh_thread_with_export_assistant()
    test_packaged_templates()
    print("assistant tests passed")
