"""Proxy for the guided flow: threads, messages and runs on the OpenAI Assistants API.

Every public method returns the `{success, data}` envelope the editor UI
consumes; failures never raise, they come back as
`{"success": False, "data": {"message": ...}}`.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional

from markupsafe import escape
from pydantic import HttpUrl, TypeAdapter, ValidationError

from .catalog import load_templates
from .config import GenieSettings
from .errors import GenieError, InvalidInput, MalformedAIResponse
from .json_utils import parse_json_lenient
from .openai_client import ASSISTANTS_BETA, OpenAIClient
from .outputs import OutputRegistry, output_name
from .sanitize import sanitize_title
from .store import THREAD_ID_OPTION, OptionStore, resolve_api_key

logger = logging.getLogger(__name__)

API_KEY_MISSING = "API key is missing."
EXPORT_MESSAGE = "Create a WordPress theme named %s with the description %s and the images %s."

_REMOTE_ID_RE = re.compile(r"^[A-Za-z0-9_\-]{1,128}$")
_HTTP_URL = TypeAdapter(HttpUrl)

ClientFactory = Callable[[str], OpenAIClient]


def _ok(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": data}


def _fail(message: str) -> Dict[str, Any]:
    return {"success": False, "data": {"message": message}}


def trusted_image_url(src: Any, host: str = "pexels.com") -> Optional[str]:
    """Normalized, HTML-escaped form of `src` when it is an http(s) URL on
    `host` or one of its subdomains, else None."""
    if not isinstance(src, str) or not src:
        return None
    try:
        url = _HTTP_URL.validate_python(src)
    except ValidationError:
        return None
    name = (url.host or "").lower().rstrip(".")
    host = host.lower()
    if name != host and not name.endswith("." + host):
        return None
    return str(escape(str(url)))


def is_trusted_image_url(src: Any, host: str = "pexels.com") -> bool:
    return trusted_image_url(src, host) is not None


def newest_assistant_text(messages: Any) -> Optional[str]:
    """Text of the newest assistant message in a messages list (newest first)."""
    if not isinstance(messages, list):
        return None
    for msg in messages:
        if not isinstance(msg, dict) or msg.get("role") != "assistant":
            continue
        for part in msg.get("content") or []:
            if isinstance(part, dict) and part.get("type", "text") == "text":
                text = part.get("text")
                value = text.get("value") if isinstance(text, dict) else text
                if isinstance(value, str):
                    return value
        return None
    return None


def process_json_from_response(messages: Any) -> List[Dict[str, Any]]:
    """Entries embedded as JSON (fenced or not) in the newest assistant reply."""
    data = parse_json_lenient(newest_assistant_text(messages))
    if isinstance(data, dict):
        data = [data] if "slug" in data else list(data.values())
    if not isinstance(data, list):
        return []
    return extract_entries(data)


def extract_entries(items: List[Any]) -> List[Dict[str, Any]]:
    """Keep items that carry slug, order and a strings list."""
    out = []
    for item in items:
        if not isinstance(item, dict):
            continue
        if item.get("slug") is None or item.get("order") is None:
            continue
        if not isinstance(item.get("strings"), list):
            continue
        out.append(item)
    return out


def register_outputs(
    entries: List[Dict[str, Any]],
    outputs: OutputRegistry,
    *,
    trusted_host: str = "pexels.com",
    namespace: str = "geniewp",
) -> List[str]:
    """Register one output filter per extracted string and image; returns the names."""
    names = []
    for entry in entries:
        for string in entry["strings"]:
            if not isinstance(string, dict) or not string.get("slug"):
                continue
            value = str(escape(str(string.get("value", ""))))
            name = output_name(str(string["slug"]), namespace)
            outputs.add_filter(name, lambda _default, v=value: v)
            names.append(name)

        for image in entry.get("images") or []:
            if not isinstance(image, dict) or not image.get("slug"):
                continue
            src = image.get("src")
            name = output_name(str(image["slug"]), namespace)
            url = trusted_image_url(src, trusted_host)
            if url is not None:
                outputs.add_filter(name, lambda _default, v=url: v)
            else:
                logger.warning("Ignoring image %r for %s: not a %s URL", src, name, trusted_host)
                outputs.add_filter(name, lambda default: default)
            names.append(name)
    return names


def _remote_id(body: Any) -> str:
    rid = body.get("id") if isinstance(body, dict) else None
    if not isinstance(rid, str) or not rid:
        raise MalformedAIResponse("OpenAI response did not include an id")
    return rid


def _check_id(value: Optional[str], what: str) -> str:
    if not value or not _REMOTE_ID_RE.match(value):
        raise InvalidInput(f"Invalid {what}.")
    return value


class AssistantProxy:
    def __init__(
        self,
        settings: GenieSettings,
        store: OptionStore,
        client_factory: Optional[ClientFactory] = None,
        outputs: Optional[OutputRegistry] = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.client_factory = client_factory or self._default_client
        self.outputs = outputs if outputs is not None else OutputRegistry()

    def _default_client(self, api_key: str) -> OpenAIClient:
        return OpenAIClient(
            api_key,
            base_url=self.settings.openai_base_url,
            timeout=self.settings.request_timeout,
            max_retries=self.settings.max_retries,
            beta=ASSISTANTS_BETA,
        )

    def api_key(self) -> str:
        return resolve_api_key(self.store, self.settings.openai_api_key)

    def thread_id(self) -> Optional[str]:
        return self.store.get_option(THREAD_ID_OPTION) or None

    def reset_thread(self) -> None:
        self.store.delete_option(THREAD_ID_OPTION)

    def _create_thread(self, client: OpenAIClient, message: Optional[str], metadata: Optional[dict]) -> str:
        body: Dict[str, Any] = {}
        if message:
            body["messages"] = [{"role": "user", "content": message}]
        if metadata:
            body["metadata"] = metadata
        return _remote_id(client.post("threads", body))

    def _run(self, client: OpenAIClient, thread_id: str, step: Optional[str]) -> str:
        assistant_id = self.settings.assistant_for(step)
        return _remote_id(client.post(f"threads/{thread_id}/runs", {"assistant_id": assistant_id}))

    def send(self, step: str, message: Optional[str] = None, template: Optional[str] = None) -> Dict[str, Any]:
        key = self.api_key()
        if not key:
            return _fail(API_KEY_MISSING)
        if step == "welcome":
            self.reset_thread()
        thread_id = self.thread_id()
        try:
            with self.client_factory(key) as client:
                if not thread_id:
                    meta = {"template": template} if template else None
                    thread_id = self._create_thread(client, message, meta)
                    self.store.set_option(THREAD_ID_OPTION, thread_id)
                elif message:
                    client.post(f"threads/{thread_id}/messages", {"role": "user", "content": message})
                run_id = self._run(client, thread_id, step)
        except GenieError as e:
            logger.warning("send(%s) failed: %s", step, e)
            return _fail(str(e))
        logger.info("Started run %s on thread %s for step %s", run_id, thread_id, step)
        return _ok({"thread_id": thread_id, "run_id": run_id})

    def status(self, thread_id: str, run_id: str) -> Dict[str, Any]:
        key = self.api_key()
        if not key:
            return _fail(API_KEY_MISSING)
        try:
            tid = _check_id(thread_id, "thread id")
            rid = _check_id(run_id, "run id")
            with self.client_factory(key) as client:
                body = client.get(f"threads/{tid}/runs/{rid}")
        except GenieError as e:
            return _fail(str(e))
        return _ok(body)

    def get(self, thread_id: str) -> Dict[str, Any]:
        key = self.api_key()
        if not key:
            return _fail(API_KEY_MISSING)
        try:
            tid = _check_id(thread_id, "thread id")
            with self.client_factory(key) as client:
                body = client.get(f"threads/{tid}/messages")
        except GenieError as e:
            return _fail(str(e))

        messages = body.get("data") if isinstance(body, dict) else None
        entries = process_json_from_response(messages)
        if entries:
            names = register_outputs(
                entries,
                self.outputs,
                trusted_host=self.settings.trusted_image_host,
                namespace=self.settings.namespace,
            )
            logger.info("Registered %d outputs from thread %s", len(names), tid)
        return _ok(body)

    def export(
        self,
        title: str,
        description: Optional[str] = None,
        images: Optional[List[Any]] = None,
        slug: Optional[str] = None,
    ) -> Dict[str, Any]:
        key = self.api_key()
        if not key:
            return _fail(API_KEY_MISSING)
        if not title:
            return _fail("Title is required.")
        slug = slug or sanitize_title(title, "theme")
        message = EXPORT_MESSAGE % (title, description or "", json.dumps(images))
        try:
            with self.client_factory(key) as client:
                thread_id = self._create_thread(client, message, {"slug": slug})
                run_id = self._run(client, thread_id, "export")
        except GenieError as e:
            logger.warning("export(%s) failed: %s", slug, e)
            return _fail(str(e))
        return _ok({"thread_id": thread_id, "run_id": run_id})

    def templates(self) -> Dict[str, Any]:
        return _ok(load_templates(self.settings.templates_dir))
