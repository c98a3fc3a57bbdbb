from __future__ import annotations

import random
import time
from typing import Any, Dict, Optional

import httpx

from .errors import RemoteAPIError, TransportError

_RETRIABLE_STATUS = {429, 500, 502, 503, 504}
ASSISTANTS_BETA = "assistants=v2"


def _backoff_delay(attempt: int, retry_after: Optional[str]) -> float:
    if retry_after and retry_after.isdigit():
        base = float(retry_after)
    else:
        base = float(2 ** attempt)
    jitter = random.uniform(0, base * 0.5)
    return base + jitter


def _error_message(body: Any) -> Optional[str]:
    if not isinstance(body, dict) or "error" not in body:
        return None
    err = body["error"]
    if isinstance(err, dict):
        return str(err.get("message") or "Unknown API error")
    return str(err or "Unknown API error")


class OpenAIClient:
    """Thin synchronous JSON client for the OpenAI REST API.

    Every call returns the decoded JSON body or raises TransportError
    (network failure) / RemoteAPIError (error body, non-2xx, undecodable body).
    Pass `http` to inject a preconfigured httpx.Client (tests use MockTransport).
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
        max_retries: int = 0,
        beta: Optional[str] = None,
        http: Optional[httpx.Client] = None,
    ) -> None:
        if not api_key:
            raise RuntimeError("OpenAI API key not set.")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.max_retries = max(0, int(max_retries))
        self.beta = beta
        self._http = http or httpx.Client(
            timeout=httpx.Timeout(timeout, connect=10.0),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )
        self._owns_http = http is None

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.beta:
            headers["OpenAI-Beta"] = self.beta
        return headers

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "OpenAIClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def request(self, method: str, path: str, *, json: Optional[dict] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        for attempt in range(self.max_retries + 1):
            try:
                resp = self._http.request(method, url, headers=self._headers(), json=json)
            except httpx.HTTPError as e:
                if attempt < self.max_retries:
                    time.sleep(_backoff_delay(attempt, None))
                    continue
                raise TransportError(str(e) or e.__class__.__name__) from e
            if resp.status_code in _RETRIABLE_STATUS and attempt < self.max_retries:
                time.sleep(_backoff_delay(attempt, resp.headers.get("Retry-After")))
                continue
            return self._decode(resp)
        # Should not reach here, but just in case
        raise TransportError("OpenAI request failed without specific error")

    def _decode(self, resp: httpx.Response) -> Any:
        try:
            body = resp.json()
        except (ValueError, RecursionError):
            body = None
        if (msg := _error_message(body)) is not None:
            raise RemoteAPIError(msg, status_code=resp.status_code)
        if not resp.is_success:
            raise RemoteAPIError(f"HTTP {resp.status_code} from OpenAI", status_code=resp.status_code)
        if body is None:
            raise RemoteAPIError("Invalid JSON response from OpenAI", status_code=resp.status_code)
        return body

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, body: dict) -> Any:
        return self.request("POST", path, json=body)
