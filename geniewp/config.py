from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Dict, Optional


DEFAULT_ASSISTANT_ID = "asst_gZK2vTq5EIN2LJOKI6DlG33S"

DEFAULT_ASSISTANT_IDS: Dict[str, str] = {
    "welcome": DEFAULT_ASSISTANT_ID,
    "site-description": DEFAULT_ASSISTANT_ID,
    "site-topic": DEFAULT_ASSISTANT_ID,
    "color-palette": "asst_13H3CB33PlF99C3KOX3z9D4x",
    "template": DEFAULT_ASSISTANT_ID,
    "image": "asst_5p0q4VWVbJKG0X1zH23Zk33S",
    "view-site": DEFAULT_ASSISTANT_ID,
    "export": DEFAULT_ASSISTANT_ID,
}


@dataclass
class GenieSettings:
    themes_root: str = "themes"
    secret_key: str = "dev-secret"
    algorithm: str = "HS256"
    # Used only when no key is stored in the option store
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    chat_model: str = "gpt-4o-mini"
    chat_temperature: float = 0.7
    chat_max_tokens: int = 2000
    request_timeout: float = 30.0
    max_retries: int = 0
    assistant_ids: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ASSISTANT_IDS))
    default_assistant_id: str = DEFAULT_ASSISTANT_ID
    trusted_image_host: str = "pexels.com"
    # Directory of JSON starter templates; None means the packaged ones
    templates_dir: Optional[str] = None
    admin_url: str = "/wp-admin"
    namespace: str = "geniewp"
    database_url: str = "sqlite:///geniewp.db"
    require_auth: bool = True
    nonce_expire_minutes: int = 60 * 24
    access_expire_minutes: int = 60 * 24 * 7

    @classmethod
    def from_env(cls, **overrides) -> "GenieSettings":
        """Build settings from GENIEWP_* variables, looked up at call-time."""
        s = cls()
        s.themes_root = os.getenv("GENIEWP_THEMES_ROOT", s.themes_root)
        s.secret_key = os.getenv("GENIEWP_SECRET_KEY", s.secret_key)
        s.openai_api_key = os.getenv("OPENAI_API_KEY", s.openai_api_key)
        s.openai_base_url = os.getenv("GENIEWP_OPENAI_BASE_URL", s.openai_base_url).rstrip("/")
        s.chat_model = os.getenv("GENIEWP_CHAT_MODEL", s.chat_model)
        s.request_timeout = float(os.getenv("GENIEWP_REQUEST_TIMEOUT", str(s.request_timeout)))
        s.max_retries = int(os.getenv("GENIEWP_MAX_RETRIES", str(s.max_retries)))
        s.trusted_image_host = os.getenv("GENIEWP_TRUSTED_IMAGE_HOST", s.trusted_image_host)
        s.templates_dir = os.getenv("GENIEWP_TEMPLATES_DIR") or s.templates_dir
        s.admin_url = os.getenv("GENIEWP_ADMIN_URL", s.admin_url).rstrip("/")
        s.namespace = os.getenv("GENIEWP_NAMESPACE", s.namespace)
        s.database_url = os.getenv("GENIEWP_DATABASE_URL", s.database_url)
        s.require_auth = os.getenv("GENIEWP_REQUIRE_AUTH", "1").lower() not in ("0", "false", "no", "off")
        if raw := os.getenv("GENIEWP_ASSISTANT_IDS"):
            try:
                extra = json.loads(raw)
            except ValueError as e:
                raise ValueError(f"GENIEWP_ASSISTANT_IDS is not valid JSON: {e}") from e
            if not isinstance(extra, dict):
                raise ValueError("GENIEWP_ASSISTANT_IDS must be a JSON object")
            s.assistant_ids.update({str(k): str(v) for k, v in extra.items()})
        for k, v in overrides.items():
            setattr(s, k, v)
        return s

    def assistant_for(self, step: Optional[str]) -> str:
        return self.assistant_ids.get(step or "", self.default_assistant_id)
