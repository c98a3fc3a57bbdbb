from __future__ import annotations

import logging
import os
import threading
from typing import Any, Callable, Dict, Optional

from .ai_content import fetch_ai_theme_content
from .config import GenieSettings
from .fs import create_theme_dir, installed_themes, unique_theme_slug, write_file
from .normalizer import normalize
from .renderer import render_theme_files
from .store import OptionStore, resolve_api_key, theme_data_option
from .theme_data import GeneratedTheme, ThemeRequest

logger = logging.getLogger(__name__)

# Held from slug selection until the theme directory exists.
_slug_lock = threading.Lock()

Fetcher = Callable[..., Optional[Dict[str, Any]]]


class ThemeAssembler:
    """Turns a ThemeRequest into a theme directory under settings.themes_root.

    Raises InvalidInput, ThemeAlreadyExists or StorageError. AI failures are
    logged and the theme is built from defaults.
    """

    def __init__(
        self,
        settings: GenieSettings,
        store: OptionStore,
        fetcher: Fetcher = fetch_ai_theme_content,
    ) -> None:
        self.settings = settings
        self.store = store
        self.fetcher = fetcher

    def api_key(self) -> str:
        return resolve_api_key(self.store, self.settings.openai_api_key)

    def _ai_payload(self, request: ThemeRequest) -> Optional[Dict[str, Any]]:
        key = self.api_key()
        if not key:
            return None
        payload = self.fetcher(key, request, settings=self.settings)
        if payload is None:
            logger.warning("Generating %r without AI content", request.site_name)
        return payload

    def assemble(self, request: ThemeRequest, *, year: Optional[int] = None) -> GeneratedTheme:
        req = request.sanitized()
        req.validate()

        root = self.settings.themes_root
        with _slug_lock:
            slug = unique_theme_slug(req.site_name, installed_themes(root), root)
            payload = self._ai_payload(req)
            data = normalize(req, payload)
            directory = create_theme_dir(root, slug)

        written = []
        for rel, text in render_theme_files(data, year).items():
            written.append(write_file(directory, rel, text))

        self.store.set_option(theme_data_option(slug), data.to_json_dict())
        logger.info("Generated theme %s in %s (%d files, ai=%s)", slug, directory, len(written), payload is not None)
        return GeneratedTheme(
            slug=slug,
            name=data.site_name,
            directory=os.path.abspath(directory),
            files=tuple(written),
            ai_enhanced=payload is not None,
        )
