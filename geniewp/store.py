from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict

API_KEY_OPTION = "open_ai_api_key"
THREAD_ID_OPTION = "geniewp_thread_id"


def theme_data_option(slug: str) -> str:
    return f"geniewp_theme_data_{slug}"


def setup_complete_option(slug: str) -> str:
    return f"geniewp_theme_setup_complete_{slug}"


class OptionStore(ABC):
    """Abstract key/value option store.

    Values are JSON-compatible (str, numbers, bools, lists, dicts).
    """

    @abstractmethod
    def get_option(self, name: str, default: Any = None) -> Any: ...

    @abstractmethod
    def set_option(self, name: str, value: Any) -> None: ...

    @abstractmethod
    def delete_option(self, name: str) -> bool: ...


class InMemoryOptionStore(OptionStore):
    """Simple in-memory store for testing.

    Not persistent; values are deep-copied in and out.
    """

    def __init__(self, initial: Dict[str, Any] | None = None) -> None:
        self.options: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get_option(self, name: str, default: Any = None) -> Any:
        if name not in self.options:
            return default
        return copy.deepcopy(self.options[name])

    def set_option(self, name: str, value: Any) -> None:
        self.options[name] = copy.deepcopy(value)

    def delete_option(self, name: str) -> bool:
        return self.options.pop(name, None) is not None


def resolve_api_key(store: OptionStore, fallback: str = "") -> str:
    """The stored API key, else `fallback` (usually settings.openai_api_key)."""
    return store.get_option(API_KEY_OPTION) or fallback or ""
