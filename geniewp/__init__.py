from .config import GenieSettings
from .errors import (
    GenieError, InvalidInput, ThemeAlreadyExists, StorageError,
    RemoteAPIError, TransportError, MalformedAIResponse, AIUnavailable,
)
from .theme_data import ThemeRequest, ThemeData, GeneratedTheme
from .normalizer import normalize
from .json_utils import parse_json_lenient
from .ai_content import fetch_ai_theme_content
from .renderer import render_theme_files
from .assembler import ThemeAssembler
from .outputs import OutputRegistry
from .assistant import AssistantProxy
from .catalog import load_templates
from .initial_content import InitialContent, InMemorySite
from .store import OptionStore, InMemoryOptionStore
from .sqlite_store import SQLiteOptionStore, create_sqlite_store
from .router import create_geniewp_router
from .app import create_app

__all__ = [
    "GenieSettings",
    "GenieError", "InvalidInput", "ThemeAlreadyExists", "StorageError",
    "RemoteAPIError", "TransportError", "MalformedAIResponse", "AIUnavailable",
    "ThemeRequest", "ThemeData", "GeneratedTheme",
    "normalize", "parse_json_lenient", "fetch_ai_theme_content", "render_theme_files",
    "ThemeAssembler", "OutputRegistry", "AssistantProxy", "load_templates",
    "InitialContent", "InMemorySite",
    "OptionStore", "InMemoryOptionStore", "SQLiteOptionStore", "create_sqlite_store",
    "create_geniewp_router", "create_app",
]
