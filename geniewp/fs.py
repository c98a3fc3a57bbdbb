from __future__ import annotations

import os
from typing import Iterable, List, Optional, Set

from .errors import StorageError, ThemeAlreadyExists
from .sanitize import sanitize_title

SLUG_PREFIX = "geniewp-"
THEME_SUBDIRS = ("templates", "parts", "patterns", os.path.join("assets", "css"))


def safe_join(root: str, rel: str) -> str:
    root_abs = os.path.abspath(root)
    dest = os.path.abspath(os.path.join(root_abs, rel or "."))
    if not dest.startswith(root_abs + os.sep) and dest != root_abs:
        raise StorageError(f"Invalid path: {rel}")
    return dest


def installed_themes(themes_root: str) -> List[str]:
    """Directory names under themes_root that hold a style.css."""
    if not os.path.isdir(themes_root):
        return []
    try:
        with os.scandir(themes_root) as it:
            names = [
                e.name
                for e in it
                if e.is_dir() and os.path.isfile(os.path.join(e.path, "style.css"))
            ]
    except OSError as e:
        raise StorageError(f"Could not list installed themes: {e}") from e
    return sorted(names)


def base_theme_slug(site_name: str) -> str:
    return SLUG_PREFIX + sanitize_title(site_name, "theme")


def unique_theme_slug(site_name: str, taken: Iterable[str], themes_root: Optional[str] = None) -> str:
    """First free slug for `site_name`; with `themes_root`, any existing entry
    there counts as taken, half-written themes included."""
    used: Set[str] = set(taken)
    base = base_theme_slug(site_name)
    cand = base
    i = 1
    while cand in used or (themes_root and os.path.lexists(os.path.join(themes_root, cand))):
        cand = f"{base}-{i}"
        i += 1
    return cand


def create_theme_dir(themes_root: str, slug: str) -> str:
    """Claim `slug` with an exclusive mkdir, then lay out the theme subdirectories."""
    path = safe_join(themes_root, slug)
    try:
        os.makedirs(themes_root, exist_ok=True)
    except OSError as e:
        raise StorageError(f"Could not create themes directory: {e}") from e
    try:
        os.mkdir(path)
    except FileExistsError as e:
        raise ThemeAlreadyExists(f"Theme directory already exists: {slug}") from e
    except OSError as e:
        raise StorageError(f"Could not create theme directory: {e}") from e
    try:
        for sub in THEME_SUBDIRS:
            os.makedirs(os.path.join(path, sub), exist_ok=True)
    except OSError as e:
        raise StorageError(f"Could not create theme directory: {e}") from e
    return path


def write_file(directory: str, rel: str, text: str) -> str:
    dest = safe_join(directory, rel)
    try:
        os.makedirs(os.path.dirname(dest), exist_ok=True)
        with open(dest, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
    except OSError as e:
        raise StorageError(f"Could not write {rel}: {e}") from e
    return dest
