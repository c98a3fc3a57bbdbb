from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

STARTER_TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "starter_templates")


def load_templates(directory: Optional[str] = None) -> List[Dict[str, Any]]:
    """Parsed *.json starter templates in `directory`, sorted by file name.

    Unreadable, empty or non-object files are skipped.
    """
    directory = directory or STARTER_TEMPLATES_DIR
    try:
        names = sorted(n for n in os.listdir(directory) if n.lower().endswith(".json"))
    except OSError as e:
        logger.warning("Cannot list starter templates in %s: %s", directory, e)
        return []
    out: List[Dict[str, Any]] = []
    for name in names:
        path = os.path.join(directory, name)
        if not os.path.isfile(path):
            continue
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Skipping starter template %s: %s", name, e)
            continue
        if isinstance(data, dict) and data:
            out.append(data)
    return out
