from __future__ import annotations

from typing import Any, Callable, Dict, List

OutputFilter = Callable[[Any], Any]


def output_name(slug: str, namespace: str = "geniewp") -> str:
    return f"{namespace}/{slug}"


class OutputRegistry:
    """Registry of named output filters extracted from assistant replies.

    A filter receives the caller's default value and returns the value to
    use. Registering a name twice replaces the earlier filter.
    """

    def __init__(self) -> None:
        self._filters: Dict[str, OutputFilter] = {}

    def add_filter(self, name: str, fn: OutputFilter) -> None:
        self._filters[name] = fn

    def apply_filters(self, name: str, default: Any = None) -> Any:
        fn = self._filters.get(name)
        return fn(default) if fn else default

    def names(self) -> List[str]:
        return sorted(self._filters)
