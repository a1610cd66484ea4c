"""
Expressions - Path Resolver

Walks dotted / bracketed accessor strings ("user.roles[0].name") over nested
JSON-like values. Every miss yields None; nothing here raises.
"""

import re
from typing import Any, List, Mapping, Optional
from urllib.parse import quote

_SEGMENT_SPLIT = re.compile(r"[.\[\]]")
_INDEX = re.compile(r"\d+")
_SLUG = re.compile(r":([A-Za-z_][A-Za-z0-9_.]*)")


def split_path(path: str) -> List[str]:
    """'a[0].b' -> ['a', '0', 'b']. Empty segments are dropped."""
    return [segment for segment in _SEGMENT_SPLIT.split(path) if segment]


def resolve_path(root: Any, path: Optional[str]) -> Any:
    """
    Returns the value at `path` inside `root`, or None when any segment misses.

    Sequences (lists/tuples) accept only non-negative integer segments,
    mappings accept any key. Strings and other scalars are never descended into.
    """
    if not isinstance(path, str):
        return None
    segments = split_path(path)
    if not segments:
        return None

    current = root
    for segment in segments:
        if isinstance(current, Mapping):
            if segment not in current:
                return None
            current = current[segment]
        elif isinstance(current, (list, tuple)):
            if not _INDEX.fullmatch(segment):
                return None
            index = int(segment)
            if index >= len(current):
                return None
            current = current[index]
        else:
            return None
    return current


def has_slugs(template: str) -> bool:
    return bool(_SLUG.search(template))


def resolve_slugged_path(template: str, params: Optional[Mapping[str, Any]]) -> str:
    """
    Replaces ':name' segments in a URL/path template with values looked up in
    `params` (dotted names are walked with resolve_path).
    Unresolved slugs are left in place so a later pass can fill them.
    """
    if not params:
        return template

    def _replace(match: "re.Match[str]") -> str:
        value = resolve_path(params, match.group(1))
        if value is None:
            return match.group(0)
        return quote(str(value), safe="")

    return _SLUG.sub(_replace, template)
