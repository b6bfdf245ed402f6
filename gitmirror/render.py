"""Render tiddlers in the TiddlyWiki ``.tid`` file format.

Fields are written sorted by name so the same tiddler always produces the
same bytes, whatever order its metadata was stored in.
"""

from __future__ import annotations

import json
from typing import Any

TID_SUFFIX = ".tid"

_ESCAPES = {"%": "%25", "/": "%2F", "\\": "%5C", "\x00": "%00"}


def tid_filename(title: str) -> str:
    """File name for ``title``: the title itself, escaped just enough to stay one file."""
    name = "".join(_ESCAPES.get(ch, ch) for ch in title)
    if name.startswith("."):
        name = "%2E" + name[1:]
    return name + TID_SUFFIX


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return " ".join(format_value(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
    return str(value)


def render_tiddler(meta: dict[str, Any], text: str) -> str:
    lines = []
    for key in sorted(meta):
        if key == "text":
            continue
        value = meta[key]
        # An empty tag list renders no line at all.
        if key == "tags" and not value:
            continue
        lines.append(f"{key}: {format_value(value)}\n")
    lines.append("\n")
    lines.append(text)
    return "".join(lines)
