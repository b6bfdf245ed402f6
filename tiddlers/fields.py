"""Typed view over the open-ended tiddler metadata mapping.

A few fields mean something to the server (``title``, ``tags``, ``bag``,
``revision`` and the ``text`` body). Everything else a client sends is kept
in ``extra`` and written back untouched.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from .exceptions import BadTiddler


@dataclass
class TiddlerFields:
    title: Optional[str] = None
    tags: Optional[list[str]] = None
    bag: Optional[str] = None
    revision: Optional[int] = None
    text: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "TiddlerFields":
        extra = dict(data)
        title = extra.pop("title", None)
        tags = extra.pop("tags", None)
        text = extra.pop("text", None)
        # Clients echo these back; the store always overwrites them.
        extra.pop("bag", None)
        extra.pop("revision", None)

        if title is not None and not isinstance(title, str):
            raise BadTiddler("title must be a string")
        if text is not None and not isinstance(text, str):
            raise BadTiddler("text must be a string")
        if tags is not None:
            if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
                raise BadTiddler("tags must be a list of strings")

        return cls(title=title, tags=tags, text=text, extra=extra)

    def stamped(self, bag: str, revision: int) -> "TiddlerFields":
        return replace(self, bag=bag, revision=revision)

    def to_meta(self) -> dict[str, Any]:
        """Metadata mapping as stored: every field except the body."""
        meta = dict(self.extra)
        if self.title is not None:
            meta["title"] = self.title
        if self.tags is not None:
            meta["tags"] = list(self.tags)
        if self.bag is not None:
            meta["bag"] = self.bag
        if self.revision is not None:
            meta["revision"] = self.revision
        return meta


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(raw: str) -> float:
    value = float(raw)
    if math.isinf(value):
        raise ValueError(f"number {raw} is out of range")
    return value


def loads(raw: str | bytes) -> Any:
    """Strict JSON parse: NaN, Infinity and overflowing numbers are rejected."""
    return json.loads(raw, parse_constant=_reject_constant, parse_float=_finite_float)


def dump_meta(meta: dict[str, Any]) -> str:
    return json.dumps(meta, ensure_ascii=False, sort_keys=True)


def load_meta(raw: str) -> dict[str, Any]:
    """Parse a stored metadata blob. Raises ValueError when it is unusable."""
    meta = loads(raw)
    if not isinstance(meta, dict):
        raise ValueError("tiddler metadata is not a JSON object")
    return meta
