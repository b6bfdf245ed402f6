from __future__ import annotations

import logging
from typing import Any, Iterator

from django.conf import settings

from .fields import load_meta
from .models import Tiddler

logger = logging.getLogger(__name__)


def iter_current() -> Iterator[tuple[str, dict[str, Any], str]]:
    """Yield (title, metadata, body) for every live tiddler in storage order.

    Tombstones are left out. A tiddler whose stored metadata cannot be parsed
    is logged and skipped so that one bad row never hides the rest.
    """
    rows = Tiddler.objects.exclude(meta="").order_by("id").values_list("title", "meta", "text")
    for title, raw, text in rows.iterator():
        try:
            meta = load_meta(raw)
        except ValueError as exc:
            logger.warning("skipping tiddler %r with unreadable metadata: %s", title, exc)
            continue
        yield title, meta, text


def needs_inline_text(meta: dict[str, Any]) -> bool:
    # Macro tiddlers only take effect once loaded, so the client needs their
    # body in the skinny listing.
    tags = meta.get("tags")
    if not isinstance(tags, list):
        return False
    inline = set(settings.TIDDLY_INLINE_TAGS)
    return any(isinstance(tag, str) and tag in inline for tag in tags)


def list_all() -> Iterator[dict[str, Any]]:
    """Skinny tiddler list: metadata only, plus the body for macro tiddlers."""
    for _title, meta, text in iter_current():
        if needs_inline_text(meta):
            meta["text"] = text
        yield meta
