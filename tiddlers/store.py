"""Revisioned tiddler store.

Every write or delete advances the title's revision by one and records the
new state twice: as the current ``Tiddler`` row and as an immutable
``TiddlerHistory`` snapshot. Both writes share one transaction, and the
current row is only replaced if it still carries the revision that was read
(compare-and-swap), so concurrent writers to one title cannot lose updates.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Callable, Optional, Tuple
from urllib.parse import quote_plus

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from .exceptions import BadTiddler, RevisionConflict, StalePrecondition, StoreError, TiddlerNotFound
from .fields import TiddlerFields, dump_meta, loads
from .models import Tiddler, TiddlerHistory

logger = logging.getLogger(__name__)

# (meta, text, tags) for the revision being written.
Snapshot = Tuple[str, str, list]


def get(title: str) -> Tiddler:
    try:
        return Tiddler.objects.get(title=title)
    except Tiddler.DoesNotExist:
        raise TiddlerNotFound(f"no tiddler named {title!r}")
    except DatabaseError as exc:
        logger.exception("reading tiddler %r failed", title)
        raise StoreError() from exc


def put(title: str, payload: bytes | str, expected_revision: Optional[int] = None) -> tuple[int, str]:
    """Store a raw JSON payload as the next revision of ``title``.

    Returns the new revision and the md5 fingerprint of the raw payload.
    When ``expected_revision`` is given the write only happens if it matches
    the current revision (0 for a title that was never written).
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    try:
        data = loads(payload)
    except ValueError as exc:
        raise BadTiddler(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise BadTiddler("tiddler must be a JSON object")

    fields = TiddlerFields.from_payload(data)
    bag = settings.TIDDLY_BAG

    def snapshot(revision: int) -> Snapshot:
        stamped = fields.stamped(bag=bag, revision=revision)
        return dump_meta(stamped.to_meta()), stamped.text or "", list(stamped.tags or [])

    revision = _advance(title, snapshot, expected_revision=expected_revision, must_exist=False)
    logger.info("stored tiddler %r revision %d", title, revision)
    return revision, hashlib.md5(payload).hexdigest()


def delete(title: str, expected_revision: Optional[int] = None) -> int:
    """Tombstone ``title``: a new revision with metadata and body cleared."""
    revision = _advance(title, lambda revision: ("", "", []), expected_revision=expected_revision, must_exist=True)
    logger.info("deleted tiddler %r revision %d", title, revision)
    return revision


def etag(title: str, revision: int, fingerprint: str) -> str:
    return f'"{settings.TIDDLY_BAG}/{quote_plus(title)}/{revision}:{fingerprint}"'


def _advance(
    title: str,
    snapshot: Callable[[int], Snapshot],
    *,
    expected_revision: Optional[int],
    must_exist: bool,
) -> int:
    try:
        with transaction.atomic():
            current = Tiddler.objects.select_for_update().filter(title=title).first()
            if current is None and must_exist:
                raise TiddlerNotFound(f"no tiddler named {title!r}")

            current_revision = current.revision if current is not None else 0
            if expected_revision is not None and expected_revision != current_revision:
                raise StalePrecondition(
                    f"{title!r} is at revision {current_revision}, not {expected_revision}"
                )

            revision = current_revision + 1
            meta, text, tags = snapshot(revision)

            if current is None:
                Tiddler.objects.create(title=title, revision=revision, meta=meta, text=text, tags=tags)
            else:
                updated = Tiddler.objects.filter(title=title, revision=current_revision).update(
                    revision=revision,
                    meta=meta,
                    text=text,
                    tags=tags,
                    updated_at=timezone.now(),
                )
                if not updated:
                    raise RevisionConflict()

            TiddlerHistory.objects.create(title=title, revision=revision, meta=meta, text=text, tags=tags)
    except IntegrityError as exc:
        # Another writer created the title or its history row first.
        logger.warning("concurrent write to tiddler %r: %s", title, exc)
        raise RevisionConflict() from exc
    except DatabaseError as exc:
        logger.exception("writing tiddler %r failed", title)
        raise StoreError() from exc
    return revision
