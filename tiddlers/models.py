from __future__ import annotations

from django.db import models


class Tiddler(models.Model):
    """Current state of a tiddler. An empty ``meta`` marks a tombstone."""

    title = models.CharField(max_length=512, unique=True, db_index=True)
    revision = models.PositiveIntegerField(default=0)

    # Raw JSON object text, kept verbatim so unreadable blobs can be skipped.
    meta = models.TextField(blank=True, default="")
    text = models.TextField(blank=True, default="")
    tags = models.JSONField(blank=True, default=list)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.title}#{self.revision}"

    @property
    def is_tombstone(self) -> bool:
        return not self.meta


class TiddlerHistory(models.Model):
    title = models.CharField(max_length=512, db_index=True)
    revision = models.PositiveIntegerField()
    meta = models.TextField(blank=True, default="")
    text = models.TextField(blank=True, default="")
    tags = models.JSONField(blank=True, default=list)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["title", "revision"], name="tiddler_history_title_revision"),
        ]

    def __str__(self) -> str:
        return f"{self.title}#{self.revision}"
