"""Base abstract models for the catalog.

Provides ``TimestampedModel``: ``created_at`` / ``updated_at`` columns that
are stamped explicitly by the Service Layer at the create/update boundary
instead of relying on ``auto_now`` / ``auto_now_add``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from django.db import models
from django.utils import timezone


class TimestampedModel(models.Model):
    """Abstract base with service-managed timestamp bookkeeping."""

    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField()

    class Meta:
        abstract = True

    def mark_created(self, at: Optional[datetime] = None) -> None:
        """Set both timestamps to the same instant."""
        now = at or timezone.now()
        self.created_at = now
        self.updated_at = now

    def mark_updated(self, at: Optional[datetime] = None) -> None:
        """Refresh ``updated_at``; ``created_at`` is never touched."""
        self.updated_at = at or timezone.now()
