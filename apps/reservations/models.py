"""Slot lock model."""

from __future__ import annotations

import math
import uuid
from datetime import datetime

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class SlotLock(models.Model):
    """A customer's time-bounded exclusive hold on one slot of one resource."""

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        RELEASED = "released", _("Released by holder")
        CONVERTED = "converted", _("Converted to booking")
        EXPIRED = "expired", _("Expired")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    resource = models.ForeignKey(
        "venues.Resource",
        on_delete=models.CASCADE,
        related_name="slot_locks",
    )
    slot_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    locked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="slot_locks",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    locked_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField()
    released_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Slot lock")
        verbose_name_plural = _("Slot locks")
        ordering = ["-locked_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["resource", "slot_date", "start_time"],
                condition=Q(status="active"),
                name="slot_lock_one_active_per_slot",
            ),
            models.CheckConstraint(
                condition=Q(end_time__gt=F("start_time")),
                name="slot_lock_valid_window",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "expires_at"], name="slot_lock_sweep_idx"),
            models.Index(fields=["resource", "slot_date", "status"], name="slot_lock_catalog_idx"),
        ]

    def __str__(self) -> str:
        return f"Lock {self.id} on {self.resource_id} {self.slot_date} {self.start_time:%H:%M}"

    @property
    def label(self) -> str:
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or timezone.now()
        return now > self.expires_at

    def is_live(self, now: datetime | None = None) -> bool:
        """Active and still inside its window; only a live lock grants exclusivity."""
        return self.status == self.Status.ACTIVE and not self.is_expired(now)

    def seconds_remaining(self, now: datetime | None = None) -> int:
        if self.status != self.Status.ACTIVE:
            return 0
        now = now or timezone.now()
        return max(0, math.floor((self.expires_at - now).total_seconds()))
