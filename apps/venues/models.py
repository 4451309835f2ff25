"""Venue domain models for CourtBook."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Sport(models.Model):
    """Sport offered on the platform (badminton, table tennis, cricket nets...)."""

    name = models.CharField(max_length=50, unique=True)
    icon = models.CharField(
        max_length=100,
        blank=True,
        help_text=_("Frontend icon identifier."),
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = _("Sport")
        verbose_name_plural = _("Sports")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Venue(models.Model):
    """A sports facility listed by a provider."""

    class VerificationStatus(models.TextChoices):
        PENDING = "pending", _("Awaiting review")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")

    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="venues",
    )
    sport = models.ForeignKey(
        Sport,
        on_delete=models.PROTECT,
        related_name="venues",
        help_text=_("Primary sport shown in listings."),
    )
    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255)
    address = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    price_per_hour = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    is_active = models.BooleanField(default=True)
    is_verified = models.BooleanField(default=False)
    verification_status = models.CharField(
        max_length=20,
        choices=VerificationStatus.choices,
        default=VerificationStatus.PENDING,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Venue")
        verbose_name_plural = _("Venues")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["location"], name="venue_location_idx"),
            models.Index(fields=["verification_status", "is_active"], name="venue_listing_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def is_bookable(self) -> bool:
        return self.is_active and self.verification_status == self.VerificationStatus.APPROVED

    def approve(self) -> None:
        self.is_verified = True
        self.verification_status = self.VerificationStatus.APPROVED
        self.save(update_fields=["is_verified", "verification_status", "updated_at"])


class Resource(models.Model):
    """A single bookable table, court or net inside a venue."""

    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="resources")
    sport = models.ForeignKey(Sport, on_delete=models.PROTECT, related_name="resources")
    name = models.CharField(max_length=100, help_text=_("e.g. \"Court A\" or \"Table 3\"."))
    price_per_hour = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Overrides the venue price when set."),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Resource")
        verbose_name_plural = _("Resources")
        ordering = ["venue_id", "name"]
        constraints = [
            models.UniqueConstraint(fields=["venue", "name"], name="resource_unique_name_per_venue"),
        ]

    def __str__(self) -> str:
        return f"{self.venue.name} / {self.name}"

    @property
    def hourly_rate(self) -> Decimal:
        if self.price_per_hour is not None:
            return self.price_per_hour
        return self.venue.price_per_hour
