"""Shared fixtures for tests that need a bookable court."""

from __future__ import annotations

import itertools
from decimal import Decimal

from apps.users.models import User
from apps.venues.models import Resource, Sport, Venue

_sequence = itertools.count(1)


def create_user(role: str = User.RoleChoices.CUSTOMER, **extra) -> User:
    n = next(_sequence)
    return User.objects.create_user(
        email=f"{role}{n}@example.com",
        phone=f"+91980000{n:04d}",
        password="PlayFair123",
        role=role,
        **extra,
    )


def create_court(
    *,
    provider: User | None = None,
    price: str = "500.00",
    name: str = "Court A",
    approved: bool = True,
) -> Resource:
    provider = provider or create_user(User.RoleChoices.PROVIDER)
    sport, _ = Sport.objects.get_or_create(name="Badminton")
    venue = Venue.objects.create(
        provider=provider,
        sport=sport,
        name=f"Smash Arena {next(_sequence)}",
        location="Indiranagar, Bengaluru",
        price_per_hour=Decimal(price),
        verification_status=(
            Venue.VerificationStatus.APPROVED if approved else Venue.VerificationStatus.PENDING
        ),
        is_verified=approved,
    )
    return Resource.objects.create(venue=venue, sport=sport, name=name)
