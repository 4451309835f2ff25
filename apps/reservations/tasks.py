"""Celery tasks for slot reservations."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import sweep_expired_locks as sweep

logger = logging.getLogger(__name__)


@shared_task(name="reservations.sweep_expired_locks")
def sweep_expired_locks() -> dict[str, int]:
    """
    Reclaim slot locks whose payment window has elapsed.

    Runs every minute through Celery Beat. Reads of the slot catalogue also
    sweep first, so this task only bounds how long a stale row lingers.

    Returns:
        dict: {"expired": number of locks moved to expired}
    """
    return {"expired": sweep()}
