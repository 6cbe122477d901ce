"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import expire_stale_pending_bookings

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.expire_pending_bookings")
def expire_pending_bookings() -> dict[str, int]:
    """
    Fail pending bookings that were never paid.

    A booking left pending longer than PENDING_BOOKING_TTL_MINUTES is moved
    to FAILED with reason "expired". Confirmed bookings are never touched.

    Runs every five minutes via Celery Beat.

    Returns:
        dict: {"expired": number of bookings failed}
    """
    expired_count = expire_stale_pending_bookings()
    return {"expired": expired_count}
