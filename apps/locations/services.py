"""Availability calculator.

Availability is derived, never stored: for a location and a calendar day it
is the total pod capacity minus the number of confirmed bookings. Pending
bookings do not count against capacity; only confirmation consumes a pod.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.db import DatabaseError  # type: ignore
from django.db.models import Count  # type: ignore

from apps.bookings.models import Booking
from shared.exceptions import NotFoundError, StorageError

from .models import Location

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationAvailability:
    location_id: UUID
    location_name: str
    total_pods: int
    booked_pods: int
    available_pods: int

    @property
    def is_available(self) -> bool:
        return self.available_pods > 0


def remaining_pods(total_pods: int, booked_pods: int) -> int:
    return max(0, total_pods - booked_pods)


def confirmed_count(location_id, day: date) -> int:
    """Number of confirmed bookings holding a pod at the location on ``day``."""

    return Booking.objects.filter(
        location_id=location_id,
        booking_date=day,
        status=Booking.Status.CONFIRMED,
    ).count()


def _build(location: Location, booked: int) -> LocationAvailability:
    return LocationAvailability(
        location_id=location.id,
        location_name=location.name,
        total_pods=location.total_pods,
        booked_pods=booked,
        available_pods=remaining_pods(location.total_pods, booked),
    )


def availability_for_date(day: date | None) -> list[LocationAvailability]:
    """Availability of every location on ``day``; empty when no day is given."""

    if day is None:
        return []

    try:
        locations = list(Location.objects.order_by("name"))
        booked_by_location = dict(
            Booking.objects.filter(booking_date=day, status=Booking.Status.CONFIRMED)
            .values("location_id")
            .annotate(booked=Count("id"))
            .values_list("location_id", "booked")
        )
    except DatabaseError as exc:
        logger.error(f"Availability lookup for {day} failed: {exc}")
        raise StorageError("Availability lookup failed") from exc

    return [_build(location, booked_by_location.get(location.id, 0)) for location in locations]


def availability_for_location(location_id, day: date | None) -> LocationAvailability | None:
    """
    Availability of a single location on ``day``.

    Returns None when either argument is missing. Raises NotFoundError for an
    unknown location, which callers must not confuse with zero availability.
    """

    if location_id is None or day is None:
        return None

    try:
        location = Location.objects.get(pk=location_id)
        booked = confirmed_count(location.id, day)
    except (Location.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError("Location not found")
    except DatabaseError as exc:
        logger.error(f"Availability lookup for location {location_id} on {day} failed: {exc}")
        raise StorageError("Availability lookup failed") from exc

    return _build(location, booked)
