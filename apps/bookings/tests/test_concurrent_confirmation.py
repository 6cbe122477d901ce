"""Concurrent confirmations for the last pod, on databases with row locks."""

from __future__ import annotations

import threading
import unittest
from datetime import date

from django.db import connection, connections
from django.test import TransactionTestCase

from apps.bookings.domain.entities import VerificationMode
from apps.bookings.models import Booking
from apps.bookings.services import confirm_booking, create_booking
from apps.locations.models import Location
from shared.exceptions import ConflictError


@unittest.skipUnless(
    connection.features.has_select_for_update,
    "capacity re-check is serialized only where SELECT ... FOR UPDATE exists",
)
class ConcurrentConfirmationTests(TransactionTestCase):
    def setUp(self) -> None:
        self.location = Location.objects.create(name="Hub", address="Terminal 1", total_pods=1)
        self.bookings = [
            create_booking(
                location_id=self.location.id,
                customer_name=f"Guest {n}",
                customer_email=f"guest{n}@example.com",
                booking_date=date(2025, 6, 1),
                booking_time="14:00",
                duration="3 Hours",
                price=360,
            )
            for n in range(2)
        ]

    def test_last_pod_is_confirmed_once(self) -> None:
        barrier = threading.Barrier(len(self.bookings))
        outcomes: list[str] = []
        lock = threading.Lock()

        def confirm(booking_id) -> None:
            try:
                barrier.wait()
                confirm_booking(booking_id, VerificationMode.SELF_REPORTED)
                result = "confirmed"
            except ConflictError:
                result = "conflict"
            finally:
                connections.close_all()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=confirm, args=(b.id,)) for b in self.bookings]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(outcomes), ["confirmed", "conflict"])
        self.assertEqual(
            Booking.objects.filter(location=self.location, status=Booking.Status.CONFIRMED).count(),
            1,
        )
