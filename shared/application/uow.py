"""
Unit of Work Pattern

Wraps a database transaction and defers publishing of domain events until
the transaction has committed, so handlers never observe state that was
rolled back.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = Booking.objects.create(...)
            uow.collect(BookingCreated(booking_id=booking.id, ...))
        # Events are published after commit
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def collect(self, event: DomainEvent):
        self._events.append(event)

    def commit(self):
        """Schedule event publishing for when the outermost transaction commits"""
        events = self._events.copy()
        self._events.clear()
        if events:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        if self._events:
            logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    @staticmethod
    def _publish_events(events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        message_bus.publish_events(events)
