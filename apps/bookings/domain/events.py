"""
Booking Domain Events

Events that represent things that have happened to a booking. They are
published after the transaction that caused them commits.
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass
class BookingCreated(DomainEvent):
    booking_id: UUID | None = None
    location_id: UUID | None = None
    booking_date: date | None = None
    price: int = 0


@dataclass
class BookingConfirmed(DomainEvent):
    """
    Event: PENDING -> CONFIRMED

    ``verification_mode`` distinguishes verified payments from
    self-reported ones for audit.
    """
    booking_id: UUID | None = None
    location_id: UUID | None = None
    booking_date: date | None = None
    verification_mode: str = ''
    payment_id: str = ''


@dataclass
class BookingFailed(DomainEvent):
    """Event: PENDING -> FAILED (cancelled, abandoned or expired)"""
    booking_id: UUID | None = None
    reason: str = ''


@dataclass
class PaymentOrderIssued(DomainEvent):
    booking_id: UUID | None = None
    order_id: str = ''
    amount: int = 0
    currency: str = ''
