"""
Booking Domain Entities

- BookingStatus: FSM states for the booking lifecycle
- PaymentStatus: payment state tracking
- VerificationMode: how a confirmation was justified
"""

from enum import Enum

from shared.exceptions import ConflictError


class BookingStatus(str, Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PENDING -> CONFIRMED (signature verified, or customer reported payment)
    - PENDING -> FAILED (cancelled, abandoned or expired)

    CONFIRMED and FAILED are terminal.
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    FAILED = 'failed'


class PaymentStatus(str, Enum):
    UNPAID = 'unpaid'
    PAID = 'paid'


class VerificationMode(str, Enum):
    """
    Trust level behind a confirmation.

    CRYPTOGRAPHIC confirmations carry a provider payment id whose signature
    was checked with the shared secret. SELF_REPORTED confirmations rest on
    the customer's word after an out-of-band UPI payment and are audited
    separately.
    """
    CRYPTOGRAPHIC = 'cryptographic'
    SELF_REPORTED = 'self_reported'


TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.FAILED}),
    BookingStatus.CONFIRMED: frozenset(),
    BookingStatus.FAILED: frozenset(),
}

TERMINAL_STATES = frozenset(state for state, targets in TRANSITIONS.items() if not targets)


def is_terminal(status) -> bool:
    return BookingStatus(status) in TERMINAL_STATES


def can_transition(current, target) -> bool:
    return BookingStatus(target) in TRANSITIONS[BookingStatus(current)]


def assert_transition(current, target) -> None:
    """Raise ConflictError unless ``current -> target`` is a defined transition."""

    if not can_transition(current, target):
        raise ConflictError(
            f"Booking is {BookingStatus(current).value} and cannot become {BookingStatus(target).value}"
        )
