"""
Reconciliation Flow Controller

Orchestrates booking creation, availability gating, payment initiation and
completion for the three supported flows:

- hosted checkout: provider order, then signed receipt verification
- manual UPI: deep link, then the customer's own report (unverified)
- availability gate: applied before any payment is initiated

The payment client is injected; the flow never reaches for a process-wide
provider handle.
"""

from __future__ import annotations

import logging

import structlog

from apps.locations.services import availability_for_location
from apps.payments.gateway import RazorpayClient
from apps.payments.services import (
    PaymentOrder,
    VerificationResult,
    create_order,
    validate_order_request,
    verify_payment,
)
from apps.payments.upi import build_upi_link
from shared.exceptions import ConflictError, ValidationError

from ..domain.entities import BookingStatus, VerificationMode
from ..models import Booking
from ..services import cancel_booking, confirm_booking, create_booking, get_booking

logger = logging.getLogger(__name__)
audit_logger = structlog.get_logger("apps.payments.audit")

REPORT_PAID = 'paid'
REPORT_FAILED = 'failed'


class ReconciliationFlow:
    """
    Drives a booking from creation to a terminal state.

    Usage:
        with RazorpayClient.from_settings() as client:
            flow = ReconciliationFlow(client)
            order = flow.start_hosted_checkout(booking_id, amount)
    """

    def __init__(self, payment_client: RazorpayClient):
        self.payment_client = payment_client

    # ------------------------------------------------------------------
    # Shared steps
    # ------------------------------------------------------------------

    def create_booking(self, **data) -> Booking:
        return create_booking(**data)

    def ensure_payable(self, booking: Booking) -> None:
        """
        Availability gate.

        Raises ConflictError when the booking is no longer pending or its
        location has no free pod left on the booking date.
        """
        if booking.status != BookingStatus.PENDING.value:
            raise ConflictError(f"Booking is already {booking.status}")

        availability = availability_for_location(booking.location_id, booking.booking_date)
        if availability is None or not availability.is_available:
            logger.info(
                f"Payment blocked for booking {booking.id}: "
                f"no pods at {booking.location_id} on {booking.booking_date}"
            )
            raise ConflictError("No pods available for this date")

    # ------------------------------------------------------------------
    # Hosted checkout
    # ------------------------------------------------------------------

    def start_hosted_checkout(self, booking_id, amount) -> PaymentOrder:
        booking_id, amount = validate_order_request(booking_id, amount)
        self.ensure_payable(get_booking(booking_id))
        return create_order(booking_id, amount, client=self.payment_client)

    def complete_hosted_checkout(self, order_id, payment_id, signature, booking_id) -> VerificationResult:
        """
        Verify the receipt from the hosted checkout.

        A failed result leaves the booking pending; the customer pays
        again rather than resubmitting the same receipt.
        """
        return verify_payment(order_id, payment_id, signature, booking_id)

    # ------------------------------------------------------------------
    # Manual UPI
    # ------------------------------------------------------------------

    def start_manual_payment(self, booking_id) -> str:
        booking = get_booking(booking_id)
        self.ensure_payable(booking)
        return build_upi_link(booking)

    def report_manual_payment(self, booking_id, outcome: str) -> Booking:
        """
        Apply the customer's own report of an out-of-band UPI payment.

        ``paid`` confirms the booking as SELF_REPORTED without any provider
        evidence; ``failed`` cancels it.
        """
        if outcome == REPORT_FAILED:
            return self.report_failure(booking_id, reason='payment_failed')
        if outcome != REPORT_PAID:
            raise ValidationError("Outcome must be 'paid' or 'failed'")

        booking = get_booking(booking_id)
        self.ensure_payable(booking)
        booking = confirm_booking(booking.id, VerificationMode.SELF_REPORTED)
        audit_logger.warning(
            "self_reported_confirmation",
            booking_id=str(booking.id),
            location_id=str(booking.location_id),
            price=booking.price,
            verified=False,
        )
        return booking

    def report_failure(self, booking_id, reason: str = 'cancelled') -> Booking:
        """Customer dismissed the checkout or abandoned payment."""

        return cancel_booking(booking_id, reason)
