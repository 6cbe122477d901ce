"""
Booking event handlers

Write an audit trail for every booking state change. Self-reported
confirmations are logged at warning level so they can be reviewed
against bank statements.
"""

import structlog

from shared.application.message_bus import message_bus

from .domain.entities import VerificationMode
from .domain.events import BookingConfirmed, BookingCreated, BookingFailed, PaymentOrderIssued

audit_logger = structlog.get_logger("apps.payments.audit")


def on_booking_created(event: BookingCreated):
    audit_logger.info(
        "booking_created",
        booking_id=str(event.booking_id),
        location_id=str(event.location_id),
        booking_date=str(event.booking_date),
        price=event.price,
    )


def on_booking_confirmed(event: BookingConfirmed):
    log = audit_logger.warning if event.verification_mode == VerificationMode.SELF_REPORTED.value else audit_logger.info
    log(
        "booking_confirmed",
        booking_id=str(event.booking_id),
        location_id=str(event.location_id),
        booking_date=str(event.booking_date),
        verification_mode=event.verification_mode,
        payment_id=event.payment_id or None,
    )


def on_booking_failed(event: BookingFailed):
    audit_logger.info("booking_failed", booking_id=str(event.booking_id), reason=event.reason)


def on_payment_order_issued(event: PaymentOrderIssued):
    audit_logger.info(
        "payment_order_issued",
        booking_id=str(event.booking_id),
        order_id=event.order_id,
        amount=event.amount,
        currency=event.currency,
    )


def register_handlers():
    message_bus.register_event_handler(BookingCreated, on_booking_created)
    message_bus.register_event_handler(BookingConfirmed, on_booking_confirmed)
    message_bus.register_event_handler(BookingFailed, on_booking_failed)
    message_bus.register_event_handler(PaymentOrderIssued, on_payment_order_issued)
