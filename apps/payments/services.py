"""
Payment order issuer and signature verifier.

``create_order`` asks the provider for an order and links its id to a
pending booking. ``verify_payment`` authenticates the signed receipt the
hosted checkout hands back and, only when it checks out, confirms the
booking the receipt was issued for.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Any

import structlog
from django.conf import settings
from rest_framework import status

from apps.bookings.domain.entities import VerificationMode
from apps.bookings.domain.events import PaymentOrderIssued
from apps.bookings.models import Booking
from apps.bookings.services import (
    attach_order,
    confirm_booking,
    get_booking,
    record_verified_payment,
)
from shared.application.uow import DjangoUnitOfWork
from shared.exceptions import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
    VerificationError,
)

from .gateway import RazorpayClient
from .validators import (
    validate_amount,
    validate_booking_id,
    validate_order_id,
    validate_payment_id,
    validate_signature,
)

logger = logging.getLogger(__name__)
audit_logger = structlog.get_logger("apps.payments.audit")


@dataclass(frozen=True)
class PaymentOrder:
    order_id: str
    amount: int
    currency: str
    key_id: str
    booking_id: str

    def to_response(self) -> dict[str, Any]:
        # Only the publishable key crosses the boundary.
        return {
            'orderId': self.order_id,
            'amount': self.amount,
            'currency': self.currency,
            'keyId': self.key_id,
        }


@dataclass(frozen=True)
class VerificationResult:
    success: bool
    message: str = ''
    error: str = ''
    error_code: str = ''

    _STATUS_BY_CODE = {
        ValidationError.code: status.HTTP_400_BAD_REQUEST,
        VerificationError.code: status.HTTP_400_BAD_REQUEST,
        NotFoundError.code: status.HTTP_404_NOT_FOUND,
        ConflictError.code: status.HTTP_409_CONFLICT,
    }

    @classmethod
    def ok(cls, message: str) -> 'VerificationResult':
        return cls(success=True, message=message)

    @classmethod
    def failed(cls, exc) -> 'VerificationResult':
        return cls(success=False, error=exc.public_detail, error_code=exc.code)

    @property
    def http_status(self) -> int:
        if self.success:
            return status.HTTP_200_OK
        return self._STATUS_BY_CODE.get(self.error_code, status.HTTP_400_BAD_REQUEST)

    def to_response(self) -> dict[str, Any]:
        data: dict[str, Any] = {'success': self.success}
        if self.message:
            data['message'] = self.message
        if self.error:
            data['error'] = self.error
        return data


def validate_order_request(booking_id, amount) -> tuple[str, int]:
    return validate_booking_id(booking_id), validate_amount(amount)


def create_order(booking_id, amount, *, client: RazorpayClient | None = None) -> PaymentOrder:
    """
    Issue a provider order for a pending booking.

    Steps:
    1. Validate the booking id shape and the amount bound
    2. Fail closed when provider credentials are missing
    3. Create the order at the provider (amount in minor units)
    4. Link the order id to the booking

    A failure in step 4 leaves an order at the provider that no booking
    references; it is logged with the order id and raised as StorageError.
    """
    booking_id, amount = validate_order_request(booking_id, amount)

    owns_client = client is None
    client = client or RazorpayClient.from_settings()
    try:
        client.ensure_configured()

        booking = get_booking(booking_id)
        if booking.status != Booking.Status.PENDING:
            raise ConflictError(f"Booking is already {booking.status}")
        if booking.price != amount:
            logger.warning(
                f"Order amount {amount} differs from booking {booking.id} price {booking.price}"
            )

        currency = settings.PAYMENT_CURRENCY
        order = client.create_order(
            amount_minor=amount * settings.PAYMENT_MINOR_UNIT_FACTOR,
            currency=currency,
            receipt=booking_id,
            notes={'booking_id': booking_id},
        )
    finally:
        if owns_client:
            client.close()

    try:
        with DjangoUnitOfWork() as uow:
            attach_order(booking.id, order.id)
            uow.collect(
                PaymentOrderIssued(
                    aggregate_id=booking.id,
                    booking_id=booking.id,
                    order_id=order.id,
                    amount=order.amount,
                    currency=order.currency,
                )
            )
    except StorageError:
        logger.error(
            f"Provider order {order.id} exists but is not linked to booking {booking.id}"
        )
        raise

    return PaymentOrder(
        order_id=order.id,
        amount=order.amount,
        currency=order.currency,
        key_id=client.key_id,
        booking_id=booking_id,
    )


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    """HMAC-SHA256 over ``order_id|payment_id``, hex encoded."""

    message = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def _already_verified(booking: Booking, order_id: str, payment_id: str) -> bool:
    return (
        booking.status == Booking.Status.CONFIRMED
        and booking.payment_status == Booking.PaymentStatus.PAID
        and booking.razorpay_order_id == order_id
        and booking.razorpay_payment_id == payment_id
    )


def _verify_confirmed(booking: Booking, order_id: str, payment_id: str) -> VerificationResult:
    """Valid receipt for a booking that is already confirmed."""

    if record_verified_payment(booking.id, order_id, payment_id):
        audit_logger.info(
            "self_reported_payment_verified",
            booking_id=str(booking.id),
            order_id=order_id,
            payment_id=payment_id,
        )
        return VerificationResult.ok("Payment verified for confirmed booking")

    current = get_booking(booking.id)
    if _already_verified(current, order_id, payment_id):
        return VerificationResult.ok("Payment already verified")
    audit_logger.error(
        "verify_confirmed_booking",
        booking_id=str(booking.id),
        order_id=order_id,
        payment_id=payment_id,
        recorded_payment_id=current.razorpay_payment_id,
    )
    return VerificationResult.failed(ConflictError("Booking is already confirmed with another payment"))


def verify_payment(order_id, payment_id, signature, booking_id, *, secret: str | None = None) -> VerificationResult:
    """
    Authenticate a payment receipt and confirm its booking.

    Expected failures (bad input, signature mismatch, unknown booking,
    order not linked to the booking, booking no longer pending, slot full)
    come back as an unsuccessful VerificationResult and never change the
    booking. A valid receipt for a booking already confirmed as
    SELF_REPORTED on the same order marks it paid without touching its
    status. ConfigurationError and StorageError propagate.
    """
    try:
        order_id = validate_order_id(order_id)
        payment_id = validate_payment_id(payment_id)
        signature = validate_signature(signature)
        booking_id = validate_booking_id(booking_id)
    except ValidationError as exc:
        return VerificationResult.failed(exc)

    secret = secret if secret is not None else settings.RAZORPAY_KEY_SECRET
    if not secret:
        logger.error("Razorpay secret not configured")
        raise ConfigurationError("Payment verification not configured")

    expected = compute_signature(order_id, payment_id, secret)
    if not hmac.compare_digest(expected, signature):
        audit_logger.warning(
            "signature_mismatch",
            booking_id=booking_id,
            order_id=order_id,
            payment_id=payment_id,
        )
        return VerificationResult.failed(VerificationError())

    try:
        booking = get_booking(booking_id)
    except NotFoundError as exc:
        audit_logger.warning("verify_unknown_booking", booking_id=booking_id, order_id=order_id)
        return VerificationResult.failed(exc)

    if booking.razorpay_order_id != order_id:
        audit_logger.warning(
            "order_booking_mismatch",
            booking_id=booking_id,
            order_id=order_id,
            reason="order is not linked to this booking",
        )
        return VerificationResult.failed(ConflictError("Payment does not match this booking"))

    if _already_verified(booking, order_id, payment_id):
        return VerificationResult.ok("Payment already verified")

    if booking.status == Booking.Status.CONFIRMED:
        return _verify_confirmed(booking, order_id, payment_id)

    try:
        confirm_booking(
            booking.id,
            VerificationMode.CRYPTOGRAPHIC,
            order_id=order_id,
            payment_id=payment_id,
        )
    except ConflictError as exc:
        current = get_booking(booking.id)
        if _already_verified(current, order_id, payment_id):
            return VerificationResult.ok("Payment already verified")
        if current.status == Booking.Status.CONFIRMED:
            return _verify_confirmed(current, order_id, payment_id)
        if current.status == Booking.Status.PENDING:
            # Signature was valid, so money was captured for a slot that is now full.
            audit_logger.error(
                "capacity_conflict",
                booking_id=booking_id,
                order_id=order_id,
                payment_id=payment_id,
                reason=exc.detail,
            )
            return VerificationResult.failed(exc)
        # Money was captured for a booking that already failed.
        audit_logger.error(
            "verify_failed_booking",
            booking_id=booking_id,
            order_id=order_id,
            payment_id=payment_id,
            reason=current.failure_reason,
        )
        return VerificationResult.failed(ConflictError("Booking is no longer pending"))

    audit_logger.info(
        "payment_verified",
        booking_id=booking_id,
        order_id=order_id,
        payment_id=payment_id,
    )
    return VerificationResult.ok("Payment verified and booking confirmed")
