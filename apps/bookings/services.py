"""Booking record manager.

Creates bookings, reads them back, and moves them through the
pending -> confirmed | failed lifecycle. Every status change is a
conditional update filtered on the expected current state, so two racing
writers cannot both win and a terminal booking is never rewritten.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.core.validators import validate_email  # type: ignore
from django.db import DatabaseError, IntegrityError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.locations.models import Location
from apps.locations.services import confirmed_count
from shared.application.uow import DjangoUnitOfWork
from shared.exceptions import ConflictError, NotFoundError, StorageError, ValidationError

from .domain.entities import (
    BookingStatus,
    PaymentStatus,
    VerificationMode,
    assert_transition,
)
from .domain.events import BookingConfirmed, BookingCreated, BookingFailed
from .models import SLOT_TIME_PATTERN, Booking

logger = logging.getLogger(__name__)

SLOT_TIME_RE = re.compile(SLOT_TIME_PATTERN)

# Columns a status change may write alongside ``status``.
UPDATABLE_FIELDS = frozenset(
    {
        "payment_status",
        "verification_mode",
        "razorpay_payment_id",
        "failure_reason",
    }
)


def _lock_queryset_if_possible(queryset):
    """
    Apply select_for_update when inside transaction.atomic().

    Backends without row locks (SQLite) compile the query without
    FOR UPDATE, so the capacity re-check is only serialized on databases
    that support it, PostgreSQL in production.
    """

    if not transaction.get_connection().in_atomic_block:
        return queryset
    return queryset.select_for_update()


def _require_text(value, field: str, max_length: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"{field} is too long")
    return value


def _coerce_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError("Booking date must be an ISO date")


def create_booking(
    *,
    location_id,
    customer_name: str,
    customer_email: str,
    booking_date,
    booking_time: str,
    duration: str,
    price: int,
    customer_phone: str = "",
) -> Booking:
    """
    Insert a new booking in ``pending`` / ``unpaid`` state.

    Capacity is not checked here: pending bookings do not hold a pod, and
    the reconciliation flow gates on availability before calling this.
    """

    customer_name = _require_text(customer_name, "Customer name", 255)
    customer_email = _require_text(customer_email, "Customer email", 254)
    try:
        validate_email(customer_email)
    except DjangoValidationError:
        raise ValidationError("Customer email is invalid")
    booking_date = _coerce_date(booking_date)
    if not isinstance(booking_time, str) or not SLOT_TIME_RE.match(booking_time):
        raise ValidationError("Booking time must be HH:MM")
    duration = _require_text(duration, "Duration", 50)
    if isinstance(price, bool) or not isinstance(price, int) or price <= 0:
        raise ValidationError("Price must be a positive integer")
    customer_phone = (customer_phone or "").strip()[:32]

    try:
        location = Location.objects.get(pk=location_id)
    except (Location.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        raise NotFoundError("Location not found")

    try:
        with DjangoUnitOfWork() as uow:
            booking = Booking.objects.create(
                location=location,
                customer_name=customer_name,
                customer_email=customer_email,
                customer_phone=customer_phone,
                booking_date=booking_date,
                booking_time=booking_time,
                duration=duration,
                price=price,
                status=Booking.Status.PENDING,
                payment_status=Booking.PaymentStatus.UNPAID,
            )
            uow.collect(
                BookingCreated(
                    aggregate_id=booking.id,
                    booking_id=booking.id,
                    location_id=location.id,
                    booking_date=booking_date,
                    price=price,
                )
            )
    except (IntegrityError, DatabaseError) as exc:
        logger.error(f"Failed to insert booking for location {location.id}: {exc}")
        raise StorageError("Booking insert failed") from exc

    logger.info(f"Booking {booking.id} created for location {location.id} on {booking_date}")
    return booking


def get_booking(booking_id) -> Booking:
    """Read a booking by id. Raises NotFoundError for unknown or malformed ids."""

    try:
        return Booking.objects.select_related("location").get(pk=booking_id)
    except (Booking.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        raise NotFoundError("Booking not found")
    except DatabaseError as exc:
        logger.error(f"Failed to read booking {booking_id}: {exc}")
        raise StorageError("Booking read failed") from exc


def _ensure_capacity(booking: Booking) -> None:
    """Raise ConflictError when confirming ``booking`` would exceed capacity."""

    location_qs = _lock_queryset_if_possible(Location.objects.filter(pk=booking.location_id))
    location = location_qs.get()
    taken = confirmed_count(location.id, booking.booking_date)
    if taken >= location.total_pods:
        logger.warning(
            f"Capacity exhausted for location {location.id} on {booking.booking_date}: "
            f"{taken}/{location.total_pods} confirmed"
        )
        raise ConflictError("No pods available for this date")


def update_status(booking_id, new_status, *, expected_order_id=None, **extra_fields) -> Booking:
    """
    Move a pending booking to ``new_status``.

    The write only applies while the row is still pending (and, when
    ``expected_order_id`` is given, still bound to that provider order).
    Confirmation re-checks capacity with the location row locked.
    Returns the refreshed booking.
    """

    new_status = BookingStatus(new_status)
    unknown = set(extra_fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    if (
        extra_fields.get("payment_status") == PaymentStatus.PAID.value
        and new_status is not BookingStatus.CONFIRMED
    ):
        raise ValidationError("Only confirmed bookings can be marked paid")

    booking = get_booking(booking_id)
    assert_transition(booking.status, new_status)

    if new_status is BookingStatus.CONFIRMED:
        event = BookingConfirmed(
            aggregate_id=booking.id,
            booking_id=booking.id,
            location_id=booking.location_id,
            booking_date=booking.booking_date,
            verification_mode=extra_fields.get("verification_mode", ""),
            payment_id=extra_fields.get("razorpay_payment_id") or "",
        )
    else:
        event = BookingFailed(
            aggregate_id=booking.id,
            booking_id=booking.id,
            reason=extra_fields.get("failure_reason", ""),
        )

    try:
        with DjangoUnitOfWork() as uow:
            if new_status is BookingStatus.CONFIRMED:
                _ensure_capacity(booking)

            queryset = Booking.objects.filter(pk=booking.id, status=Booking.Status.PENDING)
            if expected_order_id is not None:
                queryset = queryset.filter(razorpay_order_id=expected_order_id)
            updated = queryset.update(
                status=new_status.value,
                updated_at=timezone.now(),
                **extra_fields,
            )
            if updated:
                uow.collect(event)
    except DatabaseError as exc:
        logger.error(f"Failed to update booking {booking.id} to {new_status.value}: {exc}")
        raise StorageError("Booking update failed") from exc

    if not updated:
        current = get_booking(booking.id)
        if expected_order_id is not None and current.razorpay_order_id != expected_order_id:
            raise ConflictError("Booking is not linked to this payment order")
        raise ConflictError(f"Booking is already {current.status}")

    logger.info(f"Booking {booking.id} moved to {new_status.value}")
    return get_booking(booking.id)


def confirm_booking(booking_id, mode, *, order_id=None, payment_id=None) -> Booking:
    """
    Confirm a pending booking.

    Cryptographic confirmations record the provider payment id and mark the
    booking paid. Self-reported confirmations leave it unpaid.
    """

    mode = VerificationMode(mode)
    fields = {"verification_mode": mode.value}
    if mode is VerificationMode.CRYPTOGRAPHIC:
        if not order_id or not payment_id:
            raise ValidationError("Verified confirmation requires order and payment ids")
        fields["payment_status"] = PaymentStatus.PAID.value
        fields["razorpay_payment_id"] = payment_id
    return update_status(
        booking_id,
        BookingStatus.CONFIRMED,
        expected_order_id=order_id,
        **fields,
    )


def cancel_booking(booking_id, reason: str = "cancelled") -> Booking:
    """Mark a pending booking failed. Cancelling a failed booking is a no-op."""

    booking = get_booking(booking_id)
    if booking.status == Booking.Status.FAILED:
        return booking
    if booking.status == Booking.Status.CONFIRMED:
        raise ConflictError("Confirmed bookings cannot be cancelled")
    try:
        return update_status(booking.id, BookingStatus.FAILED, failure_reason=reason[:255])
    except ConflictError:
        current = get_booking(booking.id)
        if current.status == Booking.Status.FAILED:
            return current
        raise


def record_verified_payment(booking_id, order_id: str, payment_id: str) -> bool:
    """
    Attach a verified provider payment to a booking already confirmed as
    SELF_REPORTED for the same order.

    Status is unchanged; the booking becomes paid and cryptographically
    verified. Returns False when the booking is not in that state.
    """

    try:
        updated = Booking.objects.filter(
            pk=booking_id,
            status=Booking.Status.CONFIRMED,
            payment_status=Booking.PaymentStatus.UNPAID,
            verification_mode=Booking.VerificationMode.SELF_REPORTED,
            razorpay_order_id=order_id,
        ).update(
            payment_status=Booking.PaymentStatus.PAID,
            razorpay_payment_id=payment_id,
            verification_mode=Booking.VerificationMode.CRYPTOGRAPHIC,
            updated_at=timezone.now(),
        )
    except DatabaseError as exc:
        logger.error(f"Failed to record payment {payment_id} on booking {booking_id}: {exc}")
        raise StorageError("Booking update failed") from exc

    if updated:
        logger.info(f"Self-reported booking {booking_id} verified by payment {payment_id}")
    return bool(updated)


def attach_order(booking_id, order_id: str) -> None:
    """Bind a provider order to a pending booking."""

    try:
        updated = Booking.objects.filter(pk=booking_id, status=Booking.Status.PENDING).update(
            razorpay_order_id=order_id,
            updated_at=timezone.now(),
        )
    except (DatabaseError, DjangoValidationError, ValueError) as exc:
        logger.error(f"Failed to link order {order_id} to booking {booking_id}: {exc}")
        raise StorageError("Order link failed") from exc

    if not updated:
        logger.error(f"Order {order_id} could not be linked: booking {booking_id} is not pending")
        raise StorageError("Order link failed")


def expire_stale_pending_bookings(now: datetime | None = None) -> int:
    """
    Fail pending bookings older than PENDING_BOOKING_TTL_MINUTES.

    A booking whose provider order was attached within the TTL is still in
    checkout and is left alone; it becomes eligible once the order is
    older than the TTL as well.
    """

    now = now or timezone.now()
    cutoff = now - timedelta(minutes=settings.PENDING_BOOKING_TTL_MINUTES)
    stale_ids = list(
        Booking.objects.filter(status=Booking.Status.PENDING, created_at__lt=cutoff)
        .exclude(razorpay_order_id__isnull=False, updated_at__gte=cutoff)
        .values_list("id", flat=True)
    )

    expired = 0
    for booking_id in stale_ids:
        try:
            update_status(booking_id, BookingStatus.FAILED, failure_reason="expired")
        except (ConflictError, NotFoundError):
            # Confirmed or removed since the scan.
            continue
        expired += 1

    if expired:
        logger.info(f"Expired {expired} stale pending bookings")
    return expired
