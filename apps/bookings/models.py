"""Booking domain models for RestPod."""

from __future__ import annotations

import uuid

from django.core.validators import MinValueValidator, RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain import entities

SLOT_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class Booking(models.Model):
    """Reservation of one pod at a location for a day and time slot."""

    class Status(models.TextChoices):
        PENDING = entities.BookingStatus.PENDING.value, _("Pending")
        CONFIRMED = entities.BookingStatus.CONFIRMED.value, _("Confirmed")
        FAILED = entities.BookingStatus.FAILED.value, _("Failed")

    class PaymentStatus(models.TextChoices):
        UNPAID = entities.PaymentStatus.UNPAID.value, _("Unpaid")
        PAID = entities.PaymentStatus.PAID.value, _("Paid")

    class VerificationMode(models.TextChoices):
        CRYPTOGRAPHIC = entities.VerificationMode.CRYPTOGRAPHIC.value, _("Signature verified")
        SELF_REPORTED = entities.VerificationMode.SELF_REPORTED.value, _("Reported by customer")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    location = models.ForeignKey(
        "locations.Location",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    customer_name = models.CharField(max_length=255)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=32, blank=True)
    booking_date = models.DateField()
    booking_time = models.CharField(
        max_length=5,
        validators=[RegexValidator(SLOT_TIME_PATTERN, _("Time must be HH:MM."))],
        help_text=_("Slot label, e.g. 14:00."),
    )
    duration = models.CharField(max_length=50, help_text=_("Package label, e.g. 3 Hours."))
    price = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text=_("Price in whole currency units."),
    )
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    payment_status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    verification_mode = models.CharField(
        max_length=16,
        choices=VerificationMode.choices,
        blank=True,
    )
    razorpay_order_id = models.CharField(max_length=64, blank=True, null=True, db_index=True)
    razorpay_payment_id = models.CharField(max_length=64, blank=True, null=True)
    failure_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="booking_positive_price",
            ),
            models.CheckConstraint(
                condition=models.Q(payment_status="unpaid") | models.Q(status="confirmed"),
                name="booking_paid_implies_confirmed",
            ),
        ]
        indexes = [
            models.Index(
                fields=["location", "booking_date", "status"],
                name="booking_loc_date_status_idx",
            ),
            models.Index(fields=["status", "created_at"], name="booking_status_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.id} at {self.location_id} on {self.booking_date} ({self.status})"
