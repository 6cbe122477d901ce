"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import SLOT_TIME_PATTERN, Booking


class BookingCreateSerializer(serializers.Serializer):
    """Input of a booking request. Status is never accepted from clients."""

    location_id = serializers.UUIDField()
    customer_name = serializers.CharField(max_length=255)
    customer_email = serializers.EmailField()
    customer_phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    booking_date = serializers.DateField()
    booking_time = serializers.RegexField(SLOT_TIME_PATTERN, max_length=5)
    duration = serializers.CharField(max_length=50)
    price = serializers.IntegerField(min_value=1)


class BookingSerializer(serializers.ModelSerializer):
    """Read model of a booking, polled by clients for the final state."""

    location_id = serializers.UUIDField(read_only=True)
    location_name = serializers.ReadOnlyField(source="location.name")

    class Meta:
        model = Booking
        fields = [
            "id",
            "location_id",
            "location_name",
            "customer_name",
            "customer_email",
            "customer_phone",
            "booking_date",
            "booking_time",
            "duration",
            "price",
            "status",
            "payment_status",
            "verification_mode",
            "razorpay_order_id",
            "razorpay_payment_id",
            "failure_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ReportPaymentSerializer(serializers.Serializer):
    outcome = serializers.ChoiceField(choices=["paid", "failed"])


class CancelBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, default="cancelled")


class UpiLinkSerializer(serializers.Serializer):
    upiLink = serializers.CharField()
    amount = serializers.IntegerField()
    currency = serializers.CharField()
