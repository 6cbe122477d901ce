"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "location",
        "customer_name",
        "booking_date",
        "booking_time",
        "status",
        "payment_status",
        "verification_mode",
        "price",
        "created_at",
    )
    list_filter = ("status", "payment_status", "verification_mode", "booking_date", "location")
    search_fields = ("id", "customer_name", "customer_email", "razorpay_order_id", "razorpay_payment_id")
    readonly_fields = (
        "id",
        "status",
        "payment_status",
        "verification_mode",
        "razorpay_order_id",
        "razorpay_payment_id",
        "failure_reason",
        "created_at",
        "updated_at",
    )
    date_hierarchy = "booking_date"
