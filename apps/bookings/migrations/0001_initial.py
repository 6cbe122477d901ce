import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("locations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("customer_name", models.CharField(max_length=255)),
                ("customer_email", models.EmailField(max_length=254)),
                ("customer_phone", models.CharField(blank=True, max_length=32)),
                ("booking_date", models.DateField()),
                (
                    "booking_time",
                    models.CharField(
                        help_text="Slot label, e.g. 14:00.",
                        max_length=5,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^([01]\\d|2[0-3]):[0-5]\\d$", "Time must be HH:MM."
                            )
                        ],
                    ),
                ),
                (
                    "duration",
                    models.CharField(help_text="Package label, e.g. 3 Hours.", max_length=50),
                ),
                (
                    "price",
                    models.PositiveIntegerField(
                        help_text="Price in whole currency units.",
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("failed", "Failed"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("unpaid", "Unpaid"), ("paid", "Paid")],
                        default="unpaid",
                        max_length=16,
                    ),
                ),
                (
                    "verification_mode",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("cryptographic", "Signature verified"),
                            ("self_reported", "Reported by customer"),
                        ],
                        max_length=16,
                    ),
                ),
                (
                    "razorpay_order_id",
                    models.CharField(blank=True, db_index=True, max_length=64, null=True),
                ),
                ("razorpay_payment_id", models.CharField(blank=True, max_length=64, null=True)),
                ("failure_reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "location",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="locations.location",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["location", "booking_date", "status"],
                        name="booking_loc_date_status_idx",
                    ),
                    models.Index(
                        fields=["status", "created_at"],
                        name="booking_status_created_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(price__gt=0),
                        name="booking_positive_price",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(payment_status="unpaid") | models.Q(status="confirmed"),
                        name="booking_paid_implies_confirmed",
                    ),
                ],
            },
        ),
    ]
