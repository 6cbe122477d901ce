"""Shape checks applied to payment inputs before any I/O or HMAC work."""

from __future__ import annotations

import re

from django.conf import settings

from shared.exceptions import ValidationError

UUID_RE = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$',
    re.IGNORECASE,
)
SIGNATURE_RE = re.compile(r'^[a-f0-9]{64}$', re.IGNORECASE)


def _provider_id_re(prefix: str):
    return re.compile(rf'^{prefix}_[A-Za-z0-9]{{14,}}$')


ORDER_ID_RE = _provider_id_re('order')
PAYMENT_ID_RE = _provider_id_re('pay')


def _require_string(value, label: str) -> str:
    if not value or not isinstance(value, str):
        raise ValidationError(f"{label} is required")
    return value


def validate_booking_id(value) -> str:
    value = _require_string(value, 'Booking ID')
    if not UUID_RE.match(value):
        raise ValidationError("Invalid booking ID format")
    return value.lower()


def validate_order_id(value) -> str:
    value = _require_string(value, 'Order ID')
    if not ORDER_ID_RE.match(value):
        raise ValidationError("Invalid order ID format")
    return value


def validate_payment_id(value) -> str:
    value = _require_string(value, 'Payment ID')
    if not PAYMENT_ID_RE.match(value):
        raise ValidationError("Invalid payment ID format")
    return value


def validate_signature(value) -> str:
    value = _require_string(value, 'Signature')
    if not SIGNATURE_RE.match(value):
        raise ValidationError("Invalid signature format")
    return value.lower()


def validate_amount(value, max_amount: int | None = None) -> int:
    """
    Accept a positive whole amount up to PAYMENT_MAX_AMOUNT.

    Integral floats such as ``360.0`` are accepted since JSON clients may
    send them; booleans, fractions, strings and NaN are rejected.
    """
    if max_amount is None:
        max_amount = settings.PAYMENT_MAX_AMOUNT
    message = f"Invalid amount. Must be a positive integer up to {max_amount}"

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(message)
    if isinstance(value, float):
        if value != value or not value.is_integer():
            raise ValidationError(message)
        value = int(value)
    if value <= 0 or value > max_amount:
        raise ValidationError(message)
    return value
