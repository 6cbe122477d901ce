"""UPI deep links for the QR / manual payment flow."""

from __future__ import annotations

from urllib.parse import quote

from django.conf import settings

from shared.exceptions import ConfigurationError

# Characters encodeURIComponent leaves alone beyond quote()'s defaults.
URI_COMPONENT_SAFE = "!*'()"


def transaction_note(booking, prefix: str | None = None) -> str:
    prefix = prefix if prefix is not None else settings.UPI_NOTE_PREFIX
    return f"{prefix}-{str(booking.id)[:8]}"


def build_upi_link(
    booking,
    *,
    recipient_id: str | None = None,
    payee_name: str | None = None,
    currency: str | None = None,
    note_prefix: str | None = None,
) -> str:
    """
    Build the ``upi://pay`` link a UPI app opens or a QR code encodes.

    The link is deterministic for a booking: same booking, same settings,
    same string.
    """
    recipient_id = recipient_id if recipient_id is not None else settings.UPI_RECIPIENT_ID
    if not recipient_id:
        raise ConfigurationError("UPI recipient not configured")
    payee_name = payee_name if payee_name is not None else settings.UPI_PAYEE_NAME
    currency = currency or settings.PAYMENT_CURRENCY

    name = quote(payee_name, safe=URI_COMPONENT_SAFE)
    note = quote(transaction_note(booking, note_prefix), safe=URI_COMPONENT_SAFE)
    return f"upi://pay?pa={recipient_id}&pn={name}&am={booking.price}&cu={currency}&tn={note}"
