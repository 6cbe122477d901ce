"""Tests for the reconciliation flow controller with an injected payment client."""

from __future__ import annotations

from datetime import date
from unittest.mock import Mock

from django.test import TestCase

from apps.bookings.application.flows import ReconciliationFlow
from apps.bookings.domain.entities import VerificationMode
from apps.bookings.models import Booking
from apps.bookings.services import confirm_booking, get_booking
from apps.locations.models import Location
from apps.payments.gateway import ProviderOrder, RazorpayClient
from apps.payments.services import compute_signature
from shared.exceptions import ConflictError, ValidationError

SECRET = "test_secret_for_signatures"
ORDER_ID = "order_Abc123Def456Ghi7"
PAYMENT_ID = "pay_Xyz987Uvw654Rst3"


def fake_client() -> Mock:
    client = Mock(spec=RazorpayClient)
    client.key_id = "rzp_test_key0000000000"
    client.create_order.return_value = ProviderOrder(id=ORDER_ID, amount=36000, currency="INR")
    return client


class ReconciliationFlowTests(TestCase):
    def setUp(self) -> None:
        self.location = Location.objects.create(name="Hub", address="Terminal 1", total_pods=2)
        self.client_double = fake_client()
        self.flow = ReconciliationFlow(self.client_double)

    def _book(self, price: int = 360) -> Booking:
        return self.flow.create_booking(
            location_id=self.location.id,
            customer_name="Asha Rao",
            customer_email="asha@example.com",
            booking_date=date(2025, 6, 1),
            booking_time="14:00",
            duration="3 Hours",
            price=price,
        )

    def _fill_location(self) -> None:
        for _ in range(self.location.total_pods):
            confirm_booking(self._book().id, VerificationMode.SELF_REPORTED)

    def test_hosted_checkout_end_to_end(self) -> None:
        booking = self._book()

        order = self.flow.start_hosted_checkout(str(booking.id), 360)
        self.assertEqual(order.order_id, ORDER_ID)
        self.client_double.create_order.assert_called_once_with(
            amount_minor=36000,
            currency="INR",
            receipt=str(booking.id),
            notes={"booking_id": str(booking.id)},
        )
        self.assertEqual(get_booking(booking.id).razorpay_order_id, ORDER_ID)

        signature = compute_signature(ORDER_ID, PAYMENT_ID, SECRET)
        result = self.flow.complete_hosted_checkout(ORDER_ID, PAYMENT_ID, signature, str(booking.id))

        self.assertTrue(result.success)
        booking = get_booking(booking.id)
        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.PAID)
        self.assertEqual(booking.verification_mode, "cryptographic")

    def test_gate_blocks_order_for_full_location(self) -> None:
        booking = self._book()
        self._fill_location()

        with self.assertRaises(ConflictError):
            self.flow.start_hosted_checkout(str(booking.id), 360)

        self.client_double.create_order.assert_not_called()
        self.assertIsNone(get_booking(booking.id).razorpay_order_id)

    def test_gate_blocks_order_for_terminal_booking(self) -> None:
        booking = self._book()
        self.flow.report_failure(booking.id)

        with self.assertRaises(ConflictError):
            self.flow.start_hosted_checkout(str(booking.id), 360)
        self.client_double.create_order.assert_not_called()

    def test_invalid_amount_rejected_before_gate(self) -> None:
        booking = self._book()

        with self.assertRaises(ValidationError):
            self.flow.start_hosted_checkout(str(booking.id), 0)
        self.client_double.create_order.assert_not_called()

    def test_failed_verification_leaves_booking_pending(self) -> None:
        booking = self._book()
        self.flow.start_hosted_checkout(str(booking.id), 360)

        result = self.flow.complete_hosted_checkout(ORDER_ID, PAYMENT_ID, "0" * 64, str(booking.id))

        self.assertFalse(result.success)
        self.assertEqual(result.error, "Payment verification failed")
        self.assertEqual(get_booking(booking.id).status, Booking.Status.PENDING)

    def test_manual_flow_confirms_without_payment_evidence(self) -> None:
        booking = self._book()

        link = self.flow.start_manual_payment(booking.id)
        self.assertTrue(link.startswith("upi://pay?pa=restpod@ybl&"))

        booking = self.flow.report_manual_payment(booking.id, "paid")

        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.UNPAID)
        self.assertEqual(booking.verification_mode, "self_reported")
        self.client_double.create_order.assert_not_called()

    def test_manual_flow_failure_cancels(self) -> None:
        booking = self._book()

        booking = self.flow.report_manual_payment(booking.id, "failed")

        self.assertEqual(booking.status, Booking.Status.FAILED)
        self.assertEqual(booking.failure_reason, "payment_failed")

    def test_manual_flow_gate(self) -> None:
        booking = self._book()
        self._fill_location()

        with self.assertRaises(ConflictError):
            self.flow.start_manual_payment(booking.id)
        with self.assertRaises(ConflictError):
            self.flow.report_manual_payment(booking.id, "paid")
        self.assertEqual(get_booking(booking.id).status, Booking.Status.PENDING)

    def test_unknown_outcome(self) -> None:
        booking = self._book()

        with self.assertRaises(ValidationError):
            self.flow.report_manual_payment(booking.id, "maybe")
