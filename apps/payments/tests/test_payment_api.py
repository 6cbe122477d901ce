"""Integration tests for the payment endpoints."""

from __future__ import annotations

from datetime import date
from unittest.mock import Mock, patch

from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.bookings.services import create_booking, get_booking
from apps.locations.models import Location
from apps.payments.services import compute_signature

SECRET = "test_secret_for_signatures"
ORDER_ID = "order_Abc123Def456Ghi7"
PAYMENT_ID = "pay_Xyz987Uvw654Rst3"


def provider_response(body, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = str(body)
    response.json.return_value = body
    return response


class PaymentAPITests(APITestCase):
    def setUp(self) -> None:
        self.location = Location.objects.create(name="Hub", address="Terminal 1", total_pods=2)
        self.booking = create_booking(
            location_id=self.location.id,
            customer_name="Asha Rao",
            customer_email="asha@example.com",
            booking_date=date(2025, 6, 1),
            booking_time="14:00",
            duration="3 Hours",
            price=360,
        )
        self.create_url = reverse("payment-create-order")
        self.verify_url = reverse("payment-verify")

    def _create_order(self, amount=360):
        body = {"id": ORDER_ID, "amount": amount * 100, "currency": "INR", "receipt": str(self.booking.id)}
        with patch("apps.payments.gateway.requests.Session.post", return_value=provider_response(body)) as post:
            response = self.client.post(
                self.create_url,
                {"bookingId": str(self.booking.id), "amount": amount},
                format="json",
            )
        return response, post

    def test_scenario_create_then_verify(self) -> None:
        response, post = self._create_order()

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.json(),
            {"orderId": ORDER_ID, "amount": 36000, "currency": "INR", "keyId": "rzp_test_key0000000000"},
        )
        _, kwargs = post.call_args
        self.assertEqual(kwargs["json"]["amount"], 36000)
        self.assertEqual(kwargs["json"]["receipt"], str(self.booking.id))
        self.assertEqual(kwargs["auth"], ("rzp_test_key0000000000", SECRET))

        response = self.client.post(
            self.verify_url,
            {
                "razorpay_order_id": ORDER_ID,
                "razorpay_payment_id": PAYMENT_ID,
                "razorpay_signature": compute_signature(ORDER_ID, PAYMENT_ID, SECRET),
                "booking_id": str(self.booking.id),
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"success": True, "message": "Payment verified and booking confirmed"})
        booking = get_booking(self.booking.id)
        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.PAID)

    def test_secret_never_in_responses(self) -> None:
        response, _ = self._create_order()

        self.assertNotIn(SECRET, response.content.decode())

    def test_invalid_amount(self) -> None:
        for amount in (0, -5, 2.5, 2_000_000, "360"):
            with self.subTest(amount=amount):
                response = self.client.post(
                    self.create_url,
                    {"bookingId": str(self.booking.id), "amount": amount},
                    format="json",
                )
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(response.json()["code"], "validation_error")

    def test_missing_booking_id(self) -> None:
        response = self.client.post(self.create_url, {"amount": 360}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json(), {"error": "Booking ID is required", "code": "validation_error"})

    @override_settings(RAZORPAY_KEY_ID="")
    def test_unconfigured_provider_is_opaque_5xx(self) -> None:
        with patch("apps.payments.gateway.requests.Session.post") as post:
            response = self.client.post(
                self.create_url,
                {"bookingId": str(self.booking.id), "amount": 360},
                format="json",
            )

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.json(), {"error": "Payment system not configured", "code": "configuration_error"})
        post.assert_not_called()

    def test_provider_http_failure_is_502(self) -> None:
        failure = provider_response({"error": {"description": "bad"}}, status_code=500)
        with patch("apps.payments.gateway.requests.Session.post", return_value=failure):
            response = self.client.post(
                self.create_url,
                {"bookingId": str(self.booking.id), "amount": 360},
                format="json",
            )

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.json()["error"], "Failed to create payment order")
        self.assertIsNone(get_booking(self.booking.id).razorpay_order_id)

    def test_verify_with_empty_signature(self) -> None:
        self._create_order()

        response = self.client.post(
            self.verify_url,
            {
                "razorpay_order_id": ORDER_ID,
                "razorpay_payment_id": PAYMENT_ID,
                "razorpay_signature": "",
                "booking_id": str(self.booking.id),
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json(), {"success": False, "error": "Signature is required"})
        self.assertEqual(get_booking(self.booking.id).status, Booking.Status.PENDING)

    def test_verify_with_forged_signature(self) -> None:
        self._create_order()

        response = self.client.post(
            self.verify_url,
            {
                "razorpay_order_id": ORDER_ID,
                "razorpay_payment_id": PAYMENT_ID,
                "razorpay_signature": compute_signature(ORDER_ID, PAYMENT_ID, "guessed"),
                "booking_id": str(self.booking.id),
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json(), {"success": False, "error": "Payment verification failed"})
        self.assertEqual(get_booking(self.booking.id).status, Booking.Status.PENDING)

    def test_cors_preflight_is_permissive(self) -> None:
        for url in (self.create_url, self.verify_url):
            with self.subTest(url=url):
                response = self.client.options(
                    url,
                    HTTP_ORIGIN="https://checkout.example.com",
                    HTTP_ACCESS_CONTROL_REQUEST_METHOD="POST",
                    HTTP_ACCESS_CONTROL_REQUEST_HEADERS="content-type",
                )
                self.assertEqual(response.status_code, status.HTTP_200_OK)
                self.assertEqual(response["Access-Control-Allow-Origin"], "*")
                self.assertIn("content-type", response["Access-Control-Allow-Headers"])

    def test_health(self) -> None:
        response = self.client.get(reverse("health"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["status"], "ok")
