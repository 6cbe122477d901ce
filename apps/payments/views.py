"""
Payment endpoints

Both endpoints read the raw JSON body and hand it to the flow, which
shape-checks every field before any provider or HMAC work.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.bookings.application.flows import ReconciliationFlow

from .gateway import RazorpayClient
from .serializers import (
    CreateOrderRequestSerializer,
    CreateOrderResponseSerializer,
    VerifyPaymentRequestSerializer,
    VerifyPaymentResponseSerializer,
)


def _body(request) -> dict:
    return request.data if isinstance(request.data, dict) else {}


class CreateOrderView(APIView):
    """Issue a provider order for a pending booking."""

    @extend_schema(request=CreateOrderRequestSerializer, responses=CreateOrderResponseSerializer)
    def post(self, request):
        data = _body(request)
        with RazorpayClient.from_settings() as client:
            order = ReconciliationFlow(client).start_hosted_checkout(
                data.get('bookingId'),
                data.get('amount'),
            )
        return Response(order.to_response(), status=status.HTTP_200_OK)


class VerifyPaymentView(APIView):
    """Verify a hosted-checkout receipt and confirm the booking."""

    @extend_schema(request=VerifyPaymentRequestSerializer, responses=VerifyPaymentResponseSerializer)
    def post(self, request):
        data = _body(request)
        with RazorpayClient.from_settings() as client:
            result = ReconciliationFlow(client).complete_hosted_checkout(
                data.get('razorpay_order_id'),
                data.get('razorpay_payment_id'),
                data.get('razorpay_signature'),
                data.get('booking_id'),
            )
        return Response(result.to_response(), status=result.http_status)
