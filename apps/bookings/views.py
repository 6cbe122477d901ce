"""API views for the booking domain."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.payments.gateway import RazorpayClient

from .application.flows import ReconciliationFlow
from .models import Booking
from .serializers import (
    BookingCreateSerializer,
    BookingSerializer,
    CancelBookingSerializer,
    ReportPaymentSerializer,
    UpiLinkSerializer,
)
from .services import get_booking


class BookingViewSet(mixins.CreateModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Create a pending booking, read it back, and drive the manual UPI flow.

    Bookings are addressed by their UUID; there is no listing endpoint.
    """

    queryset = Booking.objects.select_related("location").all()
    serializer_class = BookingSerializer

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    def get_object(self):  # type: ignore
        return get_booking(self.kwargs["pk"])

    @staticmethod
    def _flow(client=None) -> ReconciliationFlow:
        return ReconciliationFlow(client or RazorpayClient.from_settings())

    @extend_schema(request=BookingCreateSerializer, responses={201: BookingSerializer})
    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = self._flow().create_booking(**serializer.validated_data)
        output = BookingSerializer(booking, context=self.get_serializer_context())
        return Response(output.data, status=status.HTTP_201_CREATED)

    @extend_schema(request=CancelBookingSerializer, responses=BookingSerializer)
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = CancelBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = self._flow().report_failure(pk, reason=serializer.validated_data["reason"])
        return Response(BookingSerializer(booking).data)

    @extend_schema(responses=UpiLinkSerializer)
    @action(detail=True, methods=["get"], url_path="upi-link", url_name="upi-link")
    def upi_link(self, request, pk=None):  # type: ignore
        with RazorpayClient.from_settings() as client:
            flow = self._flow(client)
            link = flow.start_manual_payment(pk)
        booking = get_booking(pk)
        return Response(
            {"upiLink": link, "amount": booking.price, "currency": settings.PAYMENT_CURRENCY}
        )

    @extend_schema(request=ReportPaymentSerializer, responses=BookingSerializer)
    @action(detail=True, methods=["post"], url_path="report-payment", url_name="report-payment")
    def report_payment(self, request, pk=None):  # type: ignore
        serializer = ReportPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = self._flow().report_manual_payment(pk, serializer.validated_data["outcome"])
        return Response(BookingSerializer(booking).data)
