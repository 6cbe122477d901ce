"""Request and response shapes of the payment endpoints.

Field checks beyond presence are done by ``apps.payments.validators`` so
that the endpoint answers with the same messages the services raise.
"""

from rest_framework import serializers


class CreateOrderRequestSerializer(serializers.Serializer):
    bookingId = serializers.CharField()
    amount = serializers.JSONField()


class CreateOrderResponseSerializer(serializers.Serializer):
    orderId = serializers.CharField()
    amount = serializers.IntegerField()
    currency = serializers.CharField()
    keyId = serializers.CharField()


class VerifyPaymentRequestSerializer(serializers.Serializer):
    razorpay_order_id = serializers.CharField()
    razorpay_payment_id = serializers.CharField()
    razorpay_signature = serializers.CharField()
    booking_id = serializers.CharField()


class VerifyPaymentResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField(required=False)
    error = serializers.CharField(required=False)
