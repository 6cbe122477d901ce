"""Serializers for locations and their availability."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Location


class LocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Location
        fields = ["id", "name", "address", "total_pods", "image_url"]
        read_only_fields = fields


class AvailabilitySerializer(serializers.Serializer):
    """Wire shape of a LocationAvailability."""

    locationId = serializers.UUIDField(source="location_id")
    locationName = serializers.CharField(source="location_name")
    totalPods = serializers.IntegerField(source="total_pods")
    bookedPods = serializers.IntegerField(source="booked_pods")
    availablePods = serializers.IntegerField(source="available_pods")
    isAvailable = serializers.BooleanField(source="is_available")


class AvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False, allow_null=True)
