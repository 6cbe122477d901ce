"""API views for locations and pod availability."""

from __future__ import annotations

from rest_framework import viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .models import Location
from .serializers import AvailabilityQuerySerializer, AvailabilitySerializer, LocationSerializer
from .services import availability_for_date, availability_for_location


def _requested_date(request):  # type: ignore
    query = AvailabilityQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    return query.validated_data.get("date")


class LocationViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only listing of locations; capacity is edited through the admin."""

    queryset = Location.objects.all()
    serializer_class = LocationSerializer

    @action(detail=False, methods=["get"], url_path="availability", url_name="availability-for-date")
    def for_date(self, request):  # type: ignore
        results = availability_for_date(_requested_date(request))
        return Response(AvailabilitySerializer(results, many=True).data)

    @action(detail=True, methods=["get"], url_path="availability", url_name="availability")
    def availability(self, request, pk=None):  # type: ignore
        result = availability_for_location(pk, _requested_date(request))
        if result is None:
            return Response(None)
        return Response(AvailabilitySerializer(result).data)
