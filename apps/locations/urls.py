"""URL routing for the locations domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import LocationViewSet

router = SimpleRouter()
router.register(r"", LocationViewSet, basename="location")

urlpatterns = [
    path("", include(router.urls)),
]
