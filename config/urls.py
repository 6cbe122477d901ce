"""URL configuration for RestPod project.

The `urlpatterns` list routes URLs to views. It includes the Django admin
(the administrative path for pod capacity) and the application routers.
"""
from django.contrib import admin  # type: ignore
from django.http import JsonResponse  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView  # type: ignore


def health(request):  # type: ignore
    return JsonResponse({"status": "ok", "service": "restpod"})


# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health, name='health'),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    # Application URLs
    path('api/v1/locations/', include('apps.locations.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/payments/', include('apps.payments.urls')),
]
