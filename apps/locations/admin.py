"""Admin registration for locations."""

from __future__ import annotations

from django.contrib import admin

from .models import Location


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("name", "address", "total_pods", "created_at")
    search_fields = ("name", "address")
    readonly_fields = ("id", "created_at")
