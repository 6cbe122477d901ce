"""Location domain models for RestPod."""

from __future__ import annotations

import uuid

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Location(models.Model):
    """A site offering a pool of identical rest pods."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255)
    total_pods = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text=_("Total pod capacity. Changed only through the admin."),
    )
    image_url = models.URLField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Location")
        verbose_name_plural = _("Locations")
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_pods__gt=0),
                name="location_positive_capacity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.total_pods} pods)"
