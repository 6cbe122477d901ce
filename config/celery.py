import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("restpod")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Pending bookings that never reached payment are failed
    "expire-pending-bookings": {
        "task": "bookings.expire_pending_bookings",
        "schedule": crontab(minute="*/5"),
        "options": {"expires": 240},
    },
}

app.conf.timezone = os.environ.get("TIME_ZONE", "Asia/Kolkata")
