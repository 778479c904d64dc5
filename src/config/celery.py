"""
Celery configuration for the food-truck backend.

DJANGO_SETTINGS_MODULE is set before the app is created so Celery reads
the Django settings (``CELERY_`` prefix), including the beat schedule
that runs the promotion expiry sweep.
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("foodtruck")

app.config_from_object("django.conf:settings", namespace="CELERY")

# Picks up tasks.py from every installed app
app.autodiscover_tasks()
