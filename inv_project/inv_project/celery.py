from __future__ import annotations
import os
from celery import Celery

# ensure Django settings are set for Celery
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "inv_project.settings")

# name should match your project package
celery_app = Celery("inv_project")

# read config from Django settings, using CELERY_ prefix
# (CELERY_BROKER_URL, CELERY_BEAT_SCHEDULE, CELERY_TASK_ALWAYS_EAGER, ...)
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# autoload tasks from installed apps (billing_core/tasks.py)
celery_app.autodiscover_tasks()
