# Celery instance is defined in inv_project/celery.py
# It creates celery_app object and points it to Django settings
from .celery import celery_app

# 'from inv_project import *', only exports celery_app
__all__ = ("celery_app",)

""" Workers and beat are started with:
    "celery -A inv_project worker -l info"
    "celery -A inv_project beat -l info"
    -A inv_project imports inv_project/__init__.py, which exposes celery_app """
