from pathlib import Path
import os

import environ
from celery.schedules import crontab


# Set base directory first (the folder holding manage.py)
BASE_DIR = Path(__file__).resolve().parent.parent

# Initialize environment
env = environ.Env()

# Load environment variables from the selected .env file (if present)
ENV_FILE = os.environ.get("ENV_FILE", ".env")
environ.Env.read_env(os.path.join(BASE_DIR, ENV_FILE))

SECRET_KEY = env("DJANGO_SECRET_KEY", default="dev-secret-key-change-in-production")
DEBUG = env.bool("DEBUG", default=True)
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    "billing_core",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # attaches request.cart (invoice wizard state) from the session
    "billing_core.middleware.InvoiceCartMiddleware",
]

ROOT_URLCONF = "inv_project.urls"
WSGI_APPLICATION = "inv_project.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

# PostgreSQL in production (DATABASE_URL), SQLite for local work and tests
DATABASES = {
    "default": env.db("DATABASE_URL", default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}")
}

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

LOGIN_URL = "/admin/login/"

# ---- Invoicing domain configuration ----
BILLING = {
    # GST is carried on lines for display; totals only include it when enabled
    "TAX_ENABLED": env.bool("BILLING_TAX_ENABLED", default=False),
    "DOCUMENT_TITLE": env("BILLING_DOCUMENT_TITLE", default="Order Estimates"),
    # soft-deleted customers become eligible for purge after this many days
    "SOFT_DELETE_RETENTION_DAYS": env.int("BILLING_SOFT_DELETE_RETENTION_DAYS", default=30),
    "INVOICE_NUMBER_ATTEMPTS": env.int("BILLING_INVOICE_NUMBER_ATTEMPTS", default=5),
    "DEFAULT_DUE_DAYS": env.int("BILLING_DEFAULT_DUE_DAYS", default=30),
    "DISPLAY_TIME_ZONE": env("BILLING_DISPLAY_TIME_ZONE", default="Asia/Kolkata"),
    # used on the PDF until the tenant saves SellerInfo / BankDetails
    "DEFAULT_SELLER": {
        "name": env("BILLING_SELLER_NAME", default="Sunshine Industries"),
        "address": "",
        "gst_no": "",
        "state": "",
        "state_code": "",
        "phone": "",
        "email": "",
        "website": "",
    },
    "DEFAULT_BANK": {
        "account_name": "",
        "bank_name": "",
        "account_number": "",
        "branch": "",
        "ifsc_code": "",
    },
}

# ---- Celery ----
CELERY_BROKER_URL = env("CELERY_BROKER_URL", default="redis://localhost:6379/0")
CELERY_RESULT_BACKEND = env("CELERY_RESULT_BACKEND", default=None)
CELERY_TASK_ALWAYS_EAGER = env.bool("CELERY_TASK_ALWAYS_EAGER", default=False)
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULE = {
    # hard-delete customers whose soft-delete window has passed
    "purge-expired-companies": {
        "task": "billing_core.tasks.purge_expired_companies_task",
        "schedule": crontab(hour=2, minute=30),
    },
}

# ---- Logging ----
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "billing_core": {
            "handlers": ["console"],
            "level": env("BILLING_LOG_LEVEL", default="INFO"),
            "propagate": False,
        },
    },
}
