"""
Commerce - Django Settings (Infrastructure Only)
================================================
Django hosts the HTTP adapter. The engines do not import Django; they
receive their settings through CommerceSettings built from COMMERCE.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("COMMERCE_SECRET_KEY", "commerce-dev-key-replace-before-deployment")

DEBUG = os.environ.get("COMMERCE_DEBUG", "1") == "1"

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL ───────────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"
APPEND_SLASH = False

# ── Database ──────────────────────────────────────────────────
# Engines keep their records in the entity store; Django only needs a
# database for its own contrib apps.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Commerce Engines ──────────────────────────────────────────
# API_KEYS is omitted so the adapter falls back to its dev key table.
COMMERCE = {
    "ACCEPTED_CURRENCIES": ["USD", "EUR", "GBP"],
    "DEFAULT_CURRENCY": "USD",
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "commerce": {
            "handlers": ["console"],
            "level": os.environ.get("COMMERCE_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
