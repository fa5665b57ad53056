"""
BTP – Django Settings (Infrastructure Only)
============================================
Django hosts the policy event journal (core.event_store).
The treasury policy engine itself does not depend on Django.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("BTP_SECRET_KEY", "btp-dev-key-replace-before-deployment")

DEBUG = os.environ.get("BTP_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── BTP Modules ───────────────────────────────────────
    "core.event_store",
]

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("BTP_DB_PATH", BASE_DIR / "db.sqlite3"),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
# BTP uses UUIDs explicitly. This is a Django fallback only.
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "btp": {
            "handlers": ["console"],
            "level": os.environ.get("BTP_LOG_LEVEL", "INFO"),
        },
    },
}

# ── Treasury Policy ───────────────────────────────────────────
# Read by core.config.load_policy_config().
TREASURY_POLICY = {
    "bonus_tiers": [
        {"threshold": 1000, "bonus_percent": 150},
        {"threshold": 500, "bonus_percent": 120},
    ],
    "weight_ledger_mode": "SINGLE_SLOT",
    "policy_version": "1.0.0",
}
