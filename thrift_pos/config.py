# ==============================================================================
# CONFIGURATION
# ==============================================================================
# Every setting can be overridden through an environment variable.
# Loaded into Flask with app.config.from_object(Config).
#
# Production: export THRIFT_POS_SECRET_KEY="a_long_random_secret"
# ==============================================================================

import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

_DEFAULT_SECRET = "thrift_pos_dev_secret_key_change_in_production"


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Default settings for the application."""

    # True = no dev secret allowed without a warning, no debug output
    PRODUCTION_MODE = _env_flag("THRIFT_POS_PRODUCTION")

    SECRET_KEY = os.environ.get("THRIFT_POS_SECRET_KEY") or _DEFAULT_SECRET

    # SQLite file beside the package unless a real database is configured
    DATABASE_URL = os.environ.get(
        "THRIFT_POS_DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "thrift_pos.sqlite"),
    )
    DATABASE_ECHO = _env_flag("THRIFT_POS_DATABASE_ECHO")

    # Operator seeded on first start when the operator table is empty
    ADMIN_USER = os.environ.get("THRIFT_POS_ADMIN_USER", "admin")
    ADMIN_PASSWORD = os.environ.get("THRIFT_POS_ADMIN_PASSWORD")

    # Session cookies (works over plain HTTP on a local network)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SECURE = _env_flag("THRIFT_POS_SECURE_COOKIES")
    SESSION_COOKIE_SAMESITE = "Lax"
    PERMANENT_SESSION_LIFETIME = 86400  # 24 hours

    MAX_CONTENT_LENGTH = 1 * 1024 * 1024

    CSRF_ENABLED = True

    # Logging and profiling
    ENABLE_PROFILING = _env_flag("THRIFT_POS_ENABLE_PROFILING", True)
    LOG_DIR = os.environ.get("THRIFT_POS_LOG_DIR", os.path.join(BASE_DIR, "logs"))
    LOG_LEVEL = os.environ.get("THRIFT_POS_LOG_LEVEL", "INFO")

    CURRENCY_SYMBOL = os.environ.get("THRIFT_POS_CURRENCY_SYMBOL", "฿")
    # Printed before prices on barcode labels (plain text, the PDF fonts lack ฿)
    LABEL_CURRENCY = os.environ.get("THRIFT_POS_LABEL_CURRENCY", "THB ")


def is_default_secret(secret_key):
    return secret_key == _DEFAULT_SECRET
