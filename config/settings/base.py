# config/settings/base.py

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse
import os

# Load environment variables from .env file
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent.parent

load_dotenv(BASE_DIR / ".env")


def _db_from_database_url(url: str) -> dict:
    parsed = urlparse(url)
    return {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": parsed.path.lstrip("/"),
        "USER": parsed.username or "",
        "PASSWORD": parsed.password or "",
        "HOST": parsed.hostname or "",
        "PORT": str(parsed.port or "5432"),
        "CONN_MAX_AGE": int(os.getenv("DB_CONN_MAX_AGE", "60")),
    }


DATABASE_URL = (os.getenv("DATABASE_URL") or "").strip()

if DATABASE_URL:
    DATABASES = {"default": _db_from_database_url(DATABASE_URL)}
else:
    # Local fallback
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB", "marketplace"),
            "USER": os.getenv("POSTGRES_USER", "marketplace"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", ""),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
            "CONN_MAX_AGE": int(os.getenv("DB_CONN_MAX_AGE", "0")),
        }
    }

# ============================================================
# Helpers
# ============================================================
def _csv_env(name: str, default: str = "") -> list[str]:
    """
    Read a comma-separated env var into a clean list.

    - Strips whitespace
    - Drops empty entries
    - Safe if unset/blank
    """
    raw = (os.getenv(name, default) or "").strip()
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _bool_env(name: str, default: str = "False") -> bool:
    raw = (os.getenv(name, default) or "").strip().lower()
    return raw in ("1", "true", "yes", "on")


# ============================================================
# Core
# ============================================================
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY") or os.getenv("SECRET_KEY") or "unsafe-dev-key-change-me"

# Allow either DEBUG or DJANGO_DEBUG in env
DEBUG = _bool_env("DEBUG", os.getenv("DJANGO_DEBUG", "False"))

# IMPORTANT: ALLOWED_HOSTS must NOT contain schemes.
ALLOWED_HOSTS = _csv_env("ALLOWED_HOSTS", default="localhost,127.0.0.1")

# IMPORTANT: CSRF_TRUSTED_ORIGINS MUST include scheme.
CSRF_TRUSTED_ORIGINS = _csv_env("CSRF_TRUSTED_ORIGINS", default="")


DJANGO_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
]

THIRD_PARTY_APPS: list[str] = [
    "storages",
]

LOCAL_APPS = [
    "accounts.apps.AccountsConfig",
    "core.apps.CoreConfig",
    "products.apps.ProductsConfig",
    "cart.apps.CartConfig",
    "orders.apps.OrdersConfig",
    "payments.apps.PaymentsConfig",
    "refunds.apps.RefundsConfig",
    "complaints.apps.ComplaintsConfig",
    "dashboards.apps.DashboardsConfig",
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "core.middleware.RequestIDMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

WSGI_APPLICATION = "config.wsgi.application"
ASGI_APPLICATION = "config.asgi.application"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Media: local by default; the S3 block below overrides MEDIA_URL and STORAGES.
MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "media"

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

SECURE_BROWSER_XSS_FILTER = True
X_FRAME_OPTIONS = "DENY"
CSRF_COOKIE_HTTPONLY = True
SESSION_COOKIE_HTTPONLY = True

# Production security settings
if not DEBUG:
    SECURE_SSL_REDIRECT = True
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
    SECURE_HSTS_SECONDS = 31536000  # 1 year
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True

# -------- Cache (used by throttling) --------
CACHES = {
    "default": {
        "BACKEND": os.getenv("DJANGO_CACHE_BACKEND", "django.core.cache.backends.locmem.LocMemCache"),
        "LOCATION": os.getenv("DJANGO_CACHE_LOCATION", "marketplace-default"),
        "TIMEOUT": int(os.getenv("DJANGO_CACHE_TIMEOUT", "300")),
    }
}

THROTTLE_ENABLED = _bool_env("THROTTLE_ENABLED", "True")
THROTTLE_TRUST_PROXY_HEADERS = _bool_env("THROTTLE_TRUST_PROXY_HEADERS", "False")

# -------- Marketplace --------
# Flat shipping fee (dollars) added to every order total.
MARKETPLACE_SHIPPING_FEE = os.getenv("MARKETPLACE_SHIPPING_FEE", "10.00").strip()

# Payment screenshots / refund screenshots
MARKETPLACE_UPLOAD_MAX_MB = int(os.getenv("MARKETPLACE_UPLOAD_MAX_MB", "5"))
MARKETPLACE_ALLOWED_IMAGE_EXTS = _csv_env("MARKETPLACE_ALLOWED_IMAGE_EXTS", "jpg,jpeg,png,gif,webp")

# Complaint attachments
COMPLAINT_ATTACHMENT_MAX_MB = int(os.getenv("COMPLAINT_ATTACHMENT_MAX_MB", "10"))
COMPLAINT_MAX_ATTACHMENTS = int(os.getenv("COMPLAINT_MAX_ATTACHMENTS", "5"))

# -------- Logging --------
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_context": {
            "()": "core.logging_filters.RequestContextFilter",
        },
    },
    "formatters": {
        "standard": {
            "format": "[%(levelname)s] %(asctime)s rid=%(request_id)s user=%(user_id)s role=%(role)s path=%(path)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "filters": ["request_context"],
            "formatter": "standard",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": os.getenv("LOG_LEVEL", "INFO"),
    },
}

# -------- Error reporting (Sentry) --------
SENTRY_DSN = os.getenv("SENTRY_DSN", "").strip()
SENTRY_ENVIRONMENT = os.getenv("SENTRY_ENVIRONMENT", "production" if not DEBUG else "development")
SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))

if SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.django import DjangoIntegration

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=SENTRY_ENVIRONMENT,
        integrations=[DjangoIntegration()],
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        send_default_pii=False,
    )

# ------------------------------------------------------------------------------
# AWS S3 (optional)
# ------------------------------------------------------------------------------
USE_S3 = _bool_env("USE_S3", "False")

if USE_S3:
    AWS_ACCESS_KEY_ID = (os.getenv("AWS_ACCESS_KEY_ID") or "").strip()
    AWS_SECRET_ACCESS_KEY = (os.getenv("AWS_SECRET_ACCESS_KEY") or "").strip()
    AWS_S3_REGION_NAME = (os.getenv("AWS_S3_REGION_NAME") or "us-east-2").strip()

    AWS_S3_MEDIA_BUCKET = (os.getenv("AWS_S3_MEDIA_BUCKET") or "").strip()

    if not AWS_S3_MEDIA_BUCKET:
        raise RuntimeError("USE_S3=True but AWS_S3_MEDIA_BUCKET is not set.")

    MEDIA_URL = f"https://{AWS_S3_MEDIA_BUCKET}.s3.{AWS_S3_REGION_NAME}.amazonaws.com/media/"

    AWS_S3_SIGNATURE_VERSION = "s3v4"
    AWS_S3_FILE_OVERWRITE = False
    AWS_DEFAULT_ACL = None

    # Payment screenshots and complaint attachments are private: always signed URLs.
    AWS_QUERYSTRING_AUTH = True
    AWS_QUERYSTRING_EXPIRE = int(os.getenv("AWS_S3_QUERYSTRING_EXPIRE", "3600"))

    STORAGES = {
        "default": {"BACKEND": "core.storage_backends.MediaStorage"},
        "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
    }
