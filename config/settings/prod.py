# config/settings/prod.py
"""
Production settings.

These settings are for the live environment.
"""

from .base import *  # noqa
import os

# ------------------------------------------------------------------------------
# CORE
# ------------------------------------------------------------------------------

DEBUG = False

# ------------------------------------------------------------------------------
# SECURITY
# ------------------------------------------------------------------------------

SECURE_SSL_REDIRECT = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

SECURE_BROWSER_XSS_FILTER = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

# If you're behind a reverse proxy / load balancer:
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
USE_X_FORWARDED_HOST = True

# Throttling should trust proxy headers only when you control them.
THROTTLE_TRUST_PROXY_HEADERS = True

# ------------------------------------------------------------------------------
# LOGGING
# ------------------------------------------------------------------------------

LOGGING["root"]["level"] = os.getenv("LOG_LEVEL", "WARNING")  # noqa: F405
