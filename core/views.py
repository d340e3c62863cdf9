# core/views.py
from __future__ import annotations

import logging

from django.db import DatabaseError, connection

from .api import json_error, json_ok

logger = logging.getLogger(__name__)


def health(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError:
        logger.exception("Health check: database unreachable")
        return json_error("Database unavailable", status=503)
    return json_ok({"status": "ok", "requestId": getattr(request, "request_id", "")})


def error_400(request, exception=None):
    return json_error("Bad request", status=400)


def error_403(request, exception=None):
    return json_error("Access denied", status=403)


def error_404(request, exception=None):
    return json_error("Route not found", status=404)


def error_500(request):
    return json_error("Internal server error", status=500)
