# core/logging_filters.py
from __future__ import annotations

import logging

from .logging_context import get_context


class RequestContextFilter(logging.Filter):
    """Inject request id, user id, role and path into log records.

    Records emitted outside a request (management commands, shell) get "-".
    """

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_context()
        record.request_id = ctx.request_id if ctx else "-"
        record.user_id = ctx.user_id if ctx else None
        record.role = ctx.role if ctx else "-"
        record.path = ctx.path if ctx else ""
        return True
