# core/throttle.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Iterable, Tuple

from django.conf import settings
from django.core.cache import cache
from django.http import HttpRequest, HttpResponse

from .api import json_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThrottleRule:
    key_prefix: str
    limit: int
    window_seconds: int


ORDER_CREATE_RULE = ThrottleRule("order_create", limit=10, window_seconds=60)
CART_MUTATE_RULE = ThrottleRule("cart_mutate", limit=60, window_seconds=60)
COMPLAINT_CREATE_RULE = ThrottleRule("complaint_create", limit=5, window_seconds=300)
REFUND_CREATE_RULE = ThrottleRule("refund_create", limit=20, window_seconds=60)


def _get_client_ip(request: HttpRequest) -> str:
    """
    Best-effort client IP.

    X-Forwarded-For / X-Real-IP are only honoured with
    THROTTLE_TRUST_PROXY_HEADERS=True (prod behind our own proxy).
    """
    if getattr(settings, "THROTTLE_TRUST_PROXY_HEADERS", False):
        xff = (request.META.get("HTTP_X_FORWARDED_FOR") or "").strip()
        if xff:
            ip = xff.split(",")[0].strip()
            if ip:
                return ip

        xri = (request.META.get("HTTP_X_REAL_IP") or "").strip()
        if xri:
            return xri

    return (request.META.get("REMOTE_ADDR") or "ip-unknown").strip() or "ip-unknown"


def _client_fingerprint(request: HttpRequest) -> str:
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return f"user:{user.pk}"
    ua = (request.META.get("HTTP_USER_AGENT") or "")[:60]
    return f"{_get_client_ip(request)}|{ua}"


def throttle(rule: ThrottleRule, *, methods: Iterable[str] | None = None) -> Callable:
    """
    Fixed-window, cache-based throttle for abusable endpoints
    (order creation, cart mutation, complaint and refund submission).

    Over the limit: JSON 429 with Retry-After. Disabled by THROTTLE_ENABLED=False.
    """
    allowed: Tuple[str, ...] = tuple(m.upper() for m in methods) if methods else ("POST", "PUT", "PATCH", "DELETE")

    def decorator(view_func: Callable) -> Callable:
        @wraps(view_func)
        def wrapped(request: HttpRequest, *args, **kwargs) -> HttpResponse:
            if not getattr(settings, "THROTTLE_ENABLED", True) or request.method.upper() not in allowed:
                return view_func(request, *args, **kwargs)

            window = max(1, rule.window_seconds)
            fp = _client_fingerprint(request)
            bucket = int(time.time() // window)
            cache_key = f"throttle:{rule.key_prefix}:{bucket}:{fp}"

            current = int(cache.get(cache_key, 0) or 0)
            if current >= rule.limit:
                retry_after = max(1, int(window - (time.time() % window)))
                logger.warning("Throttled %s for %s", rule.key_prefix, fp)
                resp = json_error("Too many requests. Please try again shortly.", status=429)
                resp["Retry-After"] = str(retry_after)
                return resp

            cache.set(cache_key, current + 1, timeout=window + 5)
            return view_func(request, *args, **kwargs)

        return wrapped

    return decorator
