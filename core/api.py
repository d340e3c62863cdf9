# core/api.py
"""
JSON API plumbing shared by every app.

- ApiError hierarchy: raise from services/views, rendered by `api_view`
- json_ok / json_error: the {"success", "message", "data"} envelope
- read_payload / parse_json_field: JSON bodies and multipart forms alike
- paginate: page/limit query params -> slice + pagination block
"""
from __future__ import annotations

import json
import logging
from functools import wraps
from typing import Any, Callable, Iterable, Optional

from django.conf import settings
from django.core.exceptions import PermissionDenied, ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.http import Http404, HttpRequest, JsonResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 400
    default_message = "Bad request"

    def __init__(self, message: str = "", *, errors: Any = None, extra: Optional[dict] = None):
        self.message = message or self.default_message
        self.errors = errors
        self.extra = extra or {}
        super().__init__(self.message)


class BadRequest(ApiError):
    status_code = 400
    default_message = "Bad request"


class NotAuthenticated(ApiError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Access denied"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


def json_ok(data: Any = None, *, message: str = "", status: int = 200, **extra) -> JsonResponse:
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return JsonResponse(body, status=status, encoder=DjangoJSONEncoder)


def json_error(message: str, *, status: int = 400, errors: Any = None, **extra) -> JsonResponse:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    body.update(extra)
    return JsonResponse(body, status=status, encoder=DjangoJSONEncoder)


def _validation_messages(exc: ValidationError) -> list[str]:
    if hasattr(exc, "message_dict"):
        out: list[str] = []
        for field, msgs in exc.message_dict.items():
            for m in msgs:
                out.append(m if field == "__all__" else f"{field}: {m}")
        return out
    return list(exc.messages)


def api_view(methods: Iterable[str] = ("GET",)) -> Callable:
    """
    Wrap a function view so that it only answers `methods` and always returns JSON.

    ApiError subclasses map to their status code; Django's ValidationError,
    PermissionDenied and Http404 map to 400/403/404. Anything else is logged
    and reported as a 500 (detail only shown with DEBUG on).
    """
    allowed = tuple(m.upper() for m in methods)

    def decorator(view_func: Callable) -> Callable:
        @wraps(view_func)
        def wrapped(request: HttpRequest, *args, **kwargs):
            if request.method.upper() not in allowed:
                resp = json_error("Method not allowed", status=405)
                resp["Allow"] = ", ".join(allowed)
                return resp

            try:
                return view_func(request, *args, **kwargs)
            except ApiError as exc:
                return json_error(exc.message, status=exc.status_code, errors=exc.errors, **exc.extra)
            except ValidationError as exc:
                msgs = _validation_messages(exc)
                return json_error(msgs[0] if len(msgs) == 1 else "Validation failed", status=400, errors=msgs)
            except PermissionDenied as exc:
                return json_error(str(exc) or Forbidden.default_message, status=403)
            except Http404 as exc:
                return json_error(str(exc) or NotFound.default_message, status=404)
            except Exception as exc:
                logger.exception("Unhandled error in %s", getattr(view_func, "__name__", "view"))
                if settings.DEBUG:
                    return json_error("Internal server error", status=500, error=str(exc))
                return json_error("Internal server error", status=500)

        return wrapped

    return decorator


def read_payload(request: HttpRequest) -> dict[str, Any]:
    """Return the request body as a dict for JSON, form and multipart requests."""
    content_type = (request.content_type or "").lower()
    if content_type == "application/json":
        if not request.body:
            return {}
        try:
            data = json.loads(request.body.decode("utf-8"))
        except (ValueError, UnicodeDecodeError):
            raise BadRequest("Invalid JSON body")
        if not isinstance(data, dict):
            raise BadRequest("JSON body must be an object")
        return data

    if request.method.upper() == "POST":
        return request.POST.dict()

    # PUT/PATCH form bodies are not parsed by Django.
    from django.http import QueryDict

    return QueryDict(request.body, encoding=request.encoding).dict()


def parse_json_field(value: Any, *, field: str) -> Any:
    """Multipart clients send nested objects as JSON strings."""
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            raise BadRequest(f"Invalid {field} format")
    return value


def _positive_int(raw: Any, default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def paginate(qs, request: HttpRequest, *, default_limit: int = 10, max_limit: int = 100):
    page = _positive_int(request.GET.get("page"), 1)
    limit = min(_positive_int(request.GET.get("limit"), default_limit), max_limit)

    total = qs.count()
    offset = (page - 1) * limit
    items = list(qs[offset : offset + limit])
    pages = (total + limit - 1) // limit if total else 0

    return items, {
        "currentPage": page,
        "totalPages": pages,
        "totalItems": total,
        "itemsPerPage": limit,
        "hasNext": page < pages,
        "hasPrev": page > 1,
    }
