# core/middleware.py
from __future__ import annotations

from django.utils.deprecation import MiddlewareMixin

from .logging_context import clear_context, new_request_id, set_context


def _role_for(user) -> str:
    if not user or not getattr(user, "is_authenticated", False):
        return "anon"
    # Imported lazily: accounts imports core at module level.
    from accounts.permissions import role_of

    return role_of(user)


class RequestIDMiddleware(MiddlewareMixin):
    """
    Adds a stable request id for observability.

    - request.request_id
    - response header: X-Request-ID
    - threadlocal context for logging filters

    Must run after AuthenticationMiddleware so the user/role are known.
    """

    header_name = "HTTP_X_REQUEST_ID"
    response_header = "X-Request-ID"

    def process_request(self, request):
        rid = (request.META.get(self.header_name) or "").strip()[:64] or new_request_id()
        request.request_id = rid

        user = getattr(request, "user", None)
        user_id = user.pk if user is not None and user.is_authenticated else None
        set_context(request_id=rid, user_id=user_id, role=_role_for(user), path=(request.path or ""))

    def process_response(self, request, response):
        rid = getattr(request, "request_id", None)
        if rid:
            response[self.response_header] = rid
        clear_context()
        return response
