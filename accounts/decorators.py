# accounts/decorators.py
from __future__ import annotations

from functools import wraps
from typing import Callable

from core.api import Forbidden, NotAuthenticated

from .permissions import is_admin_user, is_buyer_user, is_seller_user


def _role_required(check: Callable, message: str) -> Callable:
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            user = getattr(request, "user", None)
            if not user or not user.is_authenticated:
                raise NotAuthenticated("Authentication required")
            if check is not None and not check(user):
                raise Forbidden(message)
            return view_func(request, *args, **kwargs)

        return _wrapped

    return decorator


# Place these *inside* core.api.api_view so the raised errors become JSON.
login_required_json = _role_required(None, "")
buyer_required = _role_required(is_buyer_user, "Access denied. Buyer role required.")
seller_required = _role_required(is_seller_user, "Access denied. Seller role required.")
admin_required = _role_required(is_admin_user, "Access denied. Admin role required.")
