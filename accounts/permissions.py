# accounts/permissions.py
from __future__ import annotations


def _get_profile(user):
    return getattr(user, "profile", None)


def is_admin_user(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_superuser", False) or getattr(user, "is_staff", False):
        return True
    return bool(getattr(_get_profile(user), "is_admin", False))


def is_seller_user(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    return bool(getattr(_get_profile(user), "is_seller", False))


def is_buyer_user(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    return bool(getattr(_get_profile(user), "is_buyer", False))


def role_of(user) -> str:
    if is_admin_user(user):
        return "admin"
    if is_seller_user(user):
        return "seller"
    if is_buyer_user(user):
        return "buyer"
    return "anon"
