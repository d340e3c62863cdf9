# core/config.py
from __future__ import annotations

from decimal import Decimal, InvalidOperation

from django.conf import settings

DEFAULT_SHIPPING_FEE = Decimal("10.00")
DEFAULT_IMAGE_EXTS = {"jpg", "jpeg", "png", "gif", "webp"}
COMPLAINT_ATTACHMENT_EXTS = {"jpg", "jpeg", "png", "gif", "webp", "pdf", "doc", "docx"}


def _get_setting_int(name: str, default: int) -> int:
    try:
        return int(getattr(settings, name, default) or default)
    except (TypeError, ValueError):
        return default


def _get_setting_set(name: str, default: set[str]) -> set[str]:
    raw = getattr(settings, name, None)
    if not raw:
        return default
    if isinstance(raw, (list, tuple, set)):
        return {str(x).lower().lstrip(".") for x in raw if str(x).strip()}
    if isinstance(raw, str):
        return {x.strip().lower().lstrip(".") for x in raw.split(",") if x.strip()}
    return default


def get_shipping_fee() -> Decimal:
    """Flat shipping fee (dollars) added to every order."""
    raw = getattr(settings, "MARKETPLACE_SHIPPING_FEE", DEFAULT_SHIPPING_FEE)
    try:
        fee = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return DEFAULT_SHIPPING_FEE
    if fee.is_nan() or fee < 0:
        return DEFAULT_SHIPPING_FEE
    return fee.quantize(Decimal("0.01"))


def get_upload_max_mb() -> int:
    return _get_setting_int("MARKETPLACE_UPLOAD_MAX_MB", 5)


def get_allowed_image_exts() -> set[str]:
    return _get_setting_set("MARKETPLACE_ALLOWED_IMAGE_EXTS", DEFAULT_IMAGE_EXTS)


def get_complaint_attachment_max_mb() -> int:
    return _get_setting_int("COMPLAINT_ATTACHMENT_MAX_MB", 10)


def get_complaint_max_attachments() -> int:
    return _get_setting_int("COMPLAINT_MAX_ATTACHMENTS", 5)
