# core/uploads.py
from __future__ import annotations

import logging
from pathlib import Path

from django.db import transaction

from .api import BadRequest

logger = logging.getLogger(__name__)


def validate_upload(f, *, allowed_exts: set[str], max_mb: int, label: str) -> None:
    """Reject files with an unexpected extension or over the size limit (400)."""
    if not f:
        return
    name = getattr(f, "name", "") or ""
    ext = Path(name).suffix.lower().lstrip(".")
    if ext not in allowed_exts:
        raise BadRequest(f"{label}: unsupported file type .{ext or '?'}")

    size = getattr(f, "size", None)
    if size is not None and size > max_mb * 1024 * 1024:
        raise BadRequest(f"{label}: file too large. Max {max_mb} MB.")


def attach_file(instance, field_name: str, f, *, update_fields: list[str] | None = None) -> bool:
    """
    Store `f` on `instance.<field_name>` and save.

    Storage failures are logged and swallowed: the owning row is already
    committed and must not be rolled back because a bucket was unreachable.
    """
    if not f:
        return False

    fields = [field_name] + list(update_fields or [])
    try:
        with transaction.atomic():
            getattr(instance, field_name).save(Path(f.name).name, f, save=False)
            instance.save(update_fields=fields)
    except Exception:
        logger.exception(
            "Upload failed for %s.%s pk=%s", instance.__class__.__name__, field_name, instance.pk
        )
        setattr(instance, field_name, None)
        return False
    return True
