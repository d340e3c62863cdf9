# products/inventory.py
"""
Inventory ledger: the only code path that writes Product.stock,
ProductVariant.stock or Product.sold_count.

Callers must already be inside transaction.atomic(); rows are locked with
select_for_update() before they are read for a stock decision.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable

from django.db import transaction
from django.db.models import Prefetch

from core.api import BadRequest

from .models import Product, ProductVariant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockLine:
    product_id: int
    quantity: int
    color: str = ""
    size: str = ""

    @property
    def has_variant(self) -> bool:
        return bool(self.color and self.size)


@dataclass(frozen=True)
class StockDrift:
    product_id: int
    name: str
    stored: int
    expected: int


class InsufficientStock(BadRequest):
    pass


def lock_products(product_ids: Iterable[int]) -> dict[int, Product]:
    """Lock product rows and their variants, returned with variants prefetched."""
    ids = sorted({int(pid) for pid in product_ids})
    # Stable lock order avoids deadlocks between concurrent checkouts.
    locked_variants = ProductVariant.objects.select_for_update().filter(product_id__in=ids).order_by("id")
    products = (
        Product.objects.select_for_update()
        .filter(pk__in=ids)
        .order_by("pk")
        .prefetch_related(Prefetch("variants", queryset=locked_variants))
    )
    return {p.pk: p for p in products}


def available_stock(product: Product, *, color: str = "", size: str = "") -> int | None:
    """
    Stock a buyer can take for (color, size).

    None when the product has variants and the requested one does not exist.
    """
    if product.has_variants:
        variant = product.find_variant(color, size)
        return variant.stock if variant is not None else None
    return product.stock


def sync_aggregate_stock(product: Product, *, save: bool = True) -> int:
    """Recompute the aggregate from variant stocks; no-op for variant-less products."""
    variants = product.variant_list()
    if not variants:
        return product.stock

    total = sum(v.stock for v in variants)
    if product.stock != total:
        product.stock = total
        if save:
            product.save(update_fields=["stock", "updated_at"])
    return total


def _group(lines: Iterable[StockLine]) -> dict[tuple[int, str, str], int]:
    wanted: dict[tuple[int, str, str], int] = defaultdict(int)
    for line in lines:
        wanted[(line.product_id, line.color, line.size)] += int(line.quantity)
    return wanted


def _apply(lines: Iterable[StockLine], *, sign: int) -> None:
    lines = list(lines)
    products = lock_products(line.product_id for line in lines)

    touched: set[int] = set()
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            logger.warning("Stock update skipped: product %s not found", line.product_id)
            continue

        qty = int(line.quantity)
        if product.has_variants:
            variant = product.find_variant(line.color, line.size) if line.has_variant else None
            if variant is None:
                logger.warning(
                    "Stock update skipped: variant %s/%s not found for product %s",
                    line.color or "-",
                    line.size or "-",
                    product.pk,
                )
                continue
            variant.stock = max(0, variant.stock + sign * qty)
            variant.save(update_fields=["stock"])
        else:
            product.stock = max(0, product.stock + sign * qty)

        product.sold_count = max(0, product.sold_count - sign * qty)
        touched.add(product.pk)

    for pid in touched:
        product = products[pid]
        sync_aggregate_stock(product, save=False)
        product.save(update_fields=["stock", "sold_count", "updated_at"])


def update_product_stock(lines: Iterable[StockLine]) -> None:
    """Subtract ordered quantities (floored at 0) and bump sold_count."""
    _apply(lines, sign=-1)


def restore_product_stock(lines: Iterable[StockLine]) -> None:
    """Exact inverse of update_product_stock."""
    _apply(lines, sign=1)


def reserve_stock(lines: Iterable[StockLine]) -> None:
    """
    Check availability under row locks, then take the stock.

    Raises InsufficientStock instead of clamping when a concurrent order got
    there first.
    """
    lines = list(lines)
    products = lock_products(line.product_id for line in lines)

    for (pid, color, size), qty in _group(lines).items():
        product = products.get(pid)
        if product is None:
            raise InsufficientStock(f"Product with ID {pid} is no longer available")
        available = available_stock(product, color=color, size=size)
        if available is None:
            raise BadRequest(f"Variant {color}/{size} is not available for {product.name}")
        if available < qty:
            raise InsufficientStock(
                f"Insufficient stock for {product.name}. Available: {available}, Requested: {qty}"
            )

    update_product_stock(lines)


def check_stock_integrity(*, fix: bool = False) -> list[StockDrift]:
    """Products whose stored aggregate differs from the sum of their variants."""
    drifts: list[StockDrift] = []
    qs = Product.objects.filter(variants__isnull=False).distinct().prefetch_related("variants")

    for product in qs.iterator(chunk_size=500):
        expected = sum(v.stock for v in product.variants.all())
        if product.stock == expected:
            continue
        drifts.append(StockDrift(product.pk, product.name, product.stock, expected))

    if fix and drifts:
        with transaction.atomic():
            for drift in drifts:
                Product.objects.filter(pk=drift.product_id).update(stock=drift.expected)
                logger.info(
                    "Fixed aggregate stock for product %s: %s -> %s",
                    drift.product_id,
                    drift.stored,
                    drift.expected,
                )
    return drifts


def replace_variants(product: Product, variants: list[dict] | None, *, stock: int | None = None) -> None:
    """
    Seller edit path. `variants=None` leaves variants untouched; a list
    replaces them. The aggregate is derived from variants whenever any exist,
    otherwise `stock` (when given) is stored as-is.
    """
    locked = lock_products([product.pk]).get(product.pk, product)

    if variants is not None:
        ProductVariant.objects.filter(product=locked).delete()
        ProductVariant.objects.bulk_create(
            [
                ProductVariant(product=locked, color=v["color"], size=v["size"], stock=int(v["stock"]))
                for v in variants
            ]
        )
        locked = lock_products([product.pk])[product.pk]

    if locked.has_variants:
        sync_aggregate_stock(locked)
    elif stock is not None and locked.stock != int(stock):
        locked.stock = max(0, int(stock))
        locked.save(update_fields=["stock", "updated_at"])

    product.stock = locked.stock
    # Drop stale prefetch so callers see the new variants.
    getattr(product, "_prefetched_objects_cache", {}).pop("variants", None)
