# cart/pricing.py
"""
Customization pricing.

element price = BASE_ELEMENT_PRICE x print-quality multiplier x complexity multiplier
Unknown print qualities / element types price at 1.0x.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable

from core.api import BadRequest

BASE_ELEMENT_PRICE = Decimal("5")

PRINT_QUALITY_MULTIPLIERS: dict[str, Decimal] = {
    "embroidery": Decimal("2.5"),
    "dtg": Decimal("1.0"),
    "sublimation": Decimal("1.8"),
    "screen": Decimal("1.2"),
    "plastisol": Decimal("1.5"),
    "htv": Decimal("1.3"),
}

PRINT_QUALITY_NAMES: dict[str, str] = {
    "embroidery": "Embroidery",
    "dtg": "DTG Printing",
    "sublimation": "Sublimation",
    "screen": "Screen Printing",
    "plastisol": "Plastisol Transfers",
    "htv": "HTV",
}

COMPLEXITY_MULTIPLIERS: dict[str, Decimal] = {
    "text": Decimal("1.0"),
    "shape": Decimal("1.2"),
    "image": Decimal("1.5"),
}


def _cents(d: Decimal) -> Decimal:
    return d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def element_price(element: dict[str, Any]) -> Decimal:
    quality = str(element.get("printQuality") or "").strip().lower()
    if not quality:
        raise BadRequest(f"Print quality is required for {element.get('type') or 'each'} element")
    kind = str(element.get("type") or "").strip().lower()
    print_mult = PRINT_QUALITY_MULTIPLIERS.get(quality, Decimal("1.0"))
    complexity_mult = COMPLEXITY_MULTIPLIERS.get(kind, Decimal("1.0"))
    return _cents(BASE_ELEMENT_PRICE * print_mult * complexity_mult)


def customization_breakdown(elements: Iterable[dict[str, Any]]) -> tuple[Decimal, list[dict]]:
    """Total customization price plus a per-element breakdown for display."""
    total = Decimal("0.00")
    breakdown: list[dict] = []
    for element in elements:
        if not isinstance(element, dict):
            raise BadRequest("Each customization element must be an object")
        price = element_price(element)
        total += price
        quality = str(element.get("printQuality")).strip().lower()
        breakdown.append(
            {
                "elementId": element.get("elementId") or element.get("id"),
                "elementType": element.get("type"),
                "printQuality": quality,
                "printQualityName": PRINT_QUALITY_NAMES.get(quality, quality),
                "elementPrice": float(price),
            }
        )
    return _cents(total), breakdown


def customization_price(customization: Any) -> Decimal:
    """Price added on top of the product price; 0 when there is no customization."""
    if not customization or not isinstance(customization, dict):
        return Decimal("0.00")
    elements = customization.get("elements")
    if not elements:
        return Decimal("0.00")
    if not isinstance(elements, list):
        raise BadRequest("Valid customization data is required")
    total, _ = customization_breakdown(elements)
    return total
