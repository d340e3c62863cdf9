# products/serializers.py
from __future__ import annotations

from .models import Product


def seller_summary(user) -> dict | None:
    if user is None:
        return None
    profile = getattr(user, "profile", None)
    return {
        "id": user.pk,
        "fullName": profile.display_name if profile else user.get_username(),
        "businessName": profile.public_seller_name if profile else user.get_username(),
        "email": user.email,
    }


def product_to_dict(product: Product) -> dict:
    variants = product.variant_list()
    return {
        "id": product.pk,
        "seller": seller_summary(product.seller),
        "name": product.name,
        "description": product.description,
        "category": product.category,
        "price": float(product.price),
        "stock": product.stock,
        "variants": {
            "colors": sorted({v.color for v in variants}),
            "sizes": sorted({v.size for v in variants}),
            "stockByVariant": [{"color": v.color, "size": v.size, "stock": v.stock} for v in variants],
        },
        "soldCount": product.sold_count,
        "status": product.status,
        "isActive": product.is_active,
        "createdAt": product.created_at,
        "updatedAt": product.updated_at,
    }
