# products/views.py
from __future__ import annotations

from django.db.models import Q
from django.shortcuts import get_object_or_404

from accounts.decorators import admin_required, seller_required
from core.api import api_view, json_ok, paginate, read_payload

from . import services
from .models import Product
from .serializers import product_to_dict


def _base_qs():
    return Product.objects.select_related("seller", "seller__profile").prefetch_related("variants")


@api_view(["GET"])
def product_list(request):
    qs = _base_qs().filter(status=Product.Status.APPROVED, is_active=True)

    category = (request.GET.get("category") or "").strip()
    if category:
        qs = qs.filter(category__iexact=category)

    seller_id = (request.GET.get("seller") or "").strip()
    if seller_id.isdigit():
        qs = qs.filter(seller_id=int(seller_id))

    q = (request.GET.get("q") or request.GET.get("search") or "").strip()
    if q:
        qs = qs.filter(Q(name__icontains=q) | Q(description__icontains=q) | Q(category__icontains=q))

    items, pagination = paginate(qs, request, default_limit=20)
    return json_ok({"products": [product_to_dict(p) for p in items], "pagination": pagination})


@api_view(["GET"])
def product_detail(request, product_id: int):
    product = get_object_or_404(_base_qs(), pk=product_id, status=Product.Status.APPROVED, is_active=True)
    return json_ok(product_to_dict(product))


@api_view(["GET", "POST"])
@seller_required
def seller_products(request):
    if request.method == "POST":
        product = services.create_product(seller=request.user, data=read_payload(request))
        product = _base_qs().get(pk=product.pk)
        return json_ok(product_to_dict(product), message="Product created successfully", status=201)

    qs = _base_qs().filter(seller=request.user)
    status = (request.GET.get("status") or "").strip()
    if status:
        qs = qs.filter(status=status)
    items, pagination = paginate(qs, request, default_limit=20)
    return json_ok({"products": [product_to_dict(p) for p in items], "pagination": pagination})


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@seller_required
def seller_product_detail(request, product_id: int):
    product = get_object_or_404(_base_qs(), pk=product_id, seller=request.user)

    if request.method == "DELETE":
        services.deactivate_product(product=product)
        return json_ok(message="Product removed successfully")

    if request.method in ("PUT", "PATCH"):
        services.update_product(product=product, data=read_payload(request))
        product = _base_qs().get(pk=product.pk)
        return json_ok(product_to_dict(product), message="Product updated successfully")

    return json_ok(product_to_dict(product))


@api_view(["PATCH"])
@admin_required
def admin_product_status(request, product_id: int):
    product = get_object_or_404(_base_qs(), pk=product_id)
    payload = read_payload(request)
    services.set_product_status(product=product, status=str(payload.get("status") or ""))
    return json_ok(product_to_dict(product), message=f"Product {product.status}")
