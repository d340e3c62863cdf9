# products/tests/test_inventory.py
from __future__ import annotations

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from core.tests.factories import make_product, make_user
from products.inventory import (
    InsufficientStock,
    StockLine,
    available_stock,
    check_stock_integrity,
    replace_variants,
    reserve_stock,
    restore_product_stock,
    update_product_stock,
)
from products.models import Product, ProductVariant


def _reload(product: Product) -> Product:
    return Product.objects.prefetch_related("variants").get(pk=product.pk)


class VariantStockTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller", buyer=False, seller=True)
        self.product = make_product(
            self.seller,
            variants=[
                {"color": "red", "size": "M", "stock": 5},
                {"color": "red", "size": "L", "stock": 2},
                {"color": "blue", "size": "M", "stock": 3},
            ],
        )

    def test_aggregate_derived_from_variants(self):
        self.assertEqual(self.product.stock, 10)

    def test_update_then_restore_is_exact(self):
        line = StockLine(product_id=self.product.pk, quantity=2, color="red", size="M")

        update_product_stock([line])
        product = _reload(self.product)
        self.assertEqual(product.find_variant("red", "M").stock, 3)
        self.assertEqual(product.stock, 8)
        self.assertEqual(product.sold_count, 2)

        restore_product_stock([line])
        product = _reload(self.product)
        self.assertEqual(product.find_variant("red", "M").stock, 5)
        self.assertEqual(product.stock, 10)
        self.assertEqual(product.sold_count, 0)

    def test_update_floors_at_zero(self):
        update_product_stock([StockLine(self.product.pk, 9, "red", "L")])
        product = _reload(self.product)
        self.assertEqual(product.find_variant("red", "L").stock, 0)
        self.assertEqual(product.stock, 8)

    def test_line_without_variant_is_skipped_for_variant_product(self):
        update_product_stock([StockLine(self.product.pk, 4)])
        product = _reload(self.product)
        self.assertEqual(product.stock, 10)
        self.assertEqual(sum(v.stock for v in product.variants.all()), product.stock)

    def test_reserve_checks_grouped_quantity(self):
        lines = [
            StockLine(self.product.pk, 3, "red", "M"),
            StockLine(self.product.pk, 3, "red", "M"),
        ]
        with self.assertRaisesMessage(InsufficientStock, "Available: 5, Requested: 6"):
            reserve_stock(lines)
        self.assertEqual(_reload(self.product).stock, 10)

    def test_available_stock_unknown_variant(self):
        self.assertIsNone(available_stock(self.product, color="green", size="S"))
        self.assertEqual(available_stock(self.product, color="blue", size="M"), 3)

    def test_replace_variants_recomputes(self):
        replace_variants(self.product, [{"color": "black", "size": "S", "stock": 4}])
        product = _reload(self.product)
        self.assertEqual(product.stock, 4)
        self.assertEqual(len(product.variant_list()), 1)


class PlainStockTests(TestCase):
    def test_plain_product_uses_aggregate(self):
        seller = make_user("seller", buyer=False, seller=True)
        product = make_product(seller, stock=4)
        update_product_stock([StockLine(product.pk, 3, "red", "M")])
        product.refresh_from_db()
        self.assertEqual(product.stock, 1)
        self.assertEqual(product.sold_count, 3)


class IntegrityTests(TestCase):
    def setUp(self):
        seller = make_user("seller", buyer=False, seller=True)
        self.product = make_product(seller, variants=[{"color": "red", "size": "M", "stock": 5}])
        # Simulate historical drift.
        Product.objects.filter(pk=self.product.pk).update(stock=9)

    def test_report_and_fix(self):
        drifts = check_stock_integrity()
        self.assertEqual(len(drifts), 1)
        self.assertEqual((drifts[0].stored, drifts[0].expected), (9, 5))

        check_stock_integrity(fix=True)
        self.assertEqual(Product.objects.get(pk=self.product.pk).stock, 5)
        self.assertEqual(check_stock_integrity(), [])

    def test_command(self):
        out = StringIO()
        call_command("check_stock_integrity", stdout=out)
        self.assertIn("out of sync", out.getvalue())

        out = StringIO()
        call_command("check_stock_integrity", "--fix", stdout=out)
        self.assertIn("Fixed 1 product(s)", out.getvalue())
        self.assertEqual(ProductVariant.objects.get(product=self.product).stock, 5)
        self.assertEqual(Product.objects.get(pk=self.product.pk).stock, 5)
