# cart/tests/test_cart.py
from __future__ import annotations

import json

from django.test import TestCase

from core.tests.factories import PASSWORD, make_product, make_user
from products.models import Product


class CartViewTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller", buyer=False, seller=True)
        self.buyer = make_user("buyer")
        self.tee = make_product(
            self.seller,
            name="Tee",
            price="20.00",
            variants=[{"color": "red", "size": "M", "stock": 5}],
        )
        self.mug = make_product(self.seller, name="Mug", price="8.50", stock=3)
        self.client.login(username="buyer", password=PASSWORD)

    def _post(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type="application/json")

    def test_add_merges_same_variant(self):
        self._post("/api/v1/cart/add", {"productId": self.tee.pk, "quantity": 1, "color": "red", "size": "M"})
        resp = self._post("/api/v1/cart/add", {"productId": self.tee.pk, "quantity": 2, "color": "red", "size": "M"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(len(data["items"]), 1)
        self.assertEqual(data["items"][0]["quantity"], 3)
        self.assertEqual(data["totalAmount"], 60.0)

    def test_add_requires_variant_for_variant_product(self):
        resp = self._post("/api/v1/cart/add", {"productId": self.tee.pk, "quantity": 1})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Please select a color and size for Tee")

    def test_add_unapproved_product_is_404(self):
        pending = make_product(self.seller, name="Draft", status=Product.Status.PENDING)
        resp = self._post("/api/v1/cart/add", {"productId": pending.pk})
        self.assertEqual(resp.status_code, 404)

    def test_customized_lines_are_unique(self):
        payload = {
            "productId": self.mug.pk,
            "quantity": 1,
            "customization": {"elements": [{"elementId": "t1", "type": "text", "printQuality": "embroidery"}]},
        }
        self._post("/api/v1/cart/add-customized", payload)
        resp = self._post("/api/v1/cart/add-customized", payload)
        items = resp.json()["data"]["items"]
        self.assertEqual(len(items), 2)
        # 8.50 + 5 x 2.5
        self.assertEqual(items[0]["price"], 21.0)
        self.assertTrue(items[0]["isCustomized"])

    def test_customized_requires_elements(self):
        resp = self._post("/api/v1/cart/add-customized", {"productId": self.mug.pk, "customization": {}})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Valid customization data is required")

    def test_update_remove_clear(self):
        resp = self._post("/api/v1/cart/add", {"productId": self.mug.pk, "quantity": 1})
        item_id = resp.json()["data"]["items"][0]["id"]

        resp = self.client.patch(
            "/api/v1/cart/update",
            data=json.dumps({"itemId": item_id, "quantity": 3}),
            content_type="application/json",
        )
        self.assertEqual(resp.json()["data"]["items"][0]["quantity"], 3)

        resp = self.client.patch(
            "/api/v1/cart/update",
            data=json.dumps({"itemId": item_id, "quantity": 0}),
            content_type="application/json",
        )
        self.assertEqual(resp.json()["data"]["items"], [])

        self.assertEqual(self.client.delete(f"/api/v1/cart/remove/{item_id}").status_code, 404)

        self._post("/api/v1/cart/add", {"productId": self.mug.pk})
        self.assertEqual(self.client.delete("/api/v1/cart/clear").status_code, 200)
        self.assertEqual(self.client.get("/api/v1/cart/").json()["data"]["items"], [])

    def test_deactivated_product_drops_out(self):
        self._post("/api/v1/cart/add", {"productId": self.mug.pk})
        Product.objects.filter(pk=self.mug.pk).update(is_active=False)
        self.assertEqual(self.client.get("/api/v1/cart/").json()["data"]["items"], [])


class CheckoutHelperTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller", buyer=False, seller=True)
        make_user("buyer")
        self.mug = make_product(self.seller, name="Mug", price="8.50", stock=3)
        self.client.login(username="buyer", password=PASSWORD)

    def _post(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type="application/json")

    def test_validate(self):
        resp = self._post(
            "/api/v1/cart/validate",
            {"sellerId": self.seller.pk, "items": [{"product": self.mug.pk, "quantity": 2, "price": 8.5}]},
        )
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(data["subtotal"], 17.0)
        self.assertEqual(data["shippingCost"], 10.0)
        self.assertEqual(data["totalAmount"], 27.0)

    def test_validate_rejects_stock_and_price(self):
        resp = self._post(
            "/api/v1/cart/validate",
            {"sellerId": self.seller.pk, "items": [{"product": self.mug.pk, "quantity": 4, "price": 8.5}]},
        )
        self.assertEqual(resp.json()["message"], "Insufficient stock for Mug")

        resp = self._post(
            "/api/v1/cart/validate",
            {"sellerId": self.seller.pk, "items": [{"product": self.mug.pk, "quantity": 1, "price": 9}]},
        )
        self.assertEqual(resp.json()["message"], "Price mismatch for Mug")

    def test_summary(self):
        resp = self._post("/api/v1/cart/summary", {"items": [{"price": 8.5, "quantity": 2}, {"price": 1}]})
        data = resp.json()["data"]
        self.assertEqual(data["subtotal"], 17.0)
        self.assertEqual(data["itemCount"], 2)
        self.assertEqual(data["totalAmount"], 27.0)

    def test_availability(self):
        resp = self.client.get(f"/api/v1/cart/availability/{self.mug.pk}/5")
        data = resp.json()["data"]
        self.assertFalse(data["isAvailable"])
        self.assertEqual(data["availableStock"], 3)
        self.assertEqual(self.client.get("/api/v1/cart/availability/99999/1").status_code, 404)
