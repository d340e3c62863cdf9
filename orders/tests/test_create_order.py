# orders/tests/test_create_order.py
from __future__ import annotations

import json
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase

from core.tests.factories import PASSWORD, order_payload, make_product, make_user
from orders.models import Order
from products.models import Product


class CreateOrderTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller", buyer=False, seller=True)
        self.buyer = make_user("buyer")
        self.tee = make_product(
            self.seller,
            name="Tee",
            price="20.00",
            variants=[
                {"color": "red", "size": "M", "stock": 5},
                {"color": "blue", "size": "L", "stock": 2},
            ],
        )
        self.mug = make_product(self.seller, name="Mug", price="8.50", stock=4)
        self.client.login(username="buyer", password=PASSWORD)

    def _create(self, data):
        return self.client.post("/api/v1/order/create", data=json.dumps(data), content_type="application/json")

    def _pen(self):
        return make_product(self.seller, name="Pen", price="8.50", stock=20)

    def _tee(self):
        return Product.objects.prefetch_related("variants").get(pk=self.tee.pk)

    def test_variant_order_takes_variant_stock(self):
        resp = self._create(order_payload(self.seller, [{"product": self.tee, "quantity": 2, "color": "red", "size": "M"}]))
        self.assertEqual(resp.status_code, 201, resp.content)

        order = resp.json()["data"]["order"]
        self.assertEqual(order["status"], "pending")
        self.assertEqual(order["totalAmount"], 50.0)
        self.assertEqual(order["subtotal"], 40.0)
        self.assertRegex(order["orderNumber"], r"^ORD-\d{6}-\d{4}$")
        self.assertEqual(order["items"][0]["variant"], {"color": "red", "size": "M"})
        self.assertEqual(order["timeline"][0]["note"], "Order placed successfully")

        tee = self._tee()
        self.assertEqual(tee.find_variant("red", "M").stock, 3)
        self.assertEqual(tee.stock, 5)
        self.assertEqual(tee.sold_count, 2)

    def test_total_off_by_two_cents(self):
        data = order_payload(self.seller, [{"product": self.mug, "quantity": 1}])
        data["totalAmount"] = str(Decimal(data["totalAmount"]) + Decimal("0.02"))
        resp = self._create(data)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Total amount calculation mismatch")
        self.assertFalse(Order.objects.exists())

    def test_total_within_a_cent_is_accepted(self):
        data = order_payload(self.seller, [{"product": self.mug, "quantity": 1}])
        data["totalAmount"] = str(Decimal(data["totalAmount"]) + Decimal("0.01"))
        self.assertEqual(self._create(data).status_code, 201)

    def test_cent_off_line_prices_cannot_shift_the_total(self):
        # Each line is within tolerance, but ten of them drift the total by $0.10.
        resp = self._create(order_payload(self.seller, [{"product": self._pen(), "quantity": 10, "price": "8.51"}]))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Subtotal calculation mismatch")
        self.assertFalse(Order.objects.exists())

    def test_totals_are_the_stored_amounts(self):
        data = order_payload(self.seller, [{"product": self._pen(), "quantity": 10, "price": "8.51"}])
        data["subtotal"] = "85.00"
        data["totalAmount"] = "95.00"
        resp = self._create(data)
        self.assertEqual(resp.status_code, 201, resp.content)
        order = resp.json()["data"]["order"]
        self.assertEqual(order["subtotal"], 85.0)
        self.assertEqual(order["totalAmount"], 95.0)

    def test_payment_date_empty_until_approved(self):
        resp = self._create(order_payload(self.seller, [{"product": self.mug}]))
        self.assertIsNone(resp.json()["data"]["order"]["paymentInfo"]["paymentDate"])
        self.assertIsNone(Order.objects.get().payment_date)

    def test_subtotal_mismatch(self):
        data = order_payload(self.seller, [{"product": self.mug, "quantity": 2}], subtotal="10.00", totalAmount="20.00")
        resp = self._create(data)
        self.assertEqual(resp.json()["message"], "Subtotal calculation mismatch")

    def test_missing_fields_reports_received(self):
        resp = self._create({"sellerId": self.seller.pk, "items": []})
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["message"], "Missing required fields")
        self.assertEqual(body["received"]["sellerId"], self.seller.pk)
        self.assertFalse(body["received"]["hasShippingAddress"])

    def test_requires_bank_or_wallet(self):
        data = order_payload(self.seller, [{"product": self.mug}], paidToBankAccount="")
        resp = self._create(data)
        self.assertEqual(resp.json()["message"], "Must specify either bank account or wallet payment")

    def test_variant_product_needs_color_and_size(self):
        resp = self._create(order_payload(self.seller, [{"product": self.tee, "quantity": 1}]))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Please select a color and size for Tee")

    def test_insufficient_variant_stock(self):
        resp = self._create(
            order_payload(self.seller, [{"product": self.tee, "quantity": 3, "color": "blue", "size": "L"}])
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Insufficient stock for Tee. Available: 2, Requested: 3")
        self.assertEqual(self._tee().stock, 7)

    def test_product_from_other_seller(self):
        other = make_user("other", buyer=False, seller=True)
        foreign = make_product(other, name="Foreign")
        resp = self._create(order_payload(self.seller, [{"product": foreign}]))
        self.assertEqual(resp.json()["message"], "Product Foreign is not sold by this seller")

    def test_unknown_product_is_404(self):
        data = order_payload(self.seller, [{"product": self.mug}])
        data["items"][0]["product"] = 424242
        resp = self._create(data)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "Product with ID 424242 not found")

    def test_client_price_must_match(self):
        resp = self._create(order_payload(self.seller, [{"product": self.mug, "price": "7.00"}]))
        self.assertEqual(resp.json()["message"], "Price mismatch for Mug")

    def test_missing_address_field(self):
        data = order_payload(self.seller, [{"product": self.mug}])
        data["billingAddress"]["zipCode"] = ""
        resp = self._create(data)
        self.assertEqual(resp.json()["message"], "Missing required billing address field: zipCode")

    def test_customized_item_price(self):
        customization = {"elements": [{"elementId": "t", "type": "text", "printQuality": "embroidery"}]}
        resp = self._create(
            order_payload(
                self.seller,
                [{"product": self.mug, "price": "21.00", "customization": customization}],
            )
        )
        self.assertEqual(resp.status_code, 201, resp.content)
        self.assertEqual(resp.json()["data"]["order"]["totalAmount"], 31.0)

    def test_multipart_with_screenshot(self):
        data = order_payload(self.seller, [{"product": self.mug, "quantity": 2}])
        form = {k: json.dumps(v) if isinstance(v, (list, dict)) else v for k, v in data.items()}
        form["paymentScreenshot"] = SimpleUploadedFile("receipt.png", b"\x89PNG fake", content_type="image/png")
        resp = self.client.post("/api/v1/order/create", data=form)
        self.assertEqual(resp.status_code, 201, resp.content)
        order = Order.objects.get()
        self.assertTrue(order.payment_screenshot.name.startswith("payment_screenshots/"))

    def test_screenshot_wrong_type_is_rejected(self):
        data = order_payload(self.seller, [{"product": self.mug}])
        form = {k: json.dumps(v) if isinstance(v, (list, dict)) else v for k, v in data.items()}
        form["paymentScreenshot"] = SimpleUploadedFile("receipt.exe", b"MZ", content_type="application/octet-stream")
        resp = self.client.post("/api/v1/order/create", data=form)
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(Order.objects.exists())

    def test_seller_cannot_create(self):
        self.client.logout()
        self.client.login(username="seller", password=PASSWORD)
        resp = self._create(order_payload(self.seller, [{"product": self.mug}]))
        self.assertEqual(resp.status_code, 403)
