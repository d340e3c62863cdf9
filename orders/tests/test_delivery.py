# orders/tests/test_delivery.py
from __future__ import annotations

import json

from django.test import TestCase

from core.tests.factories import PASSWORD, make_product, make_user, place_order
from orders.models import Order


class DeliveryTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller", buyer=False, seller=True)
        self.buyer = make_user("buyer")
        self.mug = make_product(self.seller, name="Mug", price="8.50", stock=4)
        self.order = place_order(self.buyer, self.seller, [{"product": self.mug}])
        Order.objects.filter(pk=self.order.pk).update(status=Order.Status.CONFIRMED)
        self.url = f"/api/v1/order/{self.order.pk}/delivery"
        self.client.login(username="seller", password=PASSWORD)

    def _patch(self, data):
        return self.client.patch(self.url, data=json.dumps(data), content_type="application/json")

    def test_confirmed_cannot_jump_to_delivered(self):
        resp = self._patch({"status": "delivered"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Cannot transition from confirmed to delivered")

    def test_ship_with_tracking_then_deliver(self):
        resp = self._patch(
            {
                "status": "shipped",
                "shippingInfo": {"carrier": "TCS", "trackingNumber": "TCS-991", "estimatedDelivery": "2026-11-02"},
            }
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        body = resp.json()
        self.assertEqual(body["message"], "Order delivery information updated successfully")
        order = body["data"]["order"]
        self.assertEqual(order["shippingInfo"]["status"], "shipped")
        self.assertEqual(order["shippingInfo"]["trackingNumber"], "TCS-991")
        self.assertEqual(order["timeline"][-1]["note"], "Order shipped via TCS - Tracking: TCS-991")

        resp = self._patch({"status": "delivered"})
        order = resp.json()["data"]["order"]
        self.assertEqual(order["status"], "delivered")
        self.assertIsNotNone(order["shippingInfo"]["actualDelivery"])

    def test_same_status_only_updates_shipping_info(self):
        resp = self._patch({"shippingInfo": {"deliveryNotes": "Leave at gate"}})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Shipping information updated successfully")
        order = Order.objects.get(pk=self.order.pk)
        self.assertEqual(order.status, Order.Status.CONFIRMED)
        self.assertEqual(order.delivery_notes, "Leave at gate")
        self.assertEqual(order.timeline.count(), 1)

    def test_pending_orders_are_not_editable(self):
        Order.objects.filter(pk=self.order.pk).update(status=Order.Status.PENDING)
        resp = self._patch({"status": "processing"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(
            resp.json()["message"], "Only confirmed, processing, and shipped orders can be updated for delivery"
        )

    def test_bad_estimated_delivery(self):
        resp = self._patch({"shippingInfo": {"estimatedDelivery": "soon"}})
        self.assertEqual(resp.json()["message"], "Invalid estimatedDelivery date")
