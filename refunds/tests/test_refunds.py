# refunds/tests/test_refunds.py
from __future__ import annotations

import json

from django.test import TestCase

from core.tests.factories import PASSWORD, make_product, make_user, place_order
from orders.models import Order
from orders.services import update_order_status
from refunds.models import Refund


class RefundFlowTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller", buyer=False, seller=True)
        self.buyer = make_user("buyer")
        self.admin = make_user("boss", buyer=False, admin=True)
        mug = make_product(self.seller, name="Mug", price="8.50", stock=10)
        self.order = place_order(self.buyer, self.seller, [{"product": mug, "quantity": 2}])
        self.client.login(username="boss", password=PASSWORD)

    def _cancel(self):
        update_order_status(order_id=self.order.pk, actor=self.seller, status="confirmed")
        update_order_status(order_id=self.order.pk, actor=self.seller, status="cancelled")

    def _process(self, **overrides):
        data = {
            "orderId": str(self.order.pk),
            "refundAmount": "27.00",
            "refundMethod": "bank_transfer",
            "refundReason": "Seller cancelled",
        }
        data.update(overrides)
        return self.client.post("/api/v1/refunds/", data=json.dumps(data), content_type="application/json")

    def _set_status(self, refund_id, status):
        return self.client.patch(
            f"/api/v1/refunds/{refund_id}/status",
            data=json.dumps({"status": status}),
            content_type="application/json",
        )

    def test_only_cancelled_orders(self):
        resp = self._process()
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Refunds can only be processed for cancelled orders")

    def test_missing_fields(self):
        self._cancel()
        resp = self._process(refundReason="")
        self.assertEqual(resp.json()["message"], "Missing required fields")

    def test_amount_bounds(self):
        self._cancel()
        for amount in ("0", "27.01"):
            resp = self._process(refundAmount=amount)
            self.assertEqual(resp.status_code, 400)
            self.assertEqual(
                resp.json()["message"], "Refund amount must be greater than 0 and not exceed order total"
            )

    def test_process_then_complete_marks_order_refunded(self):
        self._cancel()
        resp = self._process()
        self.assertEqual(resp.status_code, 201, resp.content)
        refund = resp.json()["data"]["refund"]
        self.assertEqual(refund["status"], "processed")
        self.assertEqual(refund["refundAmount"], 27.0)
        self.assertEqual(Order.objects.get(pk=self.order.pk).refund_status, "processed")

        resp = self._process()
        self.assertEqual(resp.json()["message"], "A refund already exists for this order")

        resp = self._set_status(refund["id"], "completed")
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertIsNotNone(resp.json()["data"]["refund"]["completedAt"])

        order = Order.objects.get(pk=self.order.pk)
        self.assertEqual(order.status, Order.Status.REFUNDED)
        self.assertEqual(order.payment_status, Order.PaymentStatus.REFUNDED)
        self.assertEqual(order.refund_status, "completed")

        resp = self._set_status(refund["id"], "failed")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Refund is already completed")

    def test_failed_refund_keeps_order_cancelled(self):
        self._cancel()
        refund_id = self._process().json()["data"]["refund"]["id"]
        self._set_status(refund_id, "failed")
        order = Order.objects.get(pk=self.order.pk)
        self.assertEqual(order.status, Order.Status.CANCELLED)
        self.assertEqual(order.refund_status, "failed")

    def test_refunded_status_allowed_once_refund_exists(self):
        self._cancel()
        self._process()
        update_order_status(order_id=self.order.pk, actor=self.admin, status="refunded")
        self.assertEqual(Order.objects.get(pk=self.order.pk).status, Order.Status.REFUNDED)

    def test_history_and_detail(self):
        self._cancel()
        refund_id = self._process().json()["data"]["refund"]["id"]

        body = self.client.get("/api/v1/refunds/history").json()["data"]
        self.assertEqual([r["id"] for r in body["refunds"]], [refund_id])
        self.assertEqual(body["pagination"]["totalItems"], 1)

        resp = self.client.get(f"/api/v1/refunds/{refund_id}")
        self.assertEqual(resp.json()["data"]["refund"]["order"]["orderNumber"], self.order.order_number)

    def test_non_admin_is_forbidden(self):
        self.client.logout()
        self.client.login(username="buyer", password=PASSWORD)
        self.assertEqual(self._process().status_code, 403)
        self.assertFalse(Refund.objects.exists())
