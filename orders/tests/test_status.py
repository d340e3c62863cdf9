# orders/tests/test_status.py
from __future__ import annotations

import json

from django.test import TestCase

from core.tests.factories import PASSWORD, make_product, make_user, place_order
from orders.models import Order
from orders.status import TRANSITIONS, can_transition
from payments.models import RevenueEntry
from payments.services import get_revenue_cents
from products.models import Product


def _patch(client, url, data):
    return client.patch(url, data=json.dumps(data), content_type="application/json")


class TransitionTableTests(TestCase):
    def test_terminal_statuses_have_no_exits(self):
        for status in (Order.Status.DELIVERED, Order.Status.RETURNED, Order.Status.REFUNDED):
            self.assertNotIn(status, TRANSITIONS)
            self.assertFalse(can_transition(status, Order.Status.CANCELLED))

    def test_pending_can_be_confirmed_or_cancelled(self):
        self.assertTrue(can_transition(Order.Status.PENDING, Order.Status.CONFIRMED))
        self.assertTrue(can_transition(Order.Status.PENDING, Order.Status.CANCELLED))
        self.assertFalse(can_transition(Order.Status.PENDING, Order.Status.SHIPPED))


class SellerStatusTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller", buyer=False, seller=True)
        self.buyer = make_user("buyer")
        self.tee = make_product(self.seller, variants=[{"color": "red", "size": "M", "stock": 5}])
        self.order = place_order(self.buyer, self.seller, [{"product": self.tee, "quantity": 2, "color": "red", "size": "M"}])
        self.url = f"/api/v1/order/{self.order.pk}/status"
        self.client.login(username="seller", password=PASSWORD)

    def _variant_stock(self):
        return Product.objects.prefetch_related("variants").get(pk=self.tee.pk).find_variant("red", "M").stock

    def test_confirm_then_cancel_restores_stock_and_nets_revenue(self):
        self.assertEqual(self._variant_stock(), 3)

        resp = _patch(self.client, self.url, {"status": "confirmed"})
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(get_revenue_cents(), self.order.total_cents)

        resp = _patch(self.client, self.url, {"status": "cancelled", "note": "Out of ink"})
        self.assertEqual(resp.status_code, 200, resp.content)
        body = resp.json()["data"]["order"]
        self.assertEqual(body["status"], "cancelled")
        self.assertEqual(body["shippingInfo"]["status"], "cancelled")
        self.assertEqual(body["timeline"][-1]["note"], "Out of ink")

        self.assertEqual(self._variant_stock(), 5)
        tee = Product.objects.get(pk=self.tee.pk)
        self.assertEqual(tee.stock, 5)
        self.assertEqual(tee.sold_count, 0)
        self.assertEqual(get_revenue_cents(), 0)

    def test_illegal_transition(self):
        resp = _patch(self.client, self.url, {"status": "delivered"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Cannot transition from pending to delivered")

    def test_unknown_status(self):
        resp = _patch(self.client, self.url, {"status": "lost"})
        self.assertEqual(resp.json()["message"], "Invalid status: lost")

    def test_other_seller_is_forbidden(self):
        make_user("rival", buyer=False, seller=True)
        self.client.logout()
        self.client.login(username="rival", password=PASSWORD)
        resp = _patch(self.client, self.url, {"status": "confirmed"})
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(Order.objects.get(pk=self.order.pk).status, "pending")

    def test_seller_cannot_mark_unpaid_order_placed(self):
        resp = _patch(self.client, self.url, {"status": "placed"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Payment must be approved before the order can be placed")

        order = Order.objects.get(pk=self.order.pk)
        self.assertEqual(order.status, Order.Status.PENDING)
        self.assertFalse(order.payment_confirmed)

        make_user("boss", buyer=False, admin=True)
        self.client.login(username="boss", password=PASSWORD)
        resp = self.client.patch(f"/api/v1/order/{self.order.pk}/approve-payment")
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["data"]["order"]["status"], "placed")

    def test_refunded_requires_refund_record(self):
        _patch(self.client, self.url, {"status": "cancelled"})
        resp = _patch(self.client, self.url, {"status": "refunded"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Cannot mark order as refunded without a refund record")

    def test_cancelling_pending_order_posts_no_revenue(self):
        _patch(self.client, self.url, {"status": "cancelled"})
        self.assertFalse(RevenueEntry.objects.exists())
        self.assertEqual(self._variant_stock(), 5)


class BuyerCancelTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller", buyer=False, seller=True)
        self.buyer = make_user("buyer")
        self.mug = make_product(self.seller, name="Mug", price="8.50", stock=4)
        self.order = place_order(self.buyer, self.seller, [{"product": self.mug, "quantity": 3}])

    def test_buyer_cancels_pending_order(self):
        self.client.login(username="buyer", password=PASSWORD)
        resp = self.client.patch(f"/api/v1/order/{self.order.pk}/cancel")
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["data"]["order"]["timeline"][-1]["note"], "Order cancelled by buyer")
        self.assertEqual(Product.objects.get(pk=self.mug.pk).stock, 4)

    def test_cannot_cancel_someone_elses_order(self):
        make_user("stranger")
        self.client.login(username="stranger", password=PASSWORD)
        resp = self.client.patch(f"/api/v1/order/{self.order.pk}/cancel")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["message"], "You can only cancel your own orders")

    def test_cannot_cancel_shipped_order(self):
        Order.objects.filter(pk=self.order.pk).update(status=Order.Status.SHIPPED)
        self.client.login(username="buyer", password=PASSWORD)
        resp = self.client.patch(f"/api/v1/order/{self.order.pk}/cancel")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Order cannot be cancelled at this stage")


class PaymentApprovalTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller", buyer=False, seller=True)
        self.buyer = make_user("buyer")
        self.admin = make_user("boss", buyer=False, admin=True)
        self.mug = make_product(self.seller, name="Mug", price="8.50", stock=4)
        self.order = place_order(self.buyer, self.seller, [{"product": self.mug}])
        self.client.login(username="boss", password=PASSWORD)

    def test_pending_payments_then_approve(self):
        resp = self.client.get("/api/v1/order/pending-payments")
        self.assertEqual([o["id"] for o in resp.json()["data"]["orders"]], [str(self.order.pk)])

        resp = self.client.patch(f"/api/v1/order/{self.order.pk}/approve-payment")
        self.assertEqual(resp.status_code, 200, resp.content)
        order = resp.json()["data"]["order"]
        self.assertEqual(order["status"], "placed")
        self.assertTrue(order["paymentConfirmed"])
        self.assertEqual(order["paymentInfo"]["status"], "completed")
        self.assertIsNotNone(order["paymentInfo"]["paymentDate"])

        resp = self.client.patch(f"/api/v1/order/{self.order.pk}/approve-payment")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Payment already confirmed")

        self.assertFalse(self.client.get("/api/v1/order/pending-payments").json()["data"]["orders"])


class ListingTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller", buyer=False, seller=True)
        self.buyer = make_user("buyer")
        self.mug = make_product(self.seller, name="Mug", price="8.50", stock=10)
        self.pending = place_order(self.buyer, self.seller, [{"product": self.mug}])
        self.confirmed = place_order(self.buyer, self.seller, [{"product": self.mug}])
        Order.objects.filter(pk=self.confirmed.pk).update(status=Order.Status.CONFIRMED)

    def test_seller_list_hides_pending_orders(self):
        self.client.login(username="seller", password=PASSWORD)
        ids = [o["id"] for o in self.client.get("/api/v1/order/seller").json()["data"]["orders"]]
        self.assertEqual(ids, [str(self.confirmed.pk)])

    def test_buyer_list_and_status_filter(self):
        self.client.login(username="buyer", password=PASSWORD)
        self.assertEqual(len(self.client.get("/api/v1/order/buyer").json()["data"]["orders"]), 2)
        resp = self.client.get("/api/v1/order/buyer", {"status": "confirmed"})
        self.assertEqual([o["id"] for o in resp.json()["data"]["orders"]], [str(self.confirmed.pk)])

    def test_detail_visible_to_parties_only(self):
        self.client.login(username="seller", password=PASSWORD)
        self.assertEqual(self.client.get(f"/api/v1/order/{self.pending.pk}").status_code, 200)
        make_user("nosy")
        self.client.login(username="nosy", password=PASSWORD)
        self.assertEqual(self.client.get(f"/api/v1/order/{self.pending.pk}").status_code, 403)

    def test_stats(self):
        self.client.login(username="buyer", password=PASSWORD)
        stats = self.client.get("/api/v1/order/stats/dashboard").json()["data"]["stats"]
        self.assertEqual(stats["totalOrders"], 2)
        self.assertEqual(stats["pendingOrders"], 1)
        self.assertEqual(stats["statusCounts"]["confirmed"], 1)
