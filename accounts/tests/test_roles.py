# accounts/tests/test_roles.py
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase

from accounts.models import Profile
from accounts.permissions import is_admin_user, is_buyer_user, is_seller_user, role_of
from core.tests.factories import PASSWORD, make_user


class ProfileSignalTests(TestCase):
    def test_profile_created_with_full_name(self):
        user = get_user_model().objects.create_user(
            username="ada", password="x", first_name="Ada", last_name="Lovelace"
        )
        profile = Profile.objects.get(user=user)
        self.assertEqual(profile.full_name, "Ada Lovelace")
        self.assertTrue(profile.is_buyer)
        self.assertFalse(profile.is_seller)

    def test_profile_recreated_on_save_if_missing(self):
        user = make_user("bob")
        Profile.objects.filter(user=user).delete()
        user.save()
        self.assertTrue(Profile.objects.filter(user=user).exists())


class RoleTests(TestCase):
    def test_roles(self):
        buyer = make_user("buyer")
        seller = make_user("seller", buyer=False, seller=True)
        admin = make_user("admin", buyer=False, admin=True)
        staff = make_user("staff", buyer=False, is_staff=True)

        self.assertTrue(is_buyer_user(buyer))
        self.assertFalse(is_seller_user(buyer))
        self.assertTrue(is_seller_user(seller))
        self.assertTrue(is_admin_user(admin))
        self.assertTrue(is_admin_user(staff))

        self.assertEqual(role_of(buyer), "buyer")
        self.assertEqual(role_of(seller), "seller")
        self.assertEqual(role_of(admin), "admin")


class RoleDecoratorTests(TestCase):
    def test_unauthenticated_is_401(self):
        resp = self.client.get("/api/v1/order/buyer")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["message"], "Authentication required")

    def test_wrong_role_is_403(self):
        make_user("seller", buyer=False, seller=True)
        self.client.login(username="seller", password=PASSWORD)
        resp = self.client.get("/api/v1/order/buyer")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["message"], "Access denied. Buyer role required.")

    def test_admin_endpoint_rejects_buyer(self):
        make_user("buyer")
        self.client.login(username="buyer", password=PASSWORD)
        resp = self.client.get("/api/v1/order/pending-payments")
        self.assertEqual(resp.status_code, 403)
