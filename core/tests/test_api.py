# core/tests/test_api.py
from __future__ import annotations

import json

from django.core.exceptions import PermissionDenied, ValidationError
from django.http import Http404
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings

from core.api import BadRequest, NotFound, api_view, json_ok, paginate, parse_json_field, read_payload
from core.logging_context import clear_context, get_context, set_context


def _body(resp) -> dict:
    return json.loads(resp.content.decode("utf-8"))


class ApiViewTests(SimpleTestCase):
    def setUp(self):
        self.rf = RequestFactory()

    def _call(self, exc, method="get"):
        @api_view(["GET"])
        def view(request):
            raise exc

        return view(getattr(self.rf, method)("/x"))

    def test_ok_envelope(self):
        @api_view(["GET"])
        def view(request):
            return json_ok({"a": 1}, message="done")

        resp = view(self.rf.get("/x"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(_body(resp), {"success": True, "message": "done", "data": {"a": 1}})

    def test_api_errors_map_to_status(self):
        resp = self._call(BadRequest("Nope", errors=["a", "b"], extra={"received": {"x": 1}}))
        self.assertEqual(resp.status_code, 400)
        body = _body(resp)
        self.assertFalse(body["success"])
        self.assertEqual(body["message"], "Nope")
        self.assertEqual(body["errors"], ["a", "b"])
        self.assertEqual(body["received"], {"x": 1})

        self.assertEqual(self._call(NotFound("Order not found")).status_code, 404)

    def test_django_exceptions_are_mapped(self):
        self.assertEqual(self._call(ValidationError("bad")).status_code, 400)
        self.assertEqual(self._call(PermissionDenied()).status_code, 403)
        self.assertEqual(self._call(Http404()).status_code, 404)

    @override_settings(DEBUG=False)
    def test_unexpected_error_hides_detail(self):
        resp = self._call(RuntimeError("boom"))
        self.assertEqual(resp.status_code, 500)
        self.assertNotIn("error", _body(resp))

    @override_settings(DEBUG=True)
    def test_unexpected_error_shows_detail_in_debug(self):
        resp = self._call(RuntimeError("boom"))
        self.assertEqual(_body(resp)["error"], "boom")

    def test_wrong_method_is_405(self):
        resp = self._call(BadRequest(), method="post")
        self.assertEqual(resp.status_code, 405)
        self.assertEqual(resp["Allow"], "GET")


class PayloadTests(SimpleTestCase):
    def setUp(self):
        self.rf = RequestFactory()

    def test_json_body(self):
        req = self.rf.post("/x", data=json.dumps({"a": 1}), content_type="application/json")
        self.assertEqual(read_payload(req), {"a": 1})

    def test_invalid_json_is_400(self):
        req = self.rf.post("/x", data="{nope", content_type="application/json")
        with self.assertRaises(BadRequest):
            read_payload(req)

    def test_form_patch_body(self):
        req = self.rf.patch("/x", data="status=shipped&note=hi", content_type="application/x-www-form-urlencoded")
        self.assertEqual(read_payload(req), {"status": "shipped", "note": "hi"})

    def test_parse_json_field(self):
        self.assertEqual(parse_json_field('{"a": 1}', field="address data"), {"a": 1})
        self.assertEqual(parse_json_field({"a": 1}, field="address data"), {"a": 1})
        self.assertIsNone(parse_json_field("  ", field="address data"))
        with self.assertRaisesMessage(BadRequest, "Invalid address data format"):
            parse_json_field("{bad", field="address data")


class PaginateTests(TestCase):
    def test_pages(self):
        from django.contrib.auth import get_user_model

        User = get_user_model()
        for i in range(5):
            User.objects.create_user(username=f"u{i}", password="x")

        req = RequestFactory().get("/x", {"page": 2, "limit": 2})
        items, meta = paginate(User.objects.order_by("username"), req)
        self.assertEqual([u.username for u in items], ["u2", "u3"])
        self.assertEqual(meta["totalItems"], 5)
        self.assertEqual(meta["totalPages"], 3)
        self.assertTrue(meta["hasNext"])
        self.assertTrue(meta["hasPrev"])

    def test_bad_params_fall_back(self):
        req = RequestFactory().get("/x", {"page": "abc", "limit": "-3"})
        from django.contrib.auth import get_user_model

        _, meta = paginate(get_user_model().objects.all(), req)
        self.assertEqual(meta["currentPage"], 1)
        self.assertEqual(meta["itemsPerPage"], 10)


class LoggingContextTests(SimpleTestCase):
    def test_set_and_clear(self):
        set_context(request_id="abc", user_id="7", role="buyer", path="/api")
        ctx = get_context()
        self.assertEqual(ctx.request_id, "abc")
        self.assertEqual(ctx.role, "buyer")
        clear_context()
        self.assertIsNone(get_context())


class MiddlewareTests(TestCase):
    def test_request_id_is_echoed(self):
        resp = self.client.get("/health/", HTTP_X_REQUEST_ID="req-123")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["X-Request-ID"], "req-123")
        self.assertEqual(_body(resp)["data"]["requestId"], "req-123")

    def test_request_id_is_generated(self):
        resp = self.client.get("/health/")
        self.assertTrue(resp["X-Request-ID"])

    def test_unknown_route_is_json_404(self):
        resp = self.client.get("/api/v1/does-not-exist")
        self.assertEqual(resp.status_code, 404)
