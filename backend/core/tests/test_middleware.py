import logging

from django.test import TestCase

from apps.audit.context import get_request_context
from core.middleware import RequestIDFilter, get_client_ip


class RequestIDMiddlewareTests(TestCase):
    def test_generates_request_id(self):
        response = self.client.get("/health/live/")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response["X-Request-ID"])

    def test_echoes_incoming_request_id(self):
        response = self.client.get("/health/live/", HTTP_X_REQUEST_ID="abc-123")
        self.assertEqual(response["X-Request-ID"], "abc-123")

    def test_request_context_cleared_after_response(self):
        self.client.get("/health/live/", HTTP_X_REQUEST_ID="abc-123")
        self.assertIsNone(get_request_context())

    def test_client_ip_prefers_forwarded_for(self):
        class FakeRequest:
            META = {"HTTP_X_FORWARDED_FOR": "203.0.113.5, 10.0.0.1", "REMOTE_ADDR": "10.0.0.1"}

        self.assertEqual(get_client_ip(FakeRequest()), "203.0.113.5")

    def test_log_filter_sets_request_id(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", (), None)
        self.assertTrue(RequestIDFilter().filter(record))
        self.assertTrue(hasattr(record, "request_id"))


class HealthTests(TestCase):
    def test_health_check(self):
        response = self.client.get("/api/health/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["database"], "connected")

    def test_ready(self):
        response = self.client.get("/health/ready/")
        self.assertIn(response.status_code, (200, 503))
        self.assertIn("database", response.json()["checks"])
