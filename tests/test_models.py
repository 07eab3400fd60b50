"""Tests for data model classes."""

import unittest

from chisel.models import FetchRecord, ModuleResult, Request


class TestRequest(unittest.TestCase):
    """Verify Request defaults and header flattening."""

    def test_defaults(self):
        request = Request(url="https://example.com/a")
        self.assertEqual(request.method, "GET")
        self.assertEqual(request.headers, {})

    def test_flat_headers_joins_repeated_values(self):
        request = Request(url="u", headers={"Accept": ["text/html", "application/json"], "X-One": ["1"]})
        self.assertEqual(request.flat_headers(), {"Accept": "text/html, application/json", "X-One": "1"})

    def test_request_is_immutable(self):
        request = Request(url="u")
        with self.assertRaises(AttributeError):
            request.url = "v"


class TestFetchRecord(unittest.TestCase):
    """Verify the success flag derives from error_type."""

    def test_success_without_error(self):
        record = FetchRecord(module="M", url="u", attempt=1, status_code=200, latency_ms=5, error_type=None)
        self.assertTrue(record.success)

    def test_failure_with_error(self):
        record = FetchRecord(module="M", url="u", attempt=2, status_code=None, latency_ms=5, error_type="TransportError")
        self.assertFalse(record.success)


class TestModuleResult(unittest.TestCase):
    """Verify ModuleResult creation."""

    def test_failed_result_carries_error(self):
        result = ModuleResult(
            module="M",
            success=False,
            handled=2,
            attempts=5,
            duration_ms=120,
            error_type="TransportTimeout",
            error="http://x: timed out",
        )
        self.assertFalse(result.success)
        self.assertEqual(result.error_type, "TransportTimeout")

    def test_successful_result_defaults(self):
        result = ModuleResult(module="M", success=True, handled=3, attempts=3, duration_ms=10)
        self.assertIsNone(result.error_type)
        self.assertIsNone(result.error)


if __name__ == "__main__":
    unittest.main()
