"""Tests for ScrapeModule and ModuleSettings."""

import unittest

from chisel.module import ModuleSettings, ScrapeModule


class TestModuleSettings(unittest.TestCase):
    """Verify settings defaults and validation."""

    def test_defaults(self):
        settings = ModuleSettings()
        self.assertEqual(settings.base_url, "")
        self.assertEqual(settings.headers, {})
        self.assertEqual(settings.min_backoff, 2.0)
        self.assertTrue(settings.exponential_backoff)
        self.assertIsNone(settings.retry_backoff_provider)
        self.assertTrue(settings.is_acceptable_status_code(500))

    def test_negative_backoff_rejected(self):
        with self.assertRaises(ValueError):
            ModuleSettings(min_backoff=-0.5)

    def test_validate_catches_later_mutation(self):
        settings = ModuleSettings()
        settings.min_backoff = -1
        with self.assertRaises(ValueError):
            settings.validate()

    def test_header_lists_accepts_strings_and_lists(self):
        settings = ModuleSettings(headers={"Accept": "text/html", "X-Tag": ["a", "b"]})
        self.assertEqual(settings.header_lists(), {"Accept": ["text/html"], "X-Tag": ["a", "b"]})

    def test_url_for_joins_with_slash(self):
        settings = ModuleSettings(base_url="https://example.com/api")
        self.assertEqual(settings.url_for("items/1"), "https://example.com/api/items/1")


class TestScrapeModule(unittest.TestCase):
    """Verify the module base class contract."""

    def test_cannot_instantiate_without_handle_and_targets(self):
        with self.assertRaises(TypeError):
            ScrapeModule()

    def test_default_hooks_are_no_ops(self):
        class Minimal(ScrapeModule):
            @property
            def targets(self):
                return []

            def handle(self, response):
                return None

        module = Minimal()
        self.assertIsInstance(module.settings, ModuleSettings)
        self.assertIsNone(module.init(object()))
        self.assertIsNone(module.after_success())
        self.assertIsNone(module.after_failure(RuntimeError("x")))
        self.assertEqual(module.name, "Minimal")


if __name__ == "__main__":
    unittest.main()
