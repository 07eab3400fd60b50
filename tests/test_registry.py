"""Tests for ModuleRegistry and module class validation."""

import unittest

from chisel.errors import RegistrationError
from chisel.module import ScrapeModule
from chisel.registry import ModuleRegistry, validate_module_class


class GoodModule(ScrapeModule):
    @property
    def targets(self):
        return []

    def handle(self, response):
        return None


class OtherGoodModule(GoodModule):
    pass


class NeedsArgs(GoodModule):
    def __init__(self, api_key):
        super().__init__()
        self.api_key = api_key


class DefaultArgs(GoodModule):
    def __init__(self, page_size=10):
        super().__init__()
        self.page_size = page_size


class MissingHandle(ScrapeModule):
    @property
    def targets(self):
        return []


class NotAModule:
    pass


class TestValidateModuleClass(unittest.TestCase):
    """Verify each rejection reason."""

    def test_valid_class(self):
        self.assertIsNone(validate_module_class(GoodModule))

    def test_defaulted_constructor_arguments_are_fine(self):
        self.assertIsNone(validate_module_class(DefaultArgs))

    def test_not_a_subclass(self):
        self.assertIn("not a subclass", validate_module_class(NotAModule))

    def test_instance_instead_of_class(self):
        self.assertIn("not a subclass", validate_module_class(GoodModule()))

    def test_abstract_class(self):
        self.assertIn("abstract", validate_module_class(MissingHandle))

    def test_constructor_with_required_arguments(self):
        self.assertIn("no arguments", validate_module_class(NeedsArgs))


class TestModuleRegistry(unittest.TestCase):
    """Verify FIFO order and all-or-nothing registration."""

    def test_fifo_order(self):
        registry = ModuleRegistry()
        registry.register([GoodModule, OtherGoodModule, GoodModule])
        self.assertEqual(registry.names(), ["GoodModule", "OtherGoodModule", "GoodModule"])
        self.assertEqual(registry.pop().name, "GoodModule")
        self.assertEqual(registry.pop().name, "OtherGoodModule")
        self.assertEqual(len(registry), 1)

    def test_pop_on_empty_returns_none(self):
        self.assertIsNone(ModuleRegistry().pop())

    def test_invalid_class_leaves_registry_unchanged(self):
        registry = ModuleRegistry()
        registry.register([GoodModule])
        with self.assertRaises(RegistrationError) as ctx:
            registry.register([OtherGoodModule, NeedsArgs])
        self.assertIn("NeedsArgs", str(ctx.exception))
        self.assertEqual(registry.names(), ["GoodModule"])

    def test_descriptor_creates_fresh_instances(self):
        registry = ModuleRegistry()
        descriptor = registry.register([GoodModule])[0]
        first, second = descriptor.create(), descriptor.create()
        self.assertIsInstance(first, GoodModule)
        self.assertIsNot(first, second)


if __name__ == "__main__":
    unittest.main()
