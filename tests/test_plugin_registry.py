import tempfile
import unittest
from pathlib import Path

import yaml

from apilens.plugin_registry import (
    FieldContext,
    PluginCategory,
    PluginDefinitionError,
    PluginRegistry,
)


def looks_like_isbn(value: object, context: FieldContext) -> bool:
    return isinstance(value, str) and value.replace("-", "").isdigit() and len(value.replace("-", "")) == 13


class PluginRegistryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tempdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tempdir.cleanup)
        self.path = Path(self.tempdir.name) / "plugins.yaml"
        self.registry = PluginRegistry()

    def _write(self, categories: list[dict[str, object]]) -> None:
        self.path.write_text(yaml.safe_dump({"categories": categories}))

    def test_load_definitions(self) -> None:
        self._write(
            [
                {
                    "id": "sku_internal",
                    "name": "Internal SKU",
                    "name_patterns": ["^sku_int"],
                    "value_regex": "^INT-\\d+$",
                },
                {
                    "id": "isbn",
                    "name": "ISBN",
                    "name_keywords": ["isbn", "book_number"],
                    "entrypoint": f"{__name__}.looks_like_isbn",
                },
                {"id": "tracking", "name": "Tracking", "name_keywords": ["tracking"]},
            ]
        )
        loaded = self.registry.load_definitions(self.path)
        self.assertEqual([category.id for category in loaded], ["sku_internal", "isbn", "tracking"])
        by_id = {category.id: category for category in self.registry.list_categories()}
        context = FieldContext(field_name="x", field_path="$.x")
        self.assertTrue(by_id["sku_internal"].validate("INT-42", context))
        self.assertFalse(by_id["sku_internal"].validate(42, context))
        self.assertTrue(by_id["isbn"].validate("978-3-16-148410-0", context))
        self.assertEqual(by_id["isbn"].name_keywords, ("isbn", "book_number"))
        self.assertTrue(by_id["tracking"].validate("anything", context))
        self.assertFalse(by_id["tracking"].validate(None, context))

    def test_register_and_unregister(self) -> None:
        category = PluginCategory(
            id="x", name="X", description="", name_patterns=(), validate=lambda value, context: True
        )
        self.registry.register_category(category)
        with self.assertLogs("apilens.plugin_registry", level="WARNING"):
            self.registry.register_category(category)
        self.assertEqual(len(self.registry.list_categories()), 1)
        self.registry.unregister_category("x")
        self.registry.unregister_category("x")
        self.assertEqual(self.registry.list_categories(), [])

    def test_load_entrypoint(self) -> None:
        self.assertIs(self.registry.load_entrypoint(f"{__name__}.looks_like_isbn"), looks_like_isbn)

    def test_invalid_definitions(self) -> None:
        invalid = [
            [{"id": "a", "name": "A"}],
            [{"id": "a", "name": "A", "name_keywords": ["a"], "value_regex": "x", "entrypoint": "m.f"}],
            [{"id": "a", "name": "A", "name_keywords": ["a"], "colour": "red"}],
            [{"id": "a", "name": "A", "name_patterns": ["("]}],
            [{"id": "a", "name": "A", "name_keywords": ["a"], "entrypoint": "apilens.missing_module.check"}],
            [{"id": "a", "name": "A", "name_keywords": ["a"], "entrypoint": "apilens.patterns.NAME_MATCH_WEIGHT"}],
        ]
        for categories in invalid:
            with self.subTest(categories=categories):
                self._write(categories)
                with self.assertRaises(PluginDefinitionError) as ctx:
                    self.registry.load_definitions(self.path)
                self.assertEqual(ctx.exception.path, self.path)
        self.assertEqual(self.registry.list_categories(), [])

    def test_unreadable_file(self) -> None:
        self.path.write_text("categories: [unclosed")
        with self.assertRaises(PluginDefinitionError):
            self.registry.load_definitions(self.path)
        with self.assertRaises(ValueError):
            self.registry.load_definitions(Path(self.tempdir.name) / "missing.yaml")


if __name__ == "__main__":
    unittest.main()
