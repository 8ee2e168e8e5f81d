import unittest

from apilens.infer import infer_type_signature
from apilens.models import ImportanceScore, SelectionContext, SemanticMetadata
from apilens.selection import (
    check_chips_pattern,
    check_image_grid_pattern,
    check_review_pattern,
    default_component_type,
    select_card_or_table,
    select_component,
    select_object_component,
    select_primitive_array_component,
)


def _meta(category: str) -> SemanticMetadata:
    return SemanticMetadata(detected_category=category, confidence=0.9, level="high", applied_at="smart-default")


def _tier(tier: str) -> ImportanceScore:
    return ImportanceScore(tier=tier, score={"primary": 0.9, "secondary": 0.6, "tertiary": 0.2}[tier])


def _context(semantics: dict[str, str] | None = None, tiers: dict[str, str] | None = None) -> SelectionContext:
    return SelectionContext(
        semantics={path: _meta(category) for path, category in (semantics or {}).items()},
        importance={path: _tier(tier) for path, tier in (tiers or {}).items()},
    )


class ArraySelectionTests(unittest.TestCase):
    def test_review_pattern_wins_over_card_heuristic(self) -> None:
        schema = infer_type_signature([{"rating": 5, "feedback": "Great"}])
        context = _context({"$[].rating": "rating", "$[].feedback": "reviews"}, {"$[].feedback": "secondary"})
        selection = select_component(schema, context)
        self.assertEqual(selection.component_type, "card-list")
        self.assertEqual(selection.confidence, 0.85)
        self.assertEqual(selection.reason, "review-pattern-detected")

    def test_review_text_by_name_requires_visible_tier(self) -> None:
        schema = infer_type_signature([{"rating": 5, "comment": "Great"}])
        hidden = _context({"$[].rating": "rating"}, {"$[].comment": "tertiary"})
        visible = _context({"$[].rating": "rating"}, {"$[].comment": "secondary"})
        self.assertIsNone(check_review_pattern(schema, hidden))
        self.assertEqual(check_review_pattern(schema, visible).reason, "review-pattern-detected")

    def test_semantic_review_text_also_requires_visible_tier(self) -> None:
        schema = infer_type_signature([{"rating": 5, "summary": "Solid build, quiet fan, ships with a spare cable."}])
        semantics = {"$[].rating": "rating", "$[].summary": "description"}
        self.assertIsNone(check_review_pattern(schema, _context(semantics, {"$[].summary": "tertiary"})))
        self.assertIsNone(check_review_pattern(schema, _context(semantics)))
        selection = check_review_pattern(schema, _context(semantics, {"$[].summary": "primary"}))
        self.assertEqual(selection.reason, "review-pattern-detected")
        fallback = select_component(schema, _context(semantics, {"$[].summary": "tertiary"}))
        self.assertEqual(fallback.reason, "rich-content-low-field-count")

    def test_image_gallery(self) -> None:
        schema = infer_type_signature([{"photo": "a.jpg", "caption": "x"}])
        selection = select_component(schema, _context({"$[].photo": "image"}))
        self.assertEqual((selection.component_type, selection.confidence), ("gallery", 0.9))

    def test_images_with_many_fields(self) -> None:
        schema = infer_type_signature([{"photo": "a.jpg", "a": 1, "b": 2, "c": 3, "d": 4}])
        selection = select_component(schema, _context({"$[].photo": "thumbnail"}))
        self.assertEqual(selection.component_type, "card-list")
        self.assertEqual(selection.reason, "images-with-other-fields")

    def test_timeline_needs_narrative_field(self) -> None:
        schema = infer_type_signature([{"when": "2024-01-01", "headline": "Launch", "x": 1}])
        timeline = select_component(schema, _context({"$[].when": "date", "$[].headline": "title"}))
        self.assertEqual((timeline.component_type, timeline.reason), ("timeline", "event-timeline-pattern"))
        dates_only = select_component(schema, _context({"$[].when": "timestamp"}))
        self.assertNotEqual(dates_only.component_type, "timeline")

    def test_rich_content_prefers_cards(self) -> None:
        schema = infer_type_signature([{"summary": "long text", "n": 1}])
        selection = select_component(schema, _context({"$[].summary": "description"}))
        self.assertEqual(selection.reason, "rich-content-low-field-count")
        self.assertEqual(selection.confidence, 0.75)

    def test_many_visible_fields_prefer_table(self) -> None:
        row = {f"field{index}": index for index in range(10)}
        schema = infer_type_signature([row])
        context = _context(tiers={f"$[].field{index}": "primary" for index in range(10)})
        selection = select_component(schema, context)
        self.assertEqual((selection.component_type, selection.reason), ("table", "high-field-count"))

    def test_ambiguous_shapes_fall_back(self) -> None:
        schema = infer_type_signature([{"a": 1, "b": 2}])
        self.assertEqual(select_card_or_table(schema, _context()).reason, "ambiguous-default-table")
        selection = select_component(schema, _context())
        self.assertEqual(
            (selection.component_type, selection.confidence, selection.reason),
            ("table", 0.0, "fallback-to-default"),
        )

    def test_nested_base_path(self) -> None:
        schema = infer_type_signature([{"rating": 4, "text": "ok"}])
        context = _context(
            {"$.reviews[].rating": "rating", "$.reviews[].text": "description"}, {"$.reviews[].text": "secondary"}
        )
        self.assertEqual(select_component(schema, context, "$.reviews").component_type, "card-list")

    def test_non_array_gets_type_default(self) -> None:
        selection = select_component(infer_type_signature({"a": 1}), _context())
        self.assertEqual((selection.component_type, selection.reason), ("detail", "not-applicable"))


class ObjectSelectionTests(unittest.TestCase):
    def test_profile(self) -> None:
        schema = infer_type_signature({"full_name": "Ana", "email": "a@b.io", "phone": "+1 555 0100"})
        context = _context({"$.full_name": "name", "$.email": "email", "$.phone": "phone"})
        selection = select_object_component(schema, context)
        self.assertEqual((selection.component_type, selection.confidence), ("hero", 0.85))

    def test_complex_nested_object(self) -> None:
        schema = infer_type_signature({"a": {"x": 1}, "b": [1], "c": [{"y": 2}], "d": 4})
        selection = select_object_component(schema, _context())
        self.assertEqual((selection.component_type, selection.reason), ("tabs", "complex-nested-structure"))

    def test_split_content_and_metadata(self) -> None:
        schema = infer_type_signature(
            {"body": "text", "id": 1, "created_at": "2024-01-01", "author_id": 3, "_rev": "a", "views": 9}
        )
        context = _context({"$.body": "description"}, {"$.body": "primary"})
        selection = select_object_component(schema, context)
        self.assertEqual((selection.component_type, selection.confidence), ("split", 0.75))

    def test_plain_object_defaults_to_detail(self) -> None:
        selection = select_object_component(infer_type_signature({"a": 1}), _context())
        self.assertEqual((selection.component_type, selection.confidence), ("detail", 0.0))


class PrimitiveArraySelectionTests(unittest.TestCase):
    def test_image_grid(self) -> None:
        data = ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.PNG"]
        schema = infer_type_signature(data)
        self.assertEqual(check_image_grid_pattern(data, schema).component_type, "grid")
        self.assertIsNone(check_image_grid_pattern(data + ["https://example.com/page"], schema))

    def test_semantic_chips(self) -> None:
        data = ["a" * 40] * 15
        schema = infer_type_signature(data)
        selection = select_primitive_array_component(schema, data, _context({"$.tags": "tags"}))
        self.assertEqual((selection.component_type, selection.confidence), ("chips", 0.9))

    def test_short_values_become_chips(self) -> None:
        data = ["red", "green", "blue"]
        selection = select_primitive_array_component(infer_type_signature(data), data, _context())
        self.assertEqual((selection.component_type, selection.reason), ("chips", "short-enum-like-values"))

    def test_chips_boundary(self) -> None:
        data = [f"t{index}" for index in range(11)]
        schema = infer_type_signature(data)
        self.assertIsNone(check_chips_pattern(data, schema, _context()))
        selection = select_primitive_array_component(schema, data, _context())
        self.assertEqual(selection.component_type, "primitive-list")

    def test_long_values_are_not_chips(self) -> None:
        data = ["x" * 35, "short"]
        self.assertIsNone(check_chips_pattern(data, infer_type_signature(data), _context()))

    def test_numbers_and_empty_arrays(self) -> None:
        numbers = [1, 2, 3]
        selection = select_primitive_array_component(infer_type_signature(numbers), numbers, _context())
        self.assertEqual(selection.reason, "fallback-to-default")
        empty = select_primitive_array_component(infer_type_signature(["a"]), [], _context())
        self.assertEqual(empty.reason, "no-data")

    def test_default_component_types(self) -> None:
        self.assertEqual(default_component_type(infer_type_signature([{"a": 1}])), "table")
        self.assertEqual(default_component_type(infer_type_signature([1])), "primitive-list")
        self.assertEqual(default_component_type(infer_type_signature({"a": 1})), "detail")
        self.assertEqual(default_component_type(infer_type_signature("x")), "primitive")
        self.assertEqual(default_component_type(infer_type_signature([[1]])), "json")


if __name__ == "__main__":
    unittest.main()
