import json
import tempfile
import unittest
from pathlib import Path
from typing import Sequence

from apilens.analysis import ResponseAnalyzer, analyze_response, find_analyzable_paths
from apilens.detector import SemanticDetector
from apilens.importance import FieldInfo
from apilens.infer import infer_schema
from apilens.io import detect_format, load_document
from apilens.models import ArrayType, ImportanceScore, ObjectType, OpenApiHints, PrimitiveType, SelectionContext
from apilens.report import render_report
from apilens.selection import select_component


def _everything_secondary(fields: Sequence[FieldInfo]) -> dict[str, ImportanceScore]:
    return {info.path: ImportanceScore(tier="secondary", score=0.6) for info in fields}


REVIEWS = [{"rating": 5, "comment": "Great!"}, {"rating": 3, "comment": "Okay"}]

PRODUCTS = {
    "store": "Corner Shop",
    "products": [
        {
            "sku": "AB-1234",
            "title": "Travel Mug",
            "price": 12.5,
            "image": "https://cdn.example.com/mug.jpg",
            "tags": ["kitchen", "travel"],
        },
        {
            "sku": "AB-5678",
            "title": "Tea Pot",
            "price": 30,
            "image": "https://cdn.example.com/pot.png",
            "tags": ["kitchen"],
        },
    ],
    "photos": ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"],
    "reviews": [
        {"rating": 4, "comment": "Sturdy, keeps coffee hot for hours and survived a drop onto concrete."},
        {"rating": 2, "comment": "Lid leaks."},
    ],
}


class ReviewScenarioTests(unittest.TestCase):
    def test_review_list_end_to_end(self) -> None:
        schema = infer_schema(REVIEWS, "https://api.example.com/reviews")
        self.assertEqual(
            schema.root_type,
            ArrayType(ObjectType(schema.root_type.items.fields)),
        )
        fields = schema.root_type.items.fields
        self.assertEqual(fields["rating"].type, PrimitiveType("number"))
        self.assertEqual(fields["comment"].type, PrimitiveType("string"))

        detector = SemanticDetector()
        rating = detector.detect_semantics("$[].rating", "rating", "number", [5, 3])
        self.assertEqual(detector.get_best_match(rating).category, "rating")
        comment = detector.detect_semantics("$[].comment", "comment", "string", ["Great!", "Okay"])
        self.assertEqual(comment[0].category, "description")

        context = SelectionContext(
            semantics={
                "$[].rating": detector.build_metadata(rating),
                "$[].comment": detector.build_metadata(comment),
            },
            importance=_everything_secondary(
                [FieldInfo(path="$[].rating", name="rating"), FieldInfo(path="$[].comment", name="comment")]
            ),
        )
        selection = select_component(schema.root_type, context)
        self.assertEqual(selection.component_type, "card-list")
        self.assertEqual(selection.confidence, 0.85)
        self.assertEqual(selection.reason, "review-pattern-detected")

    def test_analyze_response_with_injected_importance(self) -> None:
        result = analyze_response(REVIEWS, "https://api.example.com/reviews", importance=_everything_secondary)
        root = result.paths["$"]
        self.assertEqual(root.kind, "array-of-objects")
        self.assertEqual(root.selection.reason, "review-pattern-detected")
        self.assertEqual(result.semantics["$[].rating"].detected_category, "rating")

    def test_default_importance_hides_short_review_text(self) -> None:
        root = analyze_response(REVIEWS, "https://api.example.com/reviews").paths["$"]
        self.assertEqual(root.importance["$[].comment"].tier, "tertiary")
        self.assertEqual(
            (root.selection.component_type, root.selection.reason), ("table", "fallback-to-default")
        )


class AnalyzeResponseTests(unittest.TestCase):
    def setUp(self) -> None:
        self.result = analyze_response(PRODUCTS, "https://api.example.com/store")

    def test_analyzable_paths(self) -> None:
        schema = infer_schema(PRODUCTS, "u")
        paths = [(path, kind) for path, _, _, kind in find_analyzable_paths(schema.root_type, PRODUCTS)]
        self.assertEqual(
            paths,
            [
                ("$", "object"),
                ("$.products", "array-of-objects"),
                ("$.products[].tags", "primitive-array"),
                ("$.photos", "primitive-array"),
                ("$.reviews", "array-of-objects"),
            ],
        )

    def test_field_semantics(self) -> None:
        semantics = self.result.semantics
        self.assertEqual(semantics["$.products[].price"].detected_category, "price")
        self.assertEqual(semantics["$.products[].image"].detected_category, "image")
        self.assertEqual(semantics["$.products[].tags"].detected_category, "tags")
        self.assertEqual(semantics["$.reviews"].detected_category, "reviews")

    def test_component_selection(self) -> None:
        paths = self.result.paths
        self.assertEqual(paths["$.products"].selection.component_type, "card-list")
        self.assertEqual(paths["$.products[].tags"].selection.component_type, "chips")
        self.assertEqual(paths["$.photos"].selection.component_type, "grid")
        self.assertEqual(paths["$.reviews"].selection.component_type, "card-list")
        self.assertEqual(paths["$"].selection.component_type, "tabs")

    def test_importance_is_attached(self) -> None:
        importance = self.result.paths["$.products"].importance
        self.assertEqual(importance["$.products[].title"].tier, "primary")
        self.assertEqual(set(importance), {f"$.products[].{name}" for name in PRODUCTS["products"][0]})

    def test_result_serializes_to_json(self) -> None:
        payload = json.loads(json.dumps(self.result.to_dict()))
        self.assertEqual(payload["schema"]["url"], "https://api.example.com/store")
        self.assertIn("$.products", payload["paths"])
        self.assertEqual(payload["paths"]["$.photos"]["selection"]["reason"], "image-url-grid")

    def test_openapi_hints_reach_detection(self) -> None:
        seen: dict[str, object] = {}

        class RecordingDetector(SemanticDetector):
            def detect_semantics(self, field_path, field_name, field_type, sample_values, openapi_hints=None):
                seen[field_path] = openapi_hints
                return super().detect_semantics(field_path, field_name, field_type, sample_values, openapi_hints)

        hint = OpenApiHints(format="email")
        analyzer = ResponseAnalyzer(detector=RecordingDetector(), hints={"$[].contact": hint})
        result = analyzer.analyze([{"contact": "a@example.com", "mail": "b@example.com"}], "u")
        self.assertIs(seen["$[].contact"], hint)
        self.assertIsNone(seen["$[].mail"])
        self.assertEqual(result.semantics["$[].mail"].detected_category, "email")

    def test_scalar_roots_have_no_paths(self) -> None:
        self.assertEqual(analyze_response(42, "u").paths, {})


class DocumentLoadingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tempdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tempdir.cleanup)
        self.root = Path(self.tempdir.name)

    def test_json_and_jsonl(self) -> None:
        json_path = self.root / "data.json"
        json_path.write_text(json.dumps(REVIEWS))
        jsonl_path = self.root / "data.jsonl"
        jsonl_path.write_text("\n".join(json.dumps(item) for item in REVIEWS) + "\n\n")
        self.assertEqual(load_document(json_path), REVIEWS)
        self.assertEqual(load_document(jsonl_path), REVIEWS)

    def test_format_sniffing(self) -> None:
        path = self.root / "payload"
        path.write_text('{"a": 1}\n{"a": 2}\n')
        self.assertEqual(detect_format(path), "jsonl")
        path.write_text('[{"a": 1},\n {"a": 2}]')
        self.assertEqual(detect_format(path), "json")

    def test_invalid_input(self) -> None:
        path = self.root / "bad.jsonl"
        path.write_text('{"a": 1}\n{oops}\n')
        with self.assertRaises(ValueError):
            load_document(path)
        with self.assertRaises(FileNotFoundError):
            load_document(self.root / "missing.json")
        with self.assertRaises(ValueError):
            load_document(path, format="csv")


class ReportTests(unittest.TestCase):
    def test_render_report(self) -> None:
        analysis = analyze_response(PRODUCTS, "https://api.example.com/store").to_dict()
        html = render_report(analysis)
        self.assertIn("<html", html)
        self.assertIn("$.products", html)
        self.assertIn("card-list", html)
        self.assertIn("https://api.example.com/store", html)

    def test_render_empty_report(self) -> None:
        html = render_report({})
        self.assertIn("No analyzable nodes", html)


if __name__ == "__main__":
    unittest.main()
