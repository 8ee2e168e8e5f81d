import re
import unittest

from apilens.models import OpenApiHints
from apilens.patterns import (
    DEFAULT_REGISTRY,
    PRICE,
    RATING,
    REVIEWS,
    NamePattern,
    SemanticPattern,
    Thresholds,
    TypeConstraint,
    ValueValidator,
)
from apilens.scorer import ConfidenceScorer, determine_level
from apilens.strategies import EmbeddingStrategy, RegexStrategy, create_strategy


def _explode(value: object) -> bool:
    raise RuntimeError("validator failure")


class DetermineLevelTests(unittest.TestCase):
    def test_levels(self) -> None:
        thresholds = Thresholds()
        self.assertEqual(determine_level(0.75, thresholds), "high")
        self.assertEqual(determine_level(0.6, thresholds), "medium")
        self.assertEqual(determine_level(0.1, thresholds), "low")
        self.assertEqual(determine_level(0.0, thresholds), "none")


class ConfidenceScorerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scorer = ConfidenceScorer(EmbeddingStrategy())

    def test_price_field_scores_high(self) -> None:
        result = self.scorer.score("price", "number", [19.99], None, PRICE)
        self.assertGreaterEqual(result.confidence, 0.9)
        self.assertEqual(result.level, "high")
        self.assertEqual(result.category, "price")
        names = [signal.name for signal in result.signals]
        self.assertEqual(names, ["name_match:embedding", "type_constraint", "value_validator:is_positive_number"])

    def test_unrelated_field_scores_zero(self) -> None:
        result = self.scorer.score("data", "boolean", ["not a number"], None, PRICE)
        self.assertEqual(result.confidence, 0.0)
        self.assertEqual(result.level, "none")
        self.assertFalse(any(signal.matched for signal in result.signals))

    def test_format_hints_only_count_when_declared(self) -> None:
        without = self.scorer.score("price", "number", [10], None, PRICE)
        mismatched = self.scorer.score("price", "number", [10], OpenApiHints(format="int32"), PRICE)
        matched = self.scorer.score("price", "number", [10], OpenApiHints(format="currency"), PRICE)
        self.assertAlmostEqual(without.confidence, 1.0)
        self.assertLess(mismatched.confidence, 1.0)
        self.assertAlmostEqual(matched.confidence, (0.85 + 0.15) / 1.1)
        self.assertIn("format_hint:currency", [signal.name for signal in matched.signals])
        description_only = self.scorer.score(
            "price", "number", [10], OpenApiHints(description="Unit price"), PRICE
        )
        self.assertAlmostEqual(description_only.confidence, 1.0)

    def test_raising_validator_counts_as_no_match(self) -> None:
        pattern = SemanticPattern(
            category="fragile",
            name_patterns=(NamePattern(re.compile("fragile"), 0.4),),
            type_constraint=TypeConstraint(frozenset({"string"}), 0.2),
            value_validators=(ValueValidator("explode", _explode, 0.3),),
        )
        scorer = ConfidenceScorer(RegexStrategy())
        with self.assertLogs("apilens.scorer", level="DEBUG"):
            result = scorer.score("fragile", "string", ["a", "b"], None, pattern)
        self.assertAlmostEqual(result.confidence, 0.6 / 0.9)
        self.assertEqual(result.level, "medium")

    def test_validator_matches_any_sample(self) -> None:
        result = self.scorer.score("rating", "number", [42, 4.5], None, RATING)
        self.assertEqual(result.level, "high")
        self.assertTrue(result.signals[2].matched)

    def test_regex_strategy(self) -> None:
        scorer = ConfidenceScorer(create_strategy("regex"))
        result = scorer.score("unit_price", "number", [5], None, PRICE)
        self.assertEqual(result.signals[0].name, "name_match:regex")
        self.assertFalse(result.signals[0].matched)
        result = scorer.score("total", "number", [5], None, PRICE)
        self.assertTrue(result.signals[0].matched)
        self.assertAlmostEqual(result.confidence, 1.0)

    def test_unknown_engine(self) -> None:
        with self.assertRaises(ValueError):
            create_strategy("fuzzy")

    def test_embedding_strategy_caches_per_name(self) -> None:
        strategy = EmbeddingStrategy()
        self.assertAlmostEqual(strategy.match_name("price", PRICE), 1.0)
        self.assertEqual(strategy.match_name("price", RATING), 0.0)
        self.assertEqual(strategy.cache_size, 1)
        strategy.clear()
        self.assertEqual(strategy.cache_size, 0)


class CompositeScoringTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scorer = ConfidenceScorer(RegexStrategy())
        self.items = [{"rating": 5, "comment": "Great"}, {"rating": 2, "comment": "Meh"}]

    def test_reviews_structure(self) -> None:
        result = self.scorer.score_composite(
            "reviews", [("rating", "number"), ("comment", "string")], self.items, REVIEWS
        )
        self.assertIsNotNone(result)
        self.assertEqual(result.category, "reviews")
        self.assertAlmostEqual(result.confidence, 1.0)
        self.assertEqual(result.level, "high")

    def test_structure_without_matching_name(self) -> None:
        result = self.scorer.score_composite(
            "entries", [("stars", "number"), ("body", "string")], self.items, REVIEWS
        )
        self.assertAlmostEqual(result.confidence, 0.6 / 1.0)
        self.assertEqual(result.level, "medium")

    def test_missing_items_are_penalized(self) -> None:
        result = self.scorer.score_composite(
            "reviews", [("rating", "number"), ("comment", "string")], [], REVIEWS
        )
        self.assertAlmostEqual(result.confidence, 0.5)

    def test_registry_contents(self) -> None:
        self.assertEqual(len(DEFAULT_REGISTRY), 23)
        self.assertIs(DEFAULT_REGISTRY.get("price"), PRICE)
        self.assertIsNone(DEFAULT_REGISTRY.get("reviews"))
        self.assertIn(REVIEWS, DEFAULT_REGISTRY.composites)
        self.assertEqual([pattern.category for pattern in DEFAULT_REGISTRY], list(DEFAULT_REGISTRY.categories))
        self.assertIn("es", PRICE.name_patterns[0].languages)


if __name__ == "__main__":
    unittest.main()
