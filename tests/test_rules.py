"""
Tests for the override rule engine
"""
import pytest

from pixelcheck.config.settings import RuleThresholds
from pixelcheck.core.rules import RuleOverrideEngine, count_indicators
from pixelcheck.core.schemas import ConfidenceTier, FeatureVector, ImageLabel
from pixelcheck.core.scorer import LinearScorer

NEUTRAL = dict(
    color=0.5, transparency=0.0, noise=0.5, edge=0.5, pattern=0.5,
    compression=0.0, texture=0.5, frequency=0.5, gradient=0.5, metadata=0.5,
)

FAVOUR_REAL = {"real": 0.7, "ai": 0.2, "graphic": 0.1}
FAVOUR_AI = {"real": 0.2, "ai": 0.7, "graphic": 0.1}
FAVOUR_GRAPHIC = {"real": 0.1, "ai": 0.1, "graphic": 0.8}


def vector(**overrides) -> FeatureVector:
    return FeatureVector(**{**NEUTRAL, **overrides})


@pytest.fixture
def rule_engine():
    return RuleOverrideEngine()


class TestAiRules:

    def test_scenario_c_signature(self, rule_engine):
        features = vector(
            color=0.5, transparency=0.0, noise=0.2, edge=0.1, pattern=0.98,
            compression=0.3, texture=0.7, frequency=0.7, gradient=0.8, metadata=0.2,
        )
        probabilities = LinearScorer().score(features).probabilities
        outcome = rule_engine.evaluate(features, probabilities)

        assert outcome.counts.signature is True
        assert outcome.counts.supporting == 5
        assert outcome.label == ImageLabel.AI_GENERATED
        assert outcome.confidence == ConfidenceTier.HIGH
        assert outcome.fired_rules == ["ai_signature"]

    @pytest.mark.parametrize("pattern,expected", [
        (0.929, ImageLabel.REAL),
        (0.93, ImageLabel.AI_GENERATED),
        (0.95, ImageLabel.AI_GENERATED),
    ])
    def test_signature_pattern_boundary(self, rule_engine, pattern, expected):
        features = vector(pattern=pattern, edge=0.2, noise=0.3, texture=0.7)
        outcome = rule_engine.evaluate(features, FAVOUR_REAL)
        assert outcome.label == expected

    def test_signature_with_two_supporting_is_medium(self, rule_engine):
        features = vector(pattern=0.95, edge=0.2, noise=0.3, texture=0.7)
        outcome = rule_engine.evaluate(features, FAVOUR_REAL)
        assert outcome.confidence == ConfidenceTier.MEDIUM
        assert outcome.fired_rules == ["ai_signature"]

    def test_signature_needs_soft_edges(self, rule_engine):
        features = vector(pattern=0.95, edge=0.26, noise=0.3, texture=0.7)
        outcome = rule_engine.evaluate(features, FAVOUR_REAL)
        assert "ai_signature" not in outcome.fired_rules

    def test_three_extreme_indicators(self, rule_engine):
        features = vector(pattern=0.91, texture=0.85, gradient=0.9)
        outcome = rule_engine.evaluate(features, FAVOUR_REAL)
        assert outcome.counts.extreme == 3
        assert outcome.label == ImageLabel.AI_GENERATED
        assert outcome.confidence == ConfidenceTier.MEDIUM
        assert outcome.fired_rules == ["extreme_indicators"]

    def test_four_extreme_indicators(self, rule_engine):
        features = vector(pattern=0.91, texture=0.85, gradient=0.9, frequency=0.85)
        outcome = rule_engine.evaluate(features, FAVOUR_REAL)
        assert outcome.label == ImageLabel.AI_GENERATED
        assert outcome.confidence == ConfidenceTier.HIGH


class TestRealRules:

    def test_strong_real_overturns_ai(self, rule_engine):
        features = vector(
            pattern=0.95, edge=0.2, noise=0.7, texture=0.3, metadata=0.7,
            gradient=0.8, frequency=0.7,
        )
        outcome = rule_engine.evaluate(features, FAVOUR_AI)
        assert outcome.counts.strong_real == 4
        assert outcome.fired_rules == ["ai_signature", "strong_real"]
        assert outcome.label == ImageLabel.REAL
        assert outcome.confidence == ConfidenceTier.HIGH

    def test_camera_pattern(self, rule_engine):
        features = vector(metadata=0.8, pattern=0.8)
        outcome = rule_engine.evaluate(features, FAVOUR_AI)
        assert outcome.fired_rules == ["real_camera_pattern"]
        assert outcome.label == ImageLabel.REAL
        assert outcome.confidence == ConfidenceTier.HIGH

    def test_camera_pattern_requires_opacity(self, rule_engine):
        features = vector(metadata=0.8, pattern=0.8, transparency=0.01)
        outcome = rule_engine.evaluate(features, FAVOUR_REAL)
        assert "real_camera_pattern" not in outcome.fired_rules

    def test_strong_real_decides_when_both_match(self, rule_engine):
        features = vector(metadata=0.8, pattern=0.6, texture=0.3)
        outcome = rule_engine.evaluate(features, FAVOUR_AI)
        assert outcome.counts.strong_real == 3
        assert outcome.fired_rules == ["real_camera_pattern", "strong_real"]
        assert outcome.label == ImageLabel.REAL
        assert outcome.confidence == ConfidenceTier.MEDIUM

    def test_low_regularity(self, rule_engine):
        features = vector(pattern=0.2, texture=0.1, color=0.9)
        outcome = rule_engine.evaluate(features, FAVOUR_GRAPHIC)
        assert outcome.fired_rules == ["low_regularity"]
        assert outcome.label == ImageLabel.REAL
        assert outcome.confidence == ConfidenceTier.MEDIUM


class TestGraphicAndClampRules:

    def test_graphic_design(self, rule_engine):
        features = vector(
            transparency=0.5, edge=0.9, color=0.1, noise=0.1,
            pattern=0.6, texture=0.2, gradient=0.1, frequency=0.4,
        )
        outcome = rule_engine.evaluate(features, FAVOUR_GRAPHIC)
        assert outcome.counts.graphic == 4
        assert outcome.fired_rules == ["graphic_design"]
        assert outcome.label == ImageLabel.GRAPHIC_DESIGN
        assert outcome.confidence == ConfidenceTier.HIGH

    def test_anti_false_positive(self, rule_engine):
        outcome = rule_engine.evaluate(vector(), FAVOUR_AI)
        assert outcome.counts.ai_total == 0
        assert outcome.fired_rules == ["anti_false_positive"]
        assert outcome.label == ImageLabel.REAL
        assert outcome.confidence == ConfidenceTier.MEDIUM

    def test_provisional_label_kept_without_rules(self, rule_engine):
        outcome = rule_engine.evaluate(vector(), FAVOUR_GRAPHIC)
        assert outcome.fired_rules == []
        assert outcome.label == ImageLabel.GRAPHIC_DESIGN
        assert outcome.confidence == ConfidenceTier.LOW


class TestConfidenceFloor:

    def test_scenario_d_low_probability_forces_real(self, rule_engine):
        features = vector(
            color=0.5, transparency=0.0, noise=0.2, edge=0.1, pattern=0.98,
            compression=0.3, texture=0.7, frequency=0.7, gradient=0.8, metadata=0.2,
        )
        probabilities = {"real": 0.24, "ai": 0.52, "graphic": 0.24}
        outcome = rule_engine.evaluate(features, probabilities)
        assert outcome.fired_rules[0] == "ai_signature"
        assert outcome.fired_rules[-1] == "confidence_floor"
        assert outcome.label == ImageLabel.REAL
        assert outcome.confidence == ConfidenceTier.LOW

    def test_floor_boundary_is_exclusive(self, rule_engine):
        outcome = rule_engine.evaluate(vector(), {"real": 0.6, "ai": 0.3, "graphic": 0.1})
        assert "confidence_floor" not in outcome.fired_rules


class TestRuleConfiguration:

    def test_injected_thresholds(self):
        strict = RuleOverrideEngine(RuleThresholds(signature_pattern_min=0.99))
        features = vector(pattern=0.98, edge=0.1, noise=0.2, texture=0.7)
        outcome = strict.evaluate(features, FAVOUR_REAL)
        assert "ai_signature" not in outcome.fired_rules

    def test_indicator_counts(self):
        counts = count_indicators(vector(), RuleThresholds())
        assert counts.as_dict() == {
            "supporting": 0, "extreme": 0, "ai_total": 0, "strong_real": 1, "graphic": 0,
        }

    def test_evaluation_is_deterministic(self, rule_engine):
        features = vector(pattern=0.95, edge=0.2, noise=0.3, texture=0.7)
        assert rule_engine.evaluate(features, FAVOUR_REAL) == rule_engine.evaluate(features, FAVOUR_REAL)
