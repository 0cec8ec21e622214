"""
Tests for the linear scorer and softmax
"""
import numpy as np
import pytest
from pydantic import ValidationError

from pixelcheck.config.settings import ClassWeights, ScorerConfig
from pixelcheck.core.exceptions import InvalidFeatureVectorError
from pixelcheck.core.schemas import FeatureVector
from pixelcheck.core.scorer import LinearScorer, softmax

SCENARIO_C = FeatureVector(
    color=0.5, transparency=0.0, noise=0.2, edge=0.1, pattern=0.98,
    compression=0.3, texture=0.7, frequency=0.7, gradient=0.8, metadata=0.2,
)


class TestSoftmax:

    def test_sums_to_one(self):
        assert softmax(np.array([0.1, -2.0, 3.5])).sum() == pytest.approx(1.0, abs=1e-12)

    def test_large_values_do_not_overflow(self):
        probabilities = softmax(np.array([1000.0, 1001.0, 1002.0]))
        assert np.all(np.isfinite(probabilities))
        assert probabilities[2] > probabilities[1] > probabilities[0]

    def test_equal_inputs_are_uniform(self):
        assert softmax(np.zeros(3)) == pytest.approx([1 / 3] * 3)


class TestLinearScorer:

    def test_zero_vector_scores_are_biases(self):
        scored = LinearScorer().score(FeatureVector.from_sequence([0.0] * 10))
        assert scored.raw_scores == pytest.approx({"real": 0.8, "ai": -1.5, "graphic": -0.3})
        assert scored.label == "real"

    def test_raw_scores(self):
        scored = LinearScorer().score(SCENARIO_C)
        assert scored.raw_scores["real"] == pytest.approx(-1.396)
        assert scored.raw_scores["ai"] == pytest.approx(2.174)
        assert scored.raw_scores["graphic"] == pytest.approx(-0.062)
        assert scored.label == "ai"
        assert scored.max_probability == pytest.approx(scored.probabilities["ai"])

    def test_probabilities_always_normalized(self):
        scorer = LinearScorer()
        rng = np.random.default_rng(3)
        for values in rng.uniform(0, 1, size=(200, 10)):
            scored = scorer.score(FeatureVector.from_sequence(values))
            assert sum(scored.probabilities.values()) == pytest.approx(1.0, abs=1e-6)
            assert scored.label in ("real", "ai", "graphic")

    def test_ties_resolve_to_first_class(self):
        flat = ClassWeights(weights=(0.0,) * 10, bias=0.0)
        scorer = LinearScorer(ScorerConfig(real=flat, ai=flat, graphic=flat))
        assert scorer.score(SCENARIO_C).label == "real"

    def test_injected_weights(self):
        favour_graphic = ClassWeights(weights=(0.0,) * 10, bias=5.0)
        scorer = LinearScorer(ScorerConfig(graphic=favour_graphic))
        assert scorer.score(SCENARIO_C).label == "graphic"


class TestScorerConfig:

    def test_weights_must_have_ten_entries(self):
        with pytest.raises(ValidationError):
            ClassWeights(weights=(1.0,) * 9, bias=0.0)

    def test_tables_are_immutable(self):
        config = ScorerConfig()
        with pytest.raises(ValidationError):
            config.real = config.ai


class TestFeatureVector:

    def test_order(self):
        assert SCENARIO_C.as_tuple() == (0.5, 0.0, 0.2, 0.1, 0.98, 0.3, 0.7, 0.7, 0.8, 0.2)

    def test_wrong_length(self):
        with pytest.raises(InvalidFeatureVectorError):
            FeatureVector.from_sequence([0.5] * 9)

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), -0.1, 1.1])
    def test_out_of_range_rejected(self, bad):
        with pytest.raises(InvalidFeatureVectorError):
            FeatureVector.from_sequence([bad] + [0.5] * 9)
