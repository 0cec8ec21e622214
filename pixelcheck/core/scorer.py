"""
Fixed linear scorer with softmax normalization
"""
import logging
from typing import Dict, NamedTuple, Optional

import numpy as np

from ..config.settings import ScorerConfig
from .schemas import FeatureVector

logger = logging.getLogger(__name__)


def softmax(values: np.ndarray) -> np.ndarray:
    """Softmax stabilized by subtracting the maximum before exponentiation"""
    values = np.asarray(values, dtype=np.float64)
    exps = np.exp(values - values.max())
    return exps / exps.sum()


class ScoreResult(NamedTuple):
    raw_scores: Dict[str, float]
    probabilities: Dict[str, float]
    label: str
    max_probability: float


class LinearScorer:
    """
    rawScore(class) = features . weights(class) + bias(class)

    Weight tables are immutable configuration; the scorer keeps no state
    between calls.
    """

    def __init__(self, config: Optional[ScorerConfig] = None):
        self.config = config or ScorerConfig()
        tables = self.config.tables()
        self.classes = tuple(tables)
        self._weights = np.array([tables[name].weights for name in self.classes], dtype=np.float64)
        self._biases = np.array([tables[name].bias for name in self.classes], dtype=np.float64)

    def raw_scores(self, features: FeatureVector) -> np.ndarray:
        return self._weights @ features.as_array() + self._biases

    def score(self, features: FeatureVector) -> ScoreResult:
        raw = self.raw_scores(features)
        probabilities = softmax(raw)

        # argmax keeps the first class on ties (real, ai, graphic)
        best = int(np.argmax(probabilities))

        result = ScoreResult(
            raw_scores={name: float(value) for name, value in zip(self.classes, raw)},
            probabilities={name: float(value) for name, value in zip(self.classes, probabilities)},
            label=self.classes[best],
            max_probability=float(probabilities[best]),
        )
        logger.debug(f"Scorer output: {result.probabilities}")
        return result
