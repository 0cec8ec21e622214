"""
Common plumbing for the feature extractors
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

import numpy as np

from ..core.pixel_buffer import PixelBuffer
from ..core.schemas import FeatureResult, ImageMetadata


def block_origins(extent: int, size: int, step: int) -> np.ndarray:
    """Top-left coordinates of the blocks that fit strictly before the last full block"""
    return np.arange(0, max(extent - size, 0), step, dtype=np.intp)


def tile_blocks(plane: np.ndarray, size: int, step: int, sample: int = 1) -> np.ndarray:
    """
    Gather blocks from a (h, w) or (h, w, c) plane.

    Block origins follow block_origins(); inside a block every `sample`-th
    row and column is kept. Returns an array shaped
    (rows, cols, k, k[, c]) where k = ceil(size / sample).
    """
    height, width = plane.shape[:2]
    ys = block_origins(height, size, step)
    xs = block_origins(width, size, step)
    offsets = np.arange(0, size, sample, dtype=np.intp)
    rows = ys[:, None, None, None] + offsets[None, None, :, None]
    cols = xs[None, :, None, None] + offsets[None, None, None, :]
    return plane[rows, cols]


def safe_ratio(numerator: float, denominator: float) -> float:
    return float(numerator) / float(denominator) if denominator > 0 else 0.0


def _plain(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return value


class FeatureExtractor(ABC):
    """Base class for the ten pure, read-only feature extractors"""

    name: str = ""

    @abstractmethod
    def extract(self, buffer: PixelBuffer, metadata: Optional[ImageMetadata] = None) -> FeatureResult:
        """Compute the feature for one image"""

    def _result(self, score: float, interpretation: str, **metrics: Any) -> FeatureResult:
        return FeatureResult(
            name=self.name,
            score=float(score),
            raw_metrics={key: _plain(value) for key, value in metrics.items()},
            interpretation=interpretation,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
