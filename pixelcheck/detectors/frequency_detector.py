"""
Frequency-domain energy distribution from a reduced block DCT
"""
import logging
from typing import Optional

import numpy as np

from ..core.pixel_buffer import PixelBuffer
from ..core.schemas import FeatureResult, ImageMetadata
from .base import FeatureExtractor, tile_blocks

logger = logging.getLogger(__name__)


class FrequencyDomainExtractor(FeatureExtractor):
    """
    Low / mid / high frequency energy ratios over 8x8 grayscale blocks.

    Only the 4x4 lowest coefficients are computed, from every second row and
    column of each block. Coefficients are bucketed by u + v: low <= 1,
    mid <= 3, high > 3.
    """

    name = "frequency"

    block_size = 8
    block_step = 16
    sample_step = 2
    coefficients = 4
    neutral_score = 0.5

    def __init__(self):
        size = self.block_size
        positions = np.arange(0, size, self.sample_step)
        freqs = np.arange(min(size, self.coefficients))
        self._basis = np.cos((2 * positions[None, :] + 1) * freqs[:, None] * np.pi / (2 * size))

        band = freqs[:, None] + freqs[None, :]
        self._low = band <= 1
        self._mid = (band > 1) & (band <= 3)
        self._high = band > 3

    def extract(self, buffer: PixelBuffer, metadata: Optional[ImageMetadata] = None) -> FeatureResult:
        blocks = tile_blocks(buffer.gray, self.block_size, self.block_step, self.sample_step)
        block_count = blocks.shape[0] * blocks.shape[1]

        if block_count:
            coeffs = np.einsum("ur,nmrc,vc->nmuv", self._basis, blocks, self._basis)
            energy = np.abs(coeffs).sum(axis=(0, 1))
            low = float(energy[self._low].sum())
            mid = float(energy[self._mid].sum())
            high = float(energy[self._high].sum())
        else:
            low = mid = high = 0.0

        total = low + mid + high
        if total == 0:
            return self._result(
                self.neutral_score,
                "No frequency content to analyze",
                high_freq_ratio=0.0,
                mid_freq_ratio=0.0,
                low_freq_ratio=0.0,
                block_count=block_count,
            )

        high_ratio = high / total
        mid_ratio = mid / total
        low_ratio = low / total

        # Many real photos also lack high frequencies; only extreme cases score high
        if high_ratio < 0.05 and low_ratio > 0.8:
            score = 0.9
        elif high_ratio < 0.1 and low_ratio > 0.7:
            score = 0.7
        elif high_ratio < 0.2:
            score = 0.4
        else:
            score = 0.2

        if high_ratio < 0.08:
            interpretation = "Very few high frequencies (suspicious)"
        elif high_ratio < 0.2:
            interpretation = "Moderate frequencies"
        else:
            interpretation = "Rich high frequencies (natural)"

        return self._result(
            score,
            interpretation,
            high_freq_ratio=high_ratio,
            mid_freq_ratio=mid_ratio,
            low_freq_ratio=low_ratio,
            block_count=block_count,
        )
