"""
Traditional image statistics: sensor noise, edge sharpness and JPEG blocking
"""
import logging
from typing import Optional

import cv2
import numpy as np

from ..core.pixel_buffer import PixelBuffer
from ..core.schemas import FeatureResult, ImageMetadata
from .base import FeatureExtractor, block_origins, safe_ratio, tile_blocks

logger = logging.getLogger(__name__)


class NoiseExtractor(FeatureExtractor):
    """
    Per-block grayscale standard deviation.

    A block counts as natural sensor noise when its standard deviation lies
    strictly between 8 and 60 and its variance exceeds 50.
    """

    name = "noise"

    block_size = 6
    neutral_score = 0.4

    def extract(self, buffer: PixelBuffer, metadata: Optional[ImageMetadata] = None) -> FeatureResult:
        blocks = tile_blocks(buffer.gray, self.block_size, self.block_size)
        block_count = blocks.shape[0] * blocks.shape[1]

        if block_count == 0:
            return self._result(
                self.neutral_score,
                "Image too small for noise analysis",
                avg_noise_level=0.0,
                natural_noise_ratio=0.0,
                block_count=0,
            )

        variance = blocks.var(axis=(2, 3))
        level = np.sqrt(variance)
        natural = (level > 8) & (level < 60) & (variance > 50)

        avg_noise_level = float(level.mean())
        natural_ratio = float(np.count_nonzero(natural)) / block_count

        # Clean images are not necessarily synthetic, so low noise stays near neutral
        if avg_noise_level < 3:
            score = 0.3
        elif avg_noise_level > 25:
            score = 0.9
        elif avg_noise_level > 12:
            score = 0.7
        else:
            score = 0.4

        if natural_ratio > 0.1:
            score = min(score + 0.3, 1.0)

        if avg_noise_level < 5:
            interpretation = "Very clean image (high quality or processed)"
        elif avg_noise_level < 20:
            interpretation = "Moderate noise"
        else:
            interpretation = "Natural photographic noise"

        result = self._result(
            score,
            interpretation,
            avg_noise_level=avg_noise_level,
            natural_noise_ratio=natural_ratio,
            block_count=block_count,
        )
        logger.debug(f"Noise patterns detection: {result.raw_metrics}")
        return result


class EdgeSharpnessExtractor(FeatureExtractor):
    """Sobel gradient magnitude sampled on a stride-3 grid"""

    name = "edge"

    stride = 3
    margin = 2
    min_strength = 8
    sharp_strength = 60
    moderate_strength = 25

    def extract(self, buffer: PixelBuffer, metadata: Optional[ImageMetadata] = None) -> FeatureResult:
        ys = np.arange(self.margin, buffer.height - self.margin, self.stride)
        xs = np.arange(self.margin, buffer.width - self.margin, self.stride)

        if ys.size and xs.size:
            magnitude = self._sobel_magnitude(buffer.gray)[np.ix_(ys, xs)]
            strengths = magnitude[magnitude > self.min_strength]
        else:
            strengths = np.empty(0)

        edge_count = int(strengths.size)
        sharp = int(np.count_nonzero(strengths > self.sharp_strength))
        moderate = int(np.count_nonzero(
            (strengths > self.moderate_strength) & (strengths <= self.sharp_strength)
        ))

        avg_strength = float(strengths.mean()) if edge_count else 0.0
        sharpness_ratio = safe_ratio(sharp, edge_count)
        moderate_ratio = safe_ratio(moderate, edge_count)

        if sharpness_ratio > 0.6:
            score = 0.9
        elif sharpness_ratio > 0.3:
            score = 0.6
        elif moderate_ratio > 0.4:
            score = 0.4
        else:
            score = 0.2

        if sharpness_ratio > 0.4:
            interpretation = "Very sharp edges"
        elif sharpness_ratio > 0.15:
            interpretation = "Moderate sharpness"
        else:
            interpretation = "Soft edges (photographic)"

        return self._result(
            score,
            interpretation,
            avg_edge_strength=avg_strength,
            sharpness_ratio=sharpness_ratio,
            moderate_ratio=moderate_ratio,
            edge_count=edge_count,
        )

    @staticmethod
    def _sobel_magnitude(gray: np.ndarray) -> np.ndarray:
        """Per-pixel Sobel gradient magnitude"""
        plane = np.ascontiguousarray(gray, dtype=np.float64).copy()
        sobel_x = cv2.Sobel(plane, cv2.CV_64F, 1, 0, ksize=3)
        sobel_y = cv2.Sobel(plane, cv2.CV_64F, 0, 1, ksize=3)
        return np.sqrt(sobel_x ** 2 + sobel_y ** 2)


class CompressionArtifactExtractor(FeatureExtractor):
    """
    JPEG blocking: discontinuities across the right-hand boundary of 8x8 blocks.

    Every second row of a block is compared across the boundary; a block is
    blocking when more than 40% of the block size exceeds an RGB L1
    difference of 40.
    """

    name = "compression"

    block_size = 8
    row_step = 2
    discontinuity_threshold = 40
    blocking_fraction = 0.4

    def extract(self, buffer: PixelBuffer, metadata: Optional[ImageMetadata] = None) -> FeatureResult:
        size = self.block_size
        rgb = buffer.rgba[:, :, :3].astype(np.int16)

        ys = block_origins(buffer.height, size, size)
        xs = block_origins(buffer.width, size, size)
        total_blocks = int(ys.size * xs.size)

        if total_blocks:
            rows = (ys[:, None] + np.arange(0, size, self.row_step))[:, None, :]
            inside = rgb[rows, (xs + size - 1)[None, :, None]]
            outside = rgb[rows, (xs + size)[None, :, None]]
            diff = np.abs(inside - outside).sum(axis=-1)
            discontinuities = np.count_nonzero(diff > self.discontinuity_threshold, axis=-1)
            blocking = int(np.count_nonzero(discontinuities > size * self.blocking_fraction))
        else:
            blocking = 0

        artifact_ratio = safe_ratio(blocking, total_blocks)

        if artifact_ratio > 0.2:
            interpretation = "Evident compression artifacts"
        elif artifact_ratio > 0.05:
            interpretation = "Some artifacts detected"
        else:
            interpretation = "No significant artifacts"

        return self._result(
            artifact_ratio,
            interpretation,
            blocking_artifacts=blocking,
            total_blocks=total_blocks,
            artifact_ratio=artifact_ratio,
        )
