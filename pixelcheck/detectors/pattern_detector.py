"""
Spatial regularity signals typical of generated imagery: repeated tiles,
over-smooth textures and mathematically perfect gradients
"""
import logging
from typing import Optional

import numpy as np

from ..core.pixel_buffer import PixelBuffer
from ..core.schemas import FeatureResult, ImageMetadata
from .base import FeatureExtractor, block_origins, safe_ratio, tile_blocks

logger = logging.getLogger(__name__)


class PatternRegularityExtractor(FeatureExtractor):
    """
    Similarity between each 20px block and its right-hand neighbour.

    Blocks are tiled every 40px; similarity is 1 - L1(RGB diff) / max diff
    over every second pixel of the block.
    """

    name = "pattern"

    block_size = 20
    sample_step = 2
    regular_similarity = 0.85
    very_regular_similarity = 0.95

    def extract(self, buffer: PixelBuffer, metadata: Optional[ImageMetadata] = None) -> FeatureResult:
        size = self.block_size
        span = size * 2
        rgb = buffer.rgba[:, :, :3].astype(np.int32)

        ys = block_origins(buffer.height, span, span)
        xs = block_origins(buffer.width, span, span)
        total = int(ys.size * xs.size)

        if total:
            offsets = np.arange(0, size, self.sample_step)
            rows = ys[:, None, None, None] + offsets[None, None, :, None]
            cols = xs[None, :, None, None] + offsets[None, None, None, :]
            diff = np.abs(rgb[rows, cols] - rgb[rows, cols + size]).sum(axis=(2, 3, 4))
            max_diff = offsets.size * offsets.size * 3 * 255
            similarity = 1.0 - diff / max_diff
            regular = int(np.count_nonzero(similarity > self.regular_similarity))
            very_regular = int(np.count_nonzero(similarity > self.very_regular_similarity))
        else:
            regular = very_regular = 0

        regularity_ratio = safe_ratio(regular, total)
        very_regular_ratio = safe_ratio(very_regular, total)
        score = self._score(regularity_ratio, very_regular_ratio)

        if very_regular_ratio > 0.3:
            interpretation = "Extremely regular patterns (artificial)"
        elif regularity_ratio > 0.3:
            interpretation = "Some regular patterns"
        else:
            interpretation = "Natural patterns"

        return self._result(
            score,
            interpretation,
            regular_patterns=regular,
            very_regular_patterns=very_regular,
            total_patterns=total,
            regularity_ratio=regularity_ratio,
            very_regular_ratio=very_regular_ratio,
        )

    @staticmethod
    def _score(regularity_ratio: float, very_regular_ratio: float) -> float:
        if very_regular_ratio > 0.6:
            return 0.98
        if very_regular_ratio > 0.4:
            return 0.92
        if very_regular_ratio > 0.2:
            return 0.85
        if regularity_ratio > 0.5:
            return 0.7
        if regularity_ratio > 0.3:
            return 0.4
        if regularity_ratio > 0.15:
            return 0.2
        return 0.05


class TextureHomogeneityExtractor(FeatureExtractor):
    """Share of 16x16 blocks that are extremely smooth"""

    name = "texture"

    block_size = 16
    sample_step = 2
    smooth_homogeneity = 0.92
    smooth_variance = 50

    def extract(self, buffer: PixelBuffer, metadata: Optional[ImageMetadata] = None) -> FeatureResult:
        blocks = tile_blocks(buffer.gray, self.block_size, self.block_size, self.sample_step)
        block_count = blocks.shape[0] * blocks.shape[1]

        if block_count:
            variance = blocks.var(axis=(2, 3))
            homogeneity = 1.0 / (1.0 + variance / 2000.0)
            smooth = (homogeneity > self.smooth_homogeneity) & (variance < self.smooth_variance)
            avg_homogeneity = float(homogeneity.mean())
            smooth_ratio = float(np.count_nonzero(smooth)) / block_count
        else:
            avg_homogeneity = smooth_ratio = 0.0

        # Only extreme homogeneity is penalized
        if smooth_ratio > 0.4:
            score = min(smooth_ratio * 2, 1.0)
        else:
            score = min(avg_homogeneity * smooth_ratio * 3, 0.5)

        if smooth_ratio > 0.3:
            interpretation = "Extremely homogeneous textures (possible AI)"
        elif smooth_ratio > 0.1:
            interpretation = "Some very smooth textures"
        else:
            interpretation = "Natural textures"

        return self._result(
            score,
            interpretation,
            avg_homogeneity=avg_homogeneity,
            extremely_smooth_ratio=smooth_ratio,
            block_count=block_count,
        )


class GradientArtificialityExtractor(FeatureExtractor):
    """
    Smoothness of local intensity ramps.

    Sample points sit on a grid spaced by min(width, height) // 15. Around each
    point a horizontal and a vertical intensity profile is sampled; a profile
    is a gradient when its mean step exceeds 3 and its largest step exceeds
    10. Smoothness is 1 / (1 + std(steps) / mean(steps)).
    """

    name = "gradient"

    grid_divisor = 15
    artificial_smoothness = 0.96
    perfect_smoothness = 0.98

    def extract(self, buffer: PixelBuffer, metadata: Optional[ImageMetadata] = None) -> FeatureResult:
        gray = buffer.gray
        spacing = max(1, min(buffer.width, buffer.height) // self.grid_divisor)
        step = max(1, spacing // 10)

        ys = np.arange(spacing, buffer.height - spacing, spacing * 2)
        xs = np.arange(spacing, buffer.width - spacing, spacing * 2)
        offsets = np.arange(-spacing, spacing + 1, step)

        total = artificial = perfect = 0
        if ys.size and xs.size and offsets.size >= 3:
            horizontal = gray[ys[:, None, None], xs[None, :, None] + offsets]
            vertical = gray[ys[:, None, None] + offsets, xs[None, :, None]]

            h_gradient, h_smooth = self._profile_stats(horizontal)
            v_gradient, v_smooth = self._profile_stats(vertical)

            is_gradient = h_gradient | v_gradient
            total = int(np.count_nonzero(is_gradient))
            artificial = int(np.count_nonzero(
                is_gradient & ((h_smooth > self.artificial_smoothness) | (v_smooth > self.artificial_smoothness))
            ))
            perfect = int(np.count_nonzero(
                is_gradient & ((h_smooth > self.perfect_smoothness) | (v_smooth > self.perfect_smoothness))
            ))

        artificial_ratio = safe_ratio(artificial, total)
        perfect_ratio = safe_ratio(perfect, total)

        if perfect_ratio > 0.4:
            score = 0.9
        elif artificial_ratio > 0.5:
            score = 0.7
        elif artificial_ratio > 0.2:
            score = 0.4
        else:
            score = 0.1

        if perfect_ratio > 0.4:
            interpretation = "Gradients too perfect (highly suspicious)"
        elif artificial_ratio > 0.4:
            interpretation = "Many artificial gradients"
        else:
            interpretation = "Natural gradients"

        return self._result(
            score,
            interpretation,
            grid_spacing=spacing,
            total_gradients=total,
            artificial_gradient_ratio=artificial_ratio,
            perfect_transition_ratio=perfect_ratio,
        )

    @staticmethod
    def _profile_stats(profiles: np.ndarray):
        """Return (is_gradient, smoothness) for profiles along the last axis"""
        diffs = np.abs(np.diff(profiles, axis=-1))
        avg = diffs.mean(axis=-1)
        peak = diffs.max(axis=-1)
        spread = np.sqrt(diffs.var(axis=-1))

        is_gradient = (avg > 3) & (peak > 10)
        smoothness = np.zeros_like(avg)
        moving = avg > 0
        smoothness[moving] = 1.0 / (1.0 + spread[moving] / avg[moving])
        return is_gradient, smoothness
