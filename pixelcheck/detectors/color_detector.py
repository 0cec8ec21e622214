"""
Color palette and alpha channel statistics
"""
import logging
from typing import Optional

import numpy as np

from ..core.pixel_buffer import PixelBuffer
from ..core.schemas import FeatureResult, ImageMetadata
from .base import FeatureExtractor, safe_ratio

logger = logging.getLogger(__name__)


class ColorDiversityExtractor(FeatureExtractor):
    """
    Counts distinct colors among visible pixels.

    Channels are quantized to 64 levels (value // 4) before counting, so
    sensor noise does not inflate the palette of flat graphics.
    """

    name = "color"

    few_colors = 20
    few_colors_min_samples = 500
    limited_palette = 200
    rich_palette = 1000

    def extract(self, buffer: PixelBuffer, metadata: Optional[ImageMetadata] = None) -> FeatureResult:
        rgba = buffer.rgba
        opaque = rgba[:, :, 3] > 0
        visible = rgba[opaque][:, :3].astype(np.uint32) >> 2

        total_pixels = int(visible.shape[0])
        keys = (visible[:, 0] << 12) | (visible[:, 1] << 6) | visible[:, 2]
        unique_colors = int(np.unique(keys).size)
        diversity = safe_ratio(unique_colors, total_pixels)

        if unique_colors < self.few_colors and total_pixels > self.few_colors_min_samples:
            score = 0.1
        elif unique_colors < self.limited_palette:
            score = 0.3
        elif unique_colors > self.rich_palette:
            score = 0.9
        else:
            score = min(diversity * 5000, 0.8)

        has_limited_palette = unique_colors < 50 and total_pixels > 1000

        result = self._result(
            score,
            "Limited palette detected" if has_limited_palette else "Rich color diversity",
            unique_colors=unique_colors,
            total_pixels=total_pixels,
            color_diversity=round(diversity, 4),
            has_limited_palette=has_limited_palette,
        )
        logger.debug(f"Color diversity: {result.raw_metrics}")
        return result


class TransparencyExtractor(FeatureExtractor):
    """Fraction of fully and partially transparent pixels"""

    name = "transparency"

    significant_ratio = 0.1

    def extract(self, buffer: PixelBuffer, metadata: Optional[ImageMetadata] = None) -> FeatureResult:
        alpha = buffer.alpha
        total_pixels = buffer.pixel_count

        transparent = int(np.count_nonzero(alpha == 0))
        partial = int(np.count_nonzero((alpha > 0) & (alpha < 255)))

        transparency_ratio = safe_ratio(transparent, total_pixels)
        partial_ratio = safe_ratio(partial, total_pixels)
        significant = transparency_ratio > self.significant_ratio

        return self._result(
            transparency_ratio,
            "Significant transparency" if significant else "Opaque image",
            transparent_pixels=transparent,
            partial_transparent_pixels=partial,
            total_pixels=total_pixels,
            transparency_ratio=transparency_ratio,
            partial_transparency_ratio=partial_ratio,
            has_significant_transparency=significant,
        )
