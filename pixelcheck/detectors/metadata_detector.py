"""
Metadata analysis: container format, dimensions and byte density
"""
import logging
from typing import Optional

from ..core.pixel_buffer import PixelBuffer
from ..core.schemas import FeatureResult, ImageFormat, ImageMetadata
from .base import FeatureExtractor

logger = logging.getLogger(__name__)


class MetadataExtractor(FeatureExtractor):
    """
    Evidence for a real camera versus a generator from file-level metadata.

    Camera pipelines favour JPEG, odd sensor resolutions and dense files;
    generators favour PNG and dimensions that are multiples of 512.
    Score = real / (real + artificial), 0.5 when nothing is known.
    """

    name = "metadata"

    neutral_score = 0.5
    generator_tiles = (512, 1024)

    def extract(self, buffer: PixelBuffer, metadata: Optional[ImageMetadata] = None) -> FeatureResult:
        if metadata is None:
            logger.debug("No metadata supplied, using neutral score")
            return self._result(
                self.neutral_score,
                "Metadata unavailable",
                format=ImageFormat.UNKNOWN.value,
                dimensions="0x0",
                file_size=0,
                bytes_per_pixel=0.0,
                is_perfect_square=False,
                is_perfect_ratio=False,
                real_camera_score=0.0,
                artificial_score=0.0,
            )

        real_score = 0.0
        artificial_score = 0.0
        fmt = metadata.format

        if fmt == ImageFormat.JPEG:
            real_score += 0.3
        elif fmt == ImageFormat.PNG:
            artificial_score += 0.2

        width, height = metadata.width, metadata.height
        is_perfect_square = width == height and any(width % tile == 0 for tile in self.generator_tiles)
        is_perfect_ratio = width % 512 == 0 and height % 512 == 0

        if is_perfect_square:
            artificial_score += 0.4
        elif is_perfect_ratio:
            artificial_score += 0.2
        else:
            real_score += 0.2

        bytes_per_pixel = metadata.byte_size / metadata.pixel_count

        if fmt == ImageFormat.JPEG:
            if bytes_per_pixel > 2:
                real_score += 0.3
            elif bytes_per_pixel < 0.5:
                artificial_score += 0.2
        elif fmt == ImageFormat.PNG:
            if bytes_per_pixel > 3:
                real_score += 0.2

        total = real_score + artificial_score
        score = real_score / total if total > 0 else self.neutral_score

        if score > 0.6:
            interpretation = "Metadata suggests a real camera"
        elif score < 0.4:
            interpretation = "Metadata suggests artificial generation"
        else:
            interpretation = "Neutral metadata"

        result = self._result(
            score,
            interpretation,
            format=fmt.value,
            dimensions=metadata.dimensions,
            file_size=metadata.byte_size,
            bytes_per_pixel=bytes_per_pixel,
            is_perfect_square=is_perfect_square,
            is_perfect_ratio=is_perfect_ratio,
            real_camera_score=real_score,
            artificial_score=artificial_score,
        )
        logger.debug(f"Metadata analysis: {result.raw_metrics}")
        return result
