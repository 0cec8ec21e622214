"""Feature extractors, one per slot of the feature vector."""
from typing import List

from .base import FeatureExtractor
from .color_detector import ColorDiversityExtractor, TransparencyExtractor
from .frequency_detector import FrequencyDomainExtractor
from .metadata_detector import MetadataExtractor
from .pattern_detector import (
    GradientArtificialityExtractor,
    PatternRegularityExtractor,
    TextureHomogeneityExtractor,
)
from .traditional_detector import (
    CompressionArtifactExtractor,
    EdgeSharpnessExtractor,
    NoiseExtractor,
)


def default_extractors() -> List[FeatureExtractor]:
    """The ten extractors in canonical feature order"""
    return [
        ColorDiversityExtractor(),
        TransparencyExtractor(),
        NoiseExtractor(),
        EdgeSharpnessExtractor(),
        PatternRegularityExtractor(),
        CompressionArtifactExtractor(),
        TextureHomogeneityExtractor(),
        FrequencyDomainExtractor(),
        GradientArtificialityExtractor(),
        MetadataExtractor(),
    ]


__all__ = [
    "ColorDiversityExtractor",
    "CompressionArtifactExtractor",
    "EdgeSharpnessExtractor",
    "FeatureExtractor",
    "FrequencyDomainExtractor",
    "GradientArtificialityExtractor",
    "MetadataExtractor",
    "NoiseExtractor",
    "PatternRegularityExtractor",
    "TextureHomogeneityExtractor",
    "TransparencyExtractor",
    "default_extractors",
]
