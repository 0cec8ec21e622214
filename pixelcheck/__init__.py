"""
PixelCheck - real photograph / AI-generated / graphic design image classifier
"""
from .core.classification_engine import CancellationToken, ClassificationEngine
from .core.exceptions import (
    AnalysisCancelled,
    FeatureExtractionError,
    InvalidBufferError,
    InvalidFeatureVectorError,
    PixelCheckError,
)
from .core.pixel_buffer import PixelBuffer
from .core.schemas import (
    AnalysisReport,
    ClassificationResult,
    ConfidenceTier,
    FeatureResult,
    FeatureVector,
    ImageFormat,
    ImageLabel,
    ImageMetadata,
)

__version__ = "1.0.0"

__all__ = [
    "AnalysisCancelled",
    "AnalysisReport",
    "CancellationToken",
    "ClassificationEngine",
    "ClassificationResult",
    "ConfidenceTier",
    "FeatureExtractionError",
    "FeatureResult",
    "FeatureVector",
    "ImageFormat",
    "ImageLabel",
    "ImageMetadata",
    "InvalidBufferError",
    "InvalidFeatureVectorError",
    "PixelBuffer",
    "PixelCheckError",
]
