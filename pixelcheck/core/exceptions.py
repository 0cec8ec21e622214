"""
Exception hierarchy for the classification pipeline
"""


class PixelCheckError(Exception):
    """Base class for all classifier errors"""


class InvalidBufferError(PixelCheckError, ValueError):
    """Pixel buffer has zero dimensions or a sample count not matching width x height x 4"""


class InvalidFeatureVectorError(PixelCheckError, ValueError):
    """Feature vector does not hold exactly ten finite values in [0, 1]"""


class FeatureExtractionError(PixelCheckError):
    """An extractor failed; the whole analysis is aborted"""

    def __init__(self, feature: str, message: str):
        super().__init__(f"{feature} extraction failed: {message}")
        self.feature = feature


class AnalysisCancelled(PixelCheckError):
    """Analysis was superseded or cancelled before completion"""
