"""
Data model shared by the extractors, scorer, override engine and orchestrator
"""
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import InvalidFeatureVectorError

FEATURE_NAMES: Tuple[str, ...] = (
    "color",
    "transparency",
    "noise",
    "edge",
    "pattern",
    "compression",
    "texture",
    "frequency",
    "gradient",
    "metadata",
)

UnitFloat = Annotated[float, Field(ge=0.0, le=1.0, allow_inf_nan=False)]


class ImageFormat(str, Enum):
    """Known image container formats"""
    JPEG = "JPEG"
    PNG = "PNG"
    WEBP = "WEBP"
    GIF = "GIF"
    BMP = "BMP"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ImageFormat":
        """Map a format name or MIME type ("image/jpeg") onto the enum"""
        if not value:
            return cls.UNKNOWN
        name = value.split("/")[-1].strip().upper()
        if name == "JPG":
            name = "JPEG"
        try:
            return cls(name)
        except ValueError:
            return cls.UNKNOWN


class ImageLabel(str, Enum):
    REAL = "real"
    AI_GENERATED = "ai-generated"
    GRAPHIC_DESIGN = "graphic-design"


# Internal class keys of the weight table -> public labels
CLASS_LABELS: Dict[str, ImageLabel] = {
    "real": ImageLabel.REAL,
    "ai": ImageLabel.AI_GENERATED,
    "graphic": ImageLabel.GRAPHIC_DESIGN,
}


class ConfidenceTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ImageMetadata(BaseModel):
    """File-level metadata supplied by the ingestion side"""
    model_config = ConfigDict(frozen=True)

    format: ImageFormat = ImageFormat.UNKNOWN
    byte_size: int = Field(ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @field_validator("format", mode="before")
    @classmethod
    def _parse_format(cls, value: Any) -> Any:
        if isinstance(value, ImageFormat):
            return value
        if value is None or isinstance(value, str):
            return ImageFormat.parse(value)
        return value

    @property
    def dimensions(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


class FeatureResult(BaseModel):
    """Output of a single feature extractor"""
    model_config = ConfigDict(frozen=True)

    name: str
    score: UnitFloat
    raw_metrics: Dict[str, Any] = Field(default_factory=dict)
    interpretation: str = ""


class FeatureVector(BaseModel):
    """The ten normalized feature scores in canonical order"""
    model_config = ConfigDict(frozen=True)

    color: UnitFloat
    transparency: UnitFloat
    noise: UnitFloat
    edge: UnitFloat
    pattern: UnitFloat
    compression: UnitFloat
    texture: UnitFloat
    frequency: UnitFloat
    gradient: UnitFloat
    metadata: UnitFloat

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "FeatureVector":
        values = list(values)
        if len(values) != len(FEATURE_NAMES):
            raise InvalidFeatureVectorError(
                f"expected {len(FEATURE_NAMES)} features, got {len(values)}"
            )
        return cls.from_mapping(dict(zip(FEATURE_NAMES, values)))

    @classmethod
    def from_mapping(cls, values: Dict[str, float]) -> "FeatureVector":
        try:
            return cls(**{name: float(values[name]) for name in FEATURE_NAMES})
        except KeyError as e:
            raise InvalidFeatureVectorError(f"missing feature {e}") from e
        except ValidationError as e:
            raise InvalidFeatureVectorError(str(e)) from e

    def as_tuple(self) -> Tuple[float, ...]:
        return tuple(getattr(self, name) for name in FEATURE_NAMES)

    def as_array(self) -> np.ndarray:
        return np.array(self.as_tuple(), dtype=np.float64)


class ClassificationResult(BaseModel):
    """Final verdict of the scorer plus override rules"""
    model_config = ConfigDict(frozen=True)

    label: ImageLabel
    confidence: ConfidenceTier
    probabilities: Dict[str, float]
    raw_scores: Dict[str, float]
    max_probability: float
    provisional_label: ImageLabel
    fired_rules: List[str] = Field(default_factory=list)
    features: FeatureVector
    indicator_counts: Dict[str, int] = Field(default_factory=dict)


class AnalysisReport(BaseModel):
    """Everything handed to the presentation side for one analysis"""
    model_config = ConfigDict(frozen=True)

    classification: ClassificationResult
    features: Dict[str, FeatureResult]
    metadata: Optional[ImageMetadata] = None
    performance: Dict[str, Any] = Field(default_factory=dict)
