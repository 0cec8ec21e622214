"""
Configuration settings for the PixelCheck image classifier
"""
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

FEATURE_COUNT = 10


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    # Let ClassificationEngine call setup_logging when it is built
    configure_on_startup: bool = False


class EngineConfig(BaseModel):
    """Orchestrator configuration"""
    parallel_extraction: bool = True
    max_workers: int = Field(default=4, ge=1)


class ClassWeights(BaseModel):
    """Linear weights and bias for one output class"""
    model_config = ConfigDict(frozen=True)

    weights: Tuple[float, ...]
    bias: float

    @field_validator("weights")
    @classmethod
    def _check_length(cls, value: Tuple[float, ...]) -> Tuple[float, ...]:
        if len(value) != FEATURE_COUNT:
            raise ValueError(f"expected {FEATURE_COUNT} weights, got {len(value)}")
        return value


class ScorerConfig(BaseModel):
    """Per-class weight tables of the linear scorer.

    Feature order: color, transparency, noise, edge, pattern, compression,
    texture, frequency, gradient, metadata.
    """
    model_config = ConfigDict(frozen=True)

    real: ClassWeights = ClassWeights(
        weights=(0.6, -0.9, 0.8, -0.4, -1.2, 0.4, -0.9, -0.7, -0.8, 1.0),
        bias=0.8,
    )
    ai: ClassWeights = ClassWeights(
        weights=(-0.2, -0.3, -0.8, 0.3, 1.8, -0.4, 1.2, 1.0, 1.1, -0.8),
        bias=-1.5,
    )
    graphic: ClassWeights = ClassWeights(
        weights=(-0.9, 1.0, -1.0, 1.0, 0.6, -0.9, 0.2, 0.1, 0.3, 0.1),
        bias=-0.3,
    )

    def tables(self) -> Dict[str, ClassWeights]:
        """Class key -> weights, in argmax tie-break order"""
        return {"real": self.real, "ai": self.ai, "graphic": self.graphic}


class RuleThresholds(BaseModel):
    """Thresholds used by the override rules"""
    model_config = ConfigDict(frozen=True)

    # AI signature
    signature_pattern_min: float = 0.93
    signature_edge_max: float = 0.25
    supporting_texture_min: float = 0.6
    supporting_noise_max: float = 0.4
    supporting_gradient_min: float = 0.7
    supporting_frequency_min: float = 0.6
    supporting_metadata_max: float = 0.4
    signature_min_support: int = 2
    signature_high_support: int = 3

    # Extreme indicators
    extreme_pattern_min: float = 0.9
    extreme_texture_min: float = 0.8
    extreme_gradient_min: float = 0.85
    extreme_frequency_min: float = 0.8
    extreme_min_count: int = 3

    # Real camera pattern
    camera_metadata_min: float = 0.7
    camera_pattern_max: float = 0.85

    # Strong real evidence
    real_noise_min: float = 0.6
    real_edge_max: float = 0.3
    real_pattern_max: float = 0.7
    real_texture_max: float = 0.4
    real_metadata_min: float = 0.6
    real_min_count: int = 3
    real_high_count: int = 4

    # Graphic design
    graphic_transparency_min: float = 0.3
    graphic_edge_min: float = 0.7
    graphic_color_max: float = 0.3
    graphic_noise_max: float = 0.2
    graphic_min_count: int = 3

    # Anti false positive
    ai_min_total_indicators: int = 3

    # Low regularity
    low_regularity_pattern_max: float = 0.5
    low_regularity_texture_max: float = 0.5
    low_regularity_color_min: float = 0.4

    # Confidence floor
    min_probability: float = 0.6


class Settings(BaseSettings):
    """Application settings"""
    model_config = SettingsConfigDict(
        env_prefix="PIXELCHECK_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = "development"
    debug: bool = False

    # Configuration sections
    logging: LoggingConfig = LoggingConfig()
    engine: EngineConfig = EngineConfig()
    scorer: ScorerConfig = ScorerConfig()
    rules: RuleThresholds = RuleThresholds()


# Global settings instance
settings = Settings()
