"""Configuration package."""
from .settings import (
    ClassWeights,
    EngineConfig,
    LoggingConfig,
    RuleThresholds,
    ScorerConfig,
    Settings,
    settings,
)

__all__ = [
    "ClassWeights",
    "EngineConfig",
    "LoggingConfig",
    "RuleThresholds",
    "ScorerConfig",
    "Settings",
    "settings",
]
