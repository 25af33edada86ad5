"""Configuration loading and validation module."""

from src.config.loader import ConfigLoader, ConfigValidationError
from src.config.schemas.ranking import (
    AgencyRatingConfig,
    RankingConfig,
    ScoringConfig,
)


__all__ = [
    "AgencyRatingConfig",
    "ConfigLoader",
    "ConfigValidationError",
    "RankingConfig",
    "ScoringConfig",
]
