"""Configuration schema definitions."""

from src.config.schemas.ranking import (
    AgencyRatingConfig,
    RankingConfig,
    ScoringConfig,
)


__all__ = [
    "AgencyRatingConfig",
    "RankingConfig",
    "ScoringConfig",
]
