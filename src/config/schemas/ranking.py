"""Ranking configuration schema."""

from typing import Annotated

from pydantic import Field, field_validator

from src.config.constants import (
    CLUSTER_TIMESTAMP_PERCENTILE,
    DEFAULT_AGENCY_WEIGHT,
    DEFAULT_REFERENCE_PERCENTILE,
    RECENCY_CENTER_HOURS,
    SECONDS_PER_HOUR,
    SMALL_CLUSTER_COEF,
)
from src.data_model import StrictBaseModel


class ScoringConfig(StrictBaseModel):
    """Cluster weight tuning parameters.

    Attributes:
        cluster_timestamp_percentile: Percentile of a cluster's fetch times
            used as its timestamp.
        recency_center_hours: Age in hours mapped to a recency of 0.5.
        seconds_per_hour: Divisor converting timestamp deltas to hours.
        small_cluster_coef: Per-document confidence step for small clusters.
        default_agency_weight: Weight for hosts missing from the rating.
    """

    cluster_timestamp_percentile: Annotated[float, Field(ge=0.0, le=1.0)] = (
        CLUSTER_TIMESTAMP_PERCENTILE
    )
    recency_center_hours: Annotated[float, Field(ge=0.0, le=168.0)] = (
        RECENCY_CENTER_HOURS
    )
    seconds_per_hour: Annotated[int, Field(gt=0)] = SECONDS_PER_HOUR
    small_cluster_coef: Annotated[float, Field(gt=0.0, le=1.0)] = SMALL_CLUSTER_COEF
    default_agency_weight: Annotated[
        float, Field(ge=0.0, allow_inf_nan=False)
    ] = DEFAULT_AGENCY_WEIGHT


class RankingConfig(StrictBaseModel):
    """Root configuration for ranking.yaml.

    Attributes:
        version: Schema version.
        reference_percentile: Upper percentile of all fetch times used as
            the reference "now".
        scoring: Cluster weight tuning parameters.
    """

    version: Annotated[str, Field(pattern=r"^\d+\.\d+$")] = "1.0"
    reference_percentile: Annotated[float, Field(gt=0.0, lt=1.0)] = (
        DEFAULT_REFERENCE_PERCENTILE
    )
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)


class AgencyRatingConfig(StrictBaseModel):
    """Host reputation scores.

    Attributes:
        ratings: Mapping of host name to finite non-negative score.
    """

    ratings: dict[str, Annotated[float, Field(allow_inf_nan=False)]] = Field(
        default_factory=dict
    )

    @field_validator("ratings")
    @classmethod
    def validate_ratings(cls, value: dict[str, float]) -> dict[str, float]:
        """Ensure hosts are non-empty and scores are non-negative.

        Hosts are lowercased and a leading "www." is dropped so keys match
        the hosts extracted from document URLs.
        """
        normalized: dict[str, float] = {}
        for host, score in value.items():
            key = host.strip().lower()
            if not key:
                msg = "Agency host names must be non-empty strings"
                raise ValueError(msg)
            if score < 0:
                msg = f"Agency rating for {host!r} must be non-negative, got {score}"
                raise ValueError(msg)
            normalized[key.removeprefix("www.")] = score
        return normalized
