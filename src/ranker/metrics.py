"""Metrics collection for the ranker module."""

from dataclasses import dataclass, field
from typing import ClassVar

from src.ranker.constants import WEIGHT_PERCENTILES


@dataclass
class RankerMetrics:
    """Metrics for ranker operations.

    Attributes:
        clusters_in: Number of input clusters.
        documents_in: Number of input documents.
        bucket_counts: Clusters per output category.
        weight_values: All weights for percentile calculation.
        scoring_duration_ms: Time spent weighting clusters.
        sort_duration_ms: Time spent sorting and bucketing.
    """

    clusters_in: int = 0
    documents_in: int = 0
    bucket_counts: dict[str, int] = field(default_factory=dict)
    weight_values: list[float] = field(default_factory=list)
    scoring_duration_ms: float = 0.0
    sort_duration_ms: float = 0.0

    _instance: ClassVar["RankerMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RankerMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def start_pass(self, clusters: int, documents: int) -> None:
        """Record input sizes and clear per-pass values.

        Args:
            clusters: Number of input clusters.
            documents: Number of input documents.
        """
        self.clusters_in = clusters
        self.documents_in = documents
        self.weight_values = []
        self.bucket_counts = {}

    def record_weight(self, weight: float) -> None:
        """Record a cluster weight for percentile calculation.

        Args:
            weight: Weight value.
        """
        self.weight_values.append(weight)

    def record_bucket_counts(self, counts: dict[str, int]) -> None:
        """Record the number of clusters per output category.

        Args:
            counts: Category value to cluster count.
        """
        self.bucket_counts = dict(counts)

    def record_scoring_duration(self, duration_ms: float) -> None:
        """Record scoring duration.

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.scoring_duration_ms = duration_ms

    def record_sort_duration(self, duration_ms: float) -> None:
        """Record sorting and bucketing duration.

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.sort_duration_ms = duration_ms

    def get_weight_percentiles(self) -> dict[str, float]:
        """Calculate weight percentiles (p50/p90/p99).

        Returns:
            Dictionary with p50, p90, p99 values.
        """
        if not self.weight_values:
            return {f"p{p}": 0.0 for p in WEIGHT_PERCENTILES}

        sorted_weights = sorted(self.weight_values)
        n = len(sorted_weights)

        def percentile(p: float) -> float:
            idx = int(p * n / 100)
            return sorted_weights[min(idx, n - 1)]

        return {f"p{p}": percentile(p) for p in WEIGHT_PERCENTILES}

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "clusters_in": self.clusters_in,
            "documents_in": self.documents_in,
            "bucket_counts": self.bucket_counts,
            "scoring_duration_ms": self.scoring_duration_ms,
            "sort_duration_ms": self.sort_duration_ms,
            "weight_percentiles": self.get_weight_percentiles(),
        }
