"""Weight scoring engine for cluster ranking."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from src.config.schemas.ranking import ScoringConfig
from src.ranker.agency import (
    extract_host,
    lookup_agency_weight,
    normalize_agency_rating,
)
from src.ranker.constants import COMPONENT_RANKER
from src.ranker.errors import EmptyClusterError
from src.ranker.models import AgencyRating, Cluster, Document, ScoreComponents


logger = structlog.get_logger()

HostExtractor = Callable[[str], str]
AgencyWeigher = Callable[[Document, AgencyRating], float]


def sigmoid(x: float) -> float:
    """Logistic function, stable for large magnitudes of x."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


@dataclass
class ScorerConfig:
    """Configuration bundle for ClusterScorer.

    Attributes:
        scoring_config: Tuning parameters for the weight factors.
        host_extractor: Maps a document URL to its host.
        agency_weigher: Maps a document to its agency weight. Defaults to a
            rating lookup using scoring_config.default_agency_weight. It
            receives the rating keyed by normalized host.
        sigmoid: Squashing function for the recency multiplier.
    """

    scoring_config: ScoringConfig = field(default_factory=ScoringConfig)
    host_extractor: HostExtractor = extract_host
    agency_weigher: AgencyWeigher | None = None
    sigmoid: Callable[[float], float] = sigmoid


class ClusterScorer:
    """Computes importance weights for clusters.

    Scoring formula:
        weight = diversity * recency * confidence

    Where:
        - diversity: Sum of agency weights, counting each host once
        - recency: sigmoid of the cluster's age relative to the reference
          time, shifted so that recency_center_hours old maps to 0.5
        - confidence: min(size * small_cluster_coef, 1.0)
    """

    def __init__(
        self,
        agency_rating: AgencyRating,
        reference_timestamp: int,
        config: ScorerConfig | None = None,
        run_id: str = "pure",
    ) -> None:
        """Initialize the scorer.

        Args:
            agency_rating: Host to reputation score mapping. Keys are
                normalized like document hosts.
            reference_timestamp: Estimated current time in seconds.
            config: Scorer configuration bundle.
            run_id: Run identifier for logging.
        """
        config = config or ScorerConfig()
        self._agency_rating = normalize_agency_rating(agency_rating)
        self._reference_timestamp = reference_timestamp
        self._scoring = config.scoring_config
        self._host_extractor = config.host_extractor
        self._sigmoid = config.sigmoid
        self._agency_weigher = config.agency_weigher or self._default_agency_weigher
        self._log = logger.bind(
            component=COMPONENT_RANKER,
            subcomponent="scorer",
            run_id=run_id,
        )

    def _default_agency_weigher(
        self, document: Document, agency_rating: AgencyRating
    ) -> float:
        return lookup_agency_weight(
            agency_rating,
            self._host_extractor(document.url),
            default=self._scoring.default_agency_weight,
        )

    def score_components(self, cluster: Cluster) -> ScoreComponents:
        """Compute the weight of a cluster with its factor breakdown.

        Args:
            cluster: Non-empty cluster to score.

        Returns:
            ScoreComponents with the three factors and their product.

        Raises:
            EmptyClusterError: If the cluster has no documents.
        """
        if not cluster:
            raise EmptyClusterError()

        diversity = self._compute_diversity(cluster)
        recency = self._compute_recency(cluster)
        confidence = self._compute_confidence(cluster)

        return ScoreComponents(
            diversity=diversity,
            recency=recency,
            confidence=confidence,
            weight=diversity * recency * confidence,
        )

    def score_cluster(self, cluster: Cluster) -> float:
        """Compute the weight of a single cluster.

        Args:
            cluster: Non-empty cluster to score.

        Returns:
            Non-negative weight.
        """
        return self.score_components(cluster).weight

    def _compute_diversity(self, cluster: Cluster) -> float:
        """Sum agency weights over the first document of each host.

        Args:
            cluster: Cluster to score.

        Returns:
            Source diversity sum.
        """
        seen_hosts: set[str] = set()
        total = 0.0
        for doc in cluster:
            host = self._host_extractor(doc.url)
            if host in seen_hosts:
                continue
            seen_hosts.add(host)
            total += self._agency_weigher(doc, self._agency_rating)
        return total

    def _compute_recency(self, cluster: Cluster) -> float:
        """Compute the recency multiplier.

        ~1 for the freshest clusters, 0.5 at recency_center_hours old,
        ~0 at twice that age.

        Args:
            cluster: Cluster to score.

        Returns:
            Recency multiplier in (0, 1).
        """
        timestamps = sorted(doc.fetch_time for doc in cluster)
        index = math.floor(
            self._scoring.cluster_timestamp_percentile * (len(timestamps) - 1)
        )
        cluster_timestamp = timestamps[index]

        offset_seconds = cluster_timestamp - self._reference_timestamp
        hours = offset_seconds / self._scoring.seconds_per_hour
        return self._sigmoid(hours + self._scoring.recency_center_hours)

    def _compute_confidence(self, cluster: Cluster) -> float:
        """Pessimize clusters with few documents.

        Args:
            cluster: Cluster to score.

        Returns:
            Confidence factor in (0, 1].
        """
        return min(len(cluster) * self._scoring.small_cluster_coef, 1.0)


def score_cluster_weight(
    cluster: Cluster,
    agency_rating: AgencyRating,
    reference_timestamp: int,
    config: ScorerConfig | None = None,
) -> float:
    """Pure function API for scoring one cluster.

    Args:
        cluster: Non-empty cluster to score.
        agency_rating: Host to reputation score mapping.
        reference_timestamp: Estimated current time in seconds.
        config: Scorer configuration bundle.

    Returns:
        Non-negative cluster weight.
    """
    scorer = ClusterScorer(agency_rating, reference_timestamp, config=config)
    return scorer.score_cluster(cluster)
