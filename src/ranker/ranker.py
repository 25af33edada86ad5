"""Main cluster ranker orchestrator."""

import hashlib
import json
import time
from collections.abc import Sequence

import structlog

from src.config.schemas.ranking import RankingConfig
from src.ranker.classifier import classify_category
from src.ranker.constants import COMPONENT_RANKER
from src.ranker.errors import UndefinedCategoryError
from src.ranker.metrics import RankerMetrics
from src.ranker.models import (
    OUTPUT_CATEGORIES,
    AgencyRating,
    Cluster,
    NewsCategory,
    RankedOutput,
    RankerResult,
    WeightedCluster,
)
from src.ranker.scorer import ClusterScorer, ScorerConfig
from src.ranker.state_machine import RankerState, RankerStateMachine
from src.ranker.timestamp import estimate_reference_timestamp


logger = structlog.get_logger()


def partition_by_category(weighted: Sequence[WeightedCluster]) -> RankedOutput:
    """Partition weight-ordered clusters into per-category buckets.

    Every cluster is appended to its own category bucket and to the "any"
    bucket, in input order, so buckets inherit the ordering of the input.

    Args:
        weighted: Clusters already sorted by descending weight.

    Returns:
        RankedOutput keyed by "any" and every news category.

    Raises:
        UndefinedCategoryError: If a cluster has a non-news category.
    """
    buckets: dict[NewsCategory, list[WeightedCluster]] = {
        category: [] for category in OUTPUT_CATEGORIES
    }
    for wc in weighted:
        if not wc.category.is_news:
            logger.error(
                "undefined_cluster_category",
                component=COMPONENT_RANKER,
                title=wc.title,
                category=wc.category.value,
            )
            raise UndefinedCategoryError(wc.title, wc.category)
        buckets[wc.category].append(wc)
        buckets[NewsCategory.ANY].append(wc)

    return RankedOutput(
        buckets={category: tuple(items) for category, items in buckets.items()}
    )


class ClusterRanker:
    """Orchestrates cluster ranking with classification, scoring and bucketing.

    Implements a state machine flow:
        CLUSTERS_READY -> WEIGHTED -> SORTED -> BUCKETED

    A ranker instance performs a single pass.
    """

    def __init__(
        self,
        run_id: str,
        agency_rating: AgencyRating,
        reference_timestamp: int,
        scorer_config: ScorerConfig | None = None,
        metrics: RankerMetrics | None = None,
    ) -> None:
        """Initialize the ranker.

        Args:
            run_id: Run identifier for logging and state.
            agency_rating: Host to reputation score mapping.
            reference_timestamp: Estimated current time in seconds.
            scorer_config: Scorer configuration bundle.
            metrics: Optional metrics instance.
        """
        self._run_id = run_id
        self._reference_timestamp = reference_timestamp
        self._scorer = ClusterScorer(
            agency_rating,
            reference_timestamp,
            config=scorer_config,
            run_id=run_id,
        )
        self._metrics = metrics or RankerMetrics.get_instance()
        self._state_machine = RankerStateMachine(run_id)
        self._log = logger.bind(component=COMPONENT_RANKER, run_id=run_id)

    @property
    def state(self) -> RankerState:
        """Get current ranker state."""
        return self._state_machine.state

    def rank(self, clusters: Sequence[Cluster]) -> RankerResult:
        """Rank clusters and produce per-category ordered buckets.

        This is the main entry point for the ranker.

        Args:
            clusters: Non-empty clusters from the clustering stage.

        Returns:
            RankerResult with output buckets and statistics.
        """
        documents_in = sum(len(cluster) for cluster in clusters)
        self._log.info(
            "ranker_started",
            clusters_in=len(clusters),
            documents_in=documents_in,
            reference_timestamp=self._reference_timestamp,
        )
        self._metrics.start_pass(len(clusters), documents_in)

        # Phase 1: Weight all clusters
        start_score = time.perf_counter()
        weighted = [self._weigh_cluster(cluster) for cluster in clusters]
        self._state_machine.to_weighted()
        self._metrics.record_scoring_duration(
            (time.perf_counter() - start_score) * 1000
        )
        for wc in weighted:
            self._metrics.record_weight(wc.weight)

        self._log.info(
            "scoring_complete",
            clusters_scored=len(weighted),
            min_weight=min((wc.weight for wc in weighted), default=0.0),
            max_weight=max((wc.weight for wc in weighted), default=0.0),
        )

        # Phase 2: Stable sort, equal weights keep input order
        start_sort = time.perf_counter()
        ordered = sorted(weighted, key=lambda wc: wc.weight, reverse=True)
        self._state_machine.to_sorted()

        # Phase 3: Bucket by category
        output = partition_by_category(ordered)
        self._state_machine.to_bucketed()
        self._metrics.record_sort_duration((time.perf_counter() - start_sort) * 1000)

        bucket_counts = {
            category.value: len(items) for category, items in output.items()
        }
        self._metrics.record_bucket_counts(bucket_counts)

        result = RankerResult(
            output=output,
            clusters_in=len(clusters),
            documents_in=documents_in,
            reference_timestamp=self._reference_timestamp,
            bucket_counts=bucket_counts,
            weight_percentiles=self._metrics.get_weight_percentiles(),
            output_checksum=self._compute_checksum(output),
        )

        self._log.info(
            "ranker_complete",
            clusters_in=len(clusters),
            any_count=bucket_counts[NewsCategory.ANY.value],
            output_checksum=result.output_checksum,
        )

        return result

    def _weigh_cluster(self, cluster: Cluster) -> WeightedCluster:
        """Compute category, title and weight of one cluster.

        Args:
            cluster: Cluster to weigh.

        Returns:
            WeightedCluster for the cluster.
        """
        category = classify_category(cluster)
        components = self._scorer.score_components(cluster)
        return WeightedCluster(
            cluster=tuple(cluster),
            category=category,
            title=cluster[0].title,
            weight=components.weight,
            components=components,
        )

    def _compute_checksum(self, output: RankedOutput) -> str:
        """Compute SHA-256 checksum of ordered output.

        Args:
            output: Ranked output buckets.

        Returns:
            SHA-256 hex digest.
        """
        json_str = json.dumps(
            output.to_json_dict(), sort_keys=True, separators=(",", ":")
        )
        return hashlib.sha256(json_str.encode("utf-8")).hexdigest()


def rank_clusters(
    clusters: Sequence[Cluster],
    agency_rating: AgencyRating,
    reference_timestamp: int,
    config: ScorerConfig | None = None,
) -> RankedOutput:
    """Rank clusters into per-category buckets.

    Args:
        clusters: Non-empty clusters from the clustering stage.
        agency_rating: Host to reputation score mapping.
        reference_timestamp: Estimated current time in seconds.
        config: Scorer configuration bundle.

    Returns:
        RankedOutput with buckets sorted by descending weight.
    """
    ranker = ClusterRanker(
        run_id="pure",
        agency_rating=agency_rating,
        reference_timestamp=reference_timestamp,
        scorer_config=config,
        metrics=RankerMetrics(),
    )
    return ranker.rank(clusters).output


def rank_clusters_pure(
    clusters: Sequence[Cluster],
    agency_rating: AgencyRating,
    reference_timestamp: int | None = None,
    ranking_config: RankingConfig | None = None,
    run_id: str = "pure",
) -> RankerResult:
    """Pure function API for a full ranking pass.

    Args:
        clusters: Non-empty clusters from the clustering stage.
        agency_rating: Host to reputation score mapping.
        reference_timestamp: Current time in seconds. Estimated from the
            documents when None.
        ranking_config: Ranking configuration.
        run_id: Run identifier.

    Returns:
        RankerResult with output buckets and statistics.
    """
    ranking_config = ranking_config or RankingConfig()
    if reference_timestamp is None:
        reference_timestamp = estimate_reference_timestamp(
            clusters, ranking_config.reference_percentile
        )

    ranker = ClusterRanker(
        run_id=run_id,
        agency_rating=agency_rating,
        reference_timestamp=reference_timestamp,
        scorer_config=ScorerConfig(scoring_config=ranking_config.scoring),
    )
    return ranker.rank(clusters)
