"""News cluster ranker.

This module assigns each cluster of near-duplicate articles a dominant
category and an importance weight, then orders clusters per category
for presentation. Every pass is a pure recomputation over its inputs.
"""

from src.ranker.agency import (
    compute_agency_weight,
    extract_host,
    lookup_agency_weight,
    normalize_agency_rating,
    normalize_host,
)
from src.ranker.classifier import classify_category
from src.ranker.errors import (
    EmptyClusterError,
    RankerError,
    UndefinedCategoryError,
    UnclassifiedDocumentError,
)
from src.ranker.models import (
    NEWS_CATEGORIES,
    Document,
    NewsCategory,
    RankedOutput,
    RankerResult,
    ScoreComponents,
    WeightedCluster,
)
from src.ranker.ranker import (
    ClusterRanker,
    partition_by_category,
    rank_clusters,
    rank_clusters_pure,
)
from src.ranker.scorer import ClusterScorer, ScorerConfig, score_cluster_weight, sigmoid
from src.ranker.state_machine import RankerState, RankerStateMachine
from src.ranker.timestamp import estimate_reference_timestamp


__all__ = [
    "NEWS_CATEGORIES",
    "ClusterRanker",
    "ClusterScorer",
    "Document",
    "EmptyClusterError",
    "NewsCategory",
    "RankedOutput",
    "RankerError",
    "RankerResult",
    "RankerState",
    "RankerStateMachine",
    "ScoreComponents",
    "ScorerConfig",
    "UnclassifiedDocumentError",
    "UndefinedCategoryError",
    "WeightedCluster",
    "classify_category",
    "compute_agency_weight",
    "estimate_reference_timestamp",
    "extract_host",
    "lookup_agency_weight",
    "normalize_agency_rating",
    "normalize_host",
    "partition_by_category",
    "rank_clusters",
    "rank_clusters_pure",
    "score_cluster_weight",
    "sigmoid",
]
