"""Data models for the cluster ranker."""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated

from pydantic import Field

from src.data_model import StrictBaseModel


class NewsCategory(str, Enum):
    """Topical category of a document or cluster.

    News categories are declared in ordinal order; the ordinal decides
    ties during majority voting. ``ANY`` is the synthetic output key that
    aggregates every cluster. ``NOT_NEWS`` and ``UNDEFINED`` are sentinels
    set by upstream classification and must be filtered out before ranking.
    """

    SOCIETY = "society"
    ECONOMY = "economy"
    TECHNOLOGY = "technology"
    SPORTS = "sports"
    ENTERTAINMENT = "entertainment"
    SCIENCE = "science"
    OTHER = "other"
    ANY = "any"
    NOT_NEWS = "not_news"
    UNDEFINED = "undefined"

    @property
    def is_news(self) -> bool:
        """Whether this is a real news category."""
        return self in NEWS_CATEGORIES

    @property
    def ordinal(self) -> int:
        """Position among news categories.

        Raises:
            ValueError: If the category is not a news category.
        """
        return NEWS_CATEGORIES.index(self)


NEWS_CATEGORIES: tuple[NewsCategory, ...] = (
    NewsCategory.SOCIETY,
    NewsCategory.ECONOMY,
    NewsCategory.TECHNOLOGY,
    NewsCategory.SPORTS,
    NewsCategory.ENTERTAINMENT,
    NewsCategory.SCIENCE,
    NewsCategory.OTHER,
)

# Output bucket keys, "any" first
OUTPUT_CATEGORIES: tuple[NewsCategory, ...] = (NewsCategory.ANY, *NEWS_CATEGORIES)


class Document(StrictBaseModel):
    """A fetched news article as produced by the clustering stage.

    Attributes:
        fetch_time: Fetch timestamp in seconds since the epoch.
        category: Category assigned upstream.
        url: Article URL.
        title: Article title.
        file_name: Identifier of the source file in input snapshots.
    """

    fetch_time: Annotated[int, Field(ge=0)]
    category: NewsCategory
    url: str
    title: str
    file_name: str = ""


# Ordered, non-empty; the first document is the representative
Cluster = Sequence[Document]

# Host name -> reputation score
AgencyRating = Mapping[str, float]


@dataclass(frozen=True)
class ScoreComponents:
    """Breakdown of a cluster weight into its multiplicative factors.

    Attributes:
        diversity: Sum of agency weights over distinct hosts.
        recency: Sigmoid recency multiplier in (0, 1).
        confidence: Small-cluster confidence factor in (0, 1].
        weight: Product of the three factors.
    """

    diversity: float
    recency: float
    confidence: float
    weight: float

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization.

        Returns:
            Dictionary of component name to value.
        """
        return {
            "diversity": self.diversity,
            "recency": self.recency,
            "confidence": self.confidence,
            "weight": self.weight,
        }


@dataclass(frozen=True)
class WeightedCluster:
    """A cluster with its computed category, title and weight.

    Attributes:
        cluster: The original cluster documents.
        category: Dominant category of the cluster.
        title: Title of the representative (first) document.
        weight: Importance weight.
        components: Factor breakdown of the weight.
    """

    cluster: tuple[Document, ...]
    category: NewsCategory
    title: str
    weight: float
    components: ScoreComponents | None = field(default=None, compare=False)

    def to_json_dict(self) -> dict[str, object]:
        """Convert to the presentation form of a thread."""
        return {
            "title": self.title,
            "category": self.category.value,
            "weight": self.weight,
            "articles": [doc.file_name or doc.url for doc in self.cluster],
        }


@dataclass(frozen=True)
class RankedOutput(Mapping[NewsCategory, tuple[WeightedCluster, ...]]):
    """Per-category ordered clusters, plus the aggregate "any" bucket.

    Every output category is present as a key, empty buckets included.
    Each bucket is sorted by descending weight.
    """

    buckets: dict[NewsCategory, tuple[WeightedCluster, ...]]

    def __getitem__(self, category: NewsCategory) -> tuple[WeightedCluster, ...]:
        return self.buckets[category]

    def __iter__(self) -> Iterator[NewsCategory]:
        return iter(self.buckets)

    def __len__(self) -> int:
        return len(self.buckets)

    def to_json_dict(self) -> list[dict[str, object]]:
        """Convert to JSON-serializable list of category threads.

        Returns:
            One entry per category with its ordered threads.
        """
        return [
            {
                "category": category.value,
                "threads": [wc.to_json_dict() for wc in clusters],
            }
            for category, clusters in self.buckets.items()
        ]


@dataclass(frozen=True)
class RankerResult:
    """Complete result of a ranking pass.

    Attributes:
        output: Ordered per-category buckets.
        clusters_in: Number of input clusters.
        documents_in: Number of input documents.
        reference_timestamp: Reference "now" used for recency.
        bucket_counts: Number of clusters per output category.
        weight_percentiles: p50/p90/p99 of cluster weights.
        output_checksum: SHA-256 of the ordered output JSON.
    """

    output: RankedOutput
    clusters_in: int
    documents_in: int
    reference_timestamp: int
    bucket_counts: dict[str, int] = field(default_factory=dict)
    weight_percentiles: dict[str, float] = field(default_factory=dict)
    output_checksum: str = ""
