"""Unit tests for the cluster ranker orchestrator."""

import pytest

from src.config.schemas.ranking import RankingConfig
from src.ranker.errors import UnclassifiedDocumentError, UndefinedCategoryError
from src.ranker.metrics import RankerMetrics
from src.ranker.models import (
    OUTPUT_CATEGORIES,
    Document,
    NewsCategory,
    RankedOutput,
    WeightedCluster,
)
from src.ranker.ranker import (
    ClusterRanker,
    partition_by_category,
    rank_clusters,
    rank_clusters_pure,
)
from src.ranker.state_machine import RankerState, RankerStateTransitionError
from src.ranker.timestamp import estimate_reference_timestamp
from tests.helpers.time import FIXED_NOW_TS, HOUR


AGENCY_RATING = {
    "reuters.com": 1.0,
    "bbc.co.uk": 0.9,
    "cnn.com": 0.7,
    "blog.example": 0.1,
}


def _make_cluster(
    title: str,
    category: NewsCategory = NewsCategory.SOCIETY,
    hosts: tuple[str, ...] = ("reuters.com",),
    age_hours: float = 0.0,
) -> list[Document]:
    """Create a cluster whose documents share category and age."""
    fetch_time = FIXED_NOW_TS - int(age_hours * HOUR)
    return [
        Document(
            fetch_time=fetch_time,
            category=category,
            url=f"https://{host}/{title.lower().replace(' ', '-')}/{idx}",
            title=title if idx == 0 else f"{title} ({host})",
        )
        for idx, host in enumerate(hosts)
    ]


def _make_ranker(run_id: str = "test") -> ClusterRanker:
    """Create a ClusterRanker with defaults."""
    return ClusterRanker(
        run_id=run_id,
        agency_rating=AGENCY_RATING,
        reference_timestamp=FIXED_NOW_TS,
        metrics=RankerMetrics(),
    )


def _titles(clusters: tuple[WeightedCluster, ...]) -> list[str]:
    return [wc.title for wc in clusters]


def _sample_clusters() -> list[list[Document]]:
    """Clusters spanning several categories, sizes and ages."""
    return [
        _make_cluster("Minor blog post", hosts=("blog.example",)),
        _make_cluster(
            "Election results",
            hosts=("reuters.com", "bbc.co.uk", "cnn.com", "reuters.com", "cnn.com"),
        ),
        _make_cluster(
            "Cup final",
            NewsCategory.SPORTS,
            hosts=("bbc.co.uk", "cnn.com", "bbc.co.uk"),
            age_hours=2,
        ),
        _make_cluster(
            "Old markets story",
            NewsCategory.ECONOMY,
            hosts=("reuters.com", "bbc.co.uk", "cnn.com", "cnn.com", "cnn.com"),
            age_hours=30,
        ),
        _make_cluster(
            "Chip launch",
            NewsCategory.TECHNOLOGY,
            hosts=("cnn.com", "reuters.com"),
            age_hours=1,
        ),
    ]


class TestRankerOutput:
    """Tests for the ranked output structure."""

    def test_all_output_keys_present(self) -> None:
        """Every news category and "any" is a key, even when empty."""
        output = rank_clusters(_sample_clusters(), AGENCY_RATING, FIXED_NOW_TS)

        assert isinstance(output, RankedOutput)
        assert list(output) == list(OUTPUT_CATEGORIES)
        assert output[NewsCategory.SCIENCE] == ()

    def test_each_cluster_in_exactly_two_buckets(self) -> None:
        """A cluster appears in its category bucket and in "any"."""
        output = rank_clusters(_sample_clusters(), AGENCY_RATING, FIXED_NOW_TS)

        occurrences: dict[str, list[NewsCategory]] = {}
        for category, clusters in output.items():
            for wc in clusters:
                occurrences.setdefault(wc.title, []).append(category)

        assert len(occurrences) == 5
        for title, categories in occurrences.items():
            assert len(categories) == 2, title
            assert NewsCategory.ANY in categories

    def test_buckets_sorted_by_descending_weight(self) -> None:
        """Every bucket is ordered by non-increasing weight."""
        output = rank_clusters(_sample_clusters(), AGENCY_RATING, FIXED_NOW_TS)

        for clusters in output.values():
            weights = [wc.weight for wc in clusters]
            assert weights == sorted(weights, reverse=True)

    def test_expected_global_order(self) -> None:
        """Diverse, fresh, large clusters rank first."""
        output = rank_clusters(_sample_clusters(), AGENCY_RATING, FIXED_NOW_TS)

        assert _titles(output[NewsCategory.ANY]) == [
            "Election results",
            "Cup final",
            "Chip launch",
            "Minor blog post",
            "Old markets story",
        ]

    def test_title_and_category_from_cluster(self) -> None:
        """Title comes from the first document, category from the vote."""
        cluster = _make_cluster("Lead headline", hosts=("cnn.com", "bbc.co.uk"))
        cluster.append(
            Document(
                fetch_time=FIXED_NOW_TS,
                category=NewsCategory.ECONOMY,
                url="https://reuters.com/x",
                title="Other headline",
            )
        )

        output = rank_clusters([cluster], AGENCY_RATING, FIXED_NOW_TS)
        (wc,) = output[NewsCategory.ANY]

        assert wc.title == "Lead headline"
        assert wc.category == NewsCategory.SOCIETY
        assert wc.cluster == tuple(cluster)
        assert output[NewsCategory.SOCIETY] == (wc,)

    def test_empty_input(self) -> None:
        """No clusters yields empty buckets for every key."""
        output = rank_clusters([], AGENCY_RATING, FIXED_NOW_TS)

        assert len(output) == len(OUTPUT_CATEGORIES)
        assert all(clusters == () for clusters in output.values())

    def test_does_not_mutate_input(self) -> None:
        """Input clusters are left untouched."""
        clusters = _sample_clusters()
        snapshot = [list(cluster) for cluster in clusters]

        rank_clusters(clusters, AGENCY_RATING, FIXED_NOW_TS)

        assert clusters == snapshot


class TestStability:
    """Tests for stable ordering of equal weights."""

    def test_equal_weights_keep_input_order(self) -> None:
        """Ties keep their relative input order in every shared bucket."""
        first = _make_cluster("First twin", hosts=("cnn.com", "bbc.co.uk"))
        second = _make_cluster("Second twin", hosts=("cnn.com", "bbc.co.uk"))
        leader = _make_cluster(
            "Leader", hosts=("reuters.com", "bbc.co.uk", "cnn.com")
        )

        output = rank_clusters([first, leader, second], AGENCY_RATING, FIXED_NOW_TS)

        assert _titles(output[NewsCategory.ANY]) == [
            "Leader",
            "First twin",
            "Second twin",
        ]
        assert _titles(output[NewsCategory.SOCIETY]) == [
            "Leader",
            "First twin",
            "Second twin",
        ]

    def test_reversed_input_reverses_ties(self) -> None:
        """Swapping tied clusters in the input swaps them in the output."""
        first = _make_cluster("First twin", hosts=("cnn.com",))
        second = _make_cluster("Second twin", hosts=("cnn.com",))

        output = rank_clusters([second, first], AGENCY_RATING, FIXED_NOW_TS)

        assert _titles(output[NewsCategory.ANY]) == ["Second twin", "First twin"]

    def test_zero_weights_keep_input_order(self) -> None:
        """Clusters from unrated hosts tie at zero and stay in order."""
        titles = [f"Unrated {i}" for i in range(6)]
        clusters = [_make_cluster(t, hosts=("nobody.example",)) for t in titles]

        output = rank_clusters(clusters, AGENCY_RATING, FIXED_NOW_TS)

        assert _titles(output[NewsCategory.ANY]) == titles


class TestDeterminism:
    """Tests for purity of ranking passes."""

    def test_identical_inputs_identical_output(self) -> None:
        """Re-running with the same inputs reproduces the output."""
        clusters = _sample_clusters()

        first = rank_clusters(clusters, AGENCY_RATING, FIXED_NOW_TS)
        second = rank_clusters(clusters, AGENCY_RATING, FIXED_NOW_TS)

        assert first == second
        assert first.to_json_dict() == second.to_json_dict()

    def test_checksum_stable(self) -> None:
        """Output checksum is reproducible across passes."""
        clusters = _sample_clusters()

        first = rank_clusters_pure(clusters, AGENCY_RATING, FIXED_NOW_TS)
        second = rank_clusters_pure(clusters, AGENCY_RATING, FIXED_NOW_TS)

        assert first.output_checksum == second.output_checksum
        assert len(first.output_checksum) == 64


class TestPreconditions:
    """Tests for fail-fast contract violations."""

    def test_non_news_document_fails(self) -> None:
        """An unfiltered not-news document aborts the pass."""
        clusters = _sample_clusters()
        clusters.append(_make_cluster("Advert", NewsCategory.NOT_NEWS))

        with pytest.raises(UnclassifiedDocumentError):
            rank_clusters(clusters, AGENCY_RATING, FIXED_NOW_TS)

    def test_undefined_category_rejected_at_bucketing(self) -> None:
        """A weighted cluster with an undefined category cannot be bucketed."""
        cluster = tuple(_make_cluster("Broken"))
        weighted = [
            WeightedCluster(
                cluster=cluster,
                category=NewsCategory.UNDEFINED,
                title="Broken",
                weight=1.0,
            )
        ]

        with pytest.raises(UndefinedCategoryError) as exc_info:
            partition_by_category(weighted)

        assert exc_info.value.title == "Broken"

    def test_partition_preserves_given_order(self) -> None:
        """Partitioning appends in input order without re-sorting."""
        low = WeightedCluster(
            cluster=tuple(_make_cluster("Low")),
            category=NewsCategory.SPORTS,
            title="Low",
            weight=0.1,
        )
        high = WeightedCluster(
            cluster=tuple(_make_cluster("High")),
            category=NewsCategory.SPORTS,
            title="High",
            weight=0.9,
        )

        output = partition_by_category([low, high])

        assert _titles(output[NewsCategory.SPORTS]) == ["Low", "High"]
        assert _titles(output[NewsCategory.ANY]) == ["Low", "High"]


class TestClusterRanker:
    """Tests for the stateful orchestrator."""

    def test_full_state_lifecycle(self) -> None:
        """Ranker transitions through all states."""
        ranker = _make_ranker()
        assert ranker.state == RankerState.CLUSTERS_READY

        ranker.rank(_sample_clusters())

        assert ranker.state == RankerState.BUCKETED  # type: ignore[comparison-overlap]

    def test_single_pass_only(self) -> None:
        """A ranker instance cannot be reused."""
        ranker = _make_ranker()
        ranker.rank(_sample_clusters())

        with pytest.raises(RankerStateTransitionError):
            ranker.rank(_sample_clusters())

    def test_result_statistics(self) -> None:
        """Result carries input sizes and bucket counts."""
        result = _make_ranker().rank(_sample_clusters())

        assert result.clusters_in == 5
        assert result.documents_in == 16
        assert result.reference_timestamp == FIXED_NOW_TS
        assert result.bucket_counts["any"] == 5
        assert result.bucket_counts["society"] == 2
        assert result.bucket_counts["science"] == 0
        assert set(result.weight_percentiles) == {"p50", "p90", "p99"}

    def test_components_attached(self) -> None:
        """Weighted clusters expose their factor breakdown."""
        result = _make_ranker().rank(_sample_clusters())

        for wc in result.output[NewsCategory.ANY]:
            assert wc.components is not None
            assert wc.components.weight == wc.weight

    def test_records_metrics(self) -> None:
        """Metrics reflect the last pass."""
        metrics = RankerMetrics()
        ranker = ClusterRanker(
            run_id="test",
            agency_rating=AGENCY_RATING,
            reference_timestamp=FIXED_NOW_TS,
            metrics=metrics,
        )

        ranker.rank(_sample_clusters())

        assert metrics.clusters_in == 5
        assert len(metrics.weight_values) == 5
        assert metrics.bucket_counts["sports"] == 1


class TestRankClustersPure:
    """Tests for the full-pass pure API."""

    def test_estimates_reference_when_missing(self) -> None:
        """Without a reference timestamp the documents decide "now"."""
        clusters = _sample_clusters()

        result = rank_clusters_pure(clusters, AGENCY_RATING)

        assert result.reference_timestamp == estimate_reference_timestamp(
            clusters, RankingConfig().reference_percentile
        )

    def test_explicit_reference_wins(self) -> None:
        """An explicit reference timestamp is used as is."""
        result = rank_clusters_pure(
            _sample_clusters(), AGENCY_RATING, reference_timestamp=123
        )
        assert result.reference_timestamp == 123

    def test_matches_rank_clusters(self) -> None:
        """The pure API and rank_clusters agree on the output."""
        clusters = _sample_clusters()

        result = rank_clusters_pure(clusters, AGENCY_RATING, FIXED_NOW_TS)

        assert result.output == rank_clusters(clusters, AGENCY_RATING, FIXED_NOW_TS)
