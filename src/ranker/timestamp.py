"""Reference timestamp estimation over noisy document clocks."""

import heapq
import math
from collections.abc import Iterable

import structlog

from src.ranker.constants import COMPONENT_RANKER
from src.ranker.models import Cluster


logger = structlog.get_logger()


def estimate_reference_timestamp(
    clusters: Iterable[Cluster],
    percentile: float,
) -> int:
    """Estimate the current time as an upper percentile of fetch times.

    Wall-clock time is not used because a small share of documents carry
    corrupted dates. Only the k = N - floor(percentile * N) largest fetch
    times are kept in a bounded min-heap; the smallest of them is the
    estimate.

    Args:
        clusters: All clusters of the ranking pass.
        percentile: Percentile in the open interval (0, 1).

    Returns:
        A fetch time present in the input, or 0 if there are no documents.

    Raises:
        ValueError: If percentile is outside (0, 1).
    """
    if not 0.0 < percentile < 1.0:
        msg = f"percentile must be in (0, 1), got {percentile}"
        raise ValueError(msg)

    clusters = list(clusters)
    num_docs = sum(len(cluster) for cluster in clusters)
    keep = num_docs - math.floor(percentile * num_docs)

    timestamps: list[int] = []
    for cluster in clusters:
        for doc in cluster:
            heapq.heappush(timestamps, doc.fetch_time)
            if len(timestamps) > keep:
                heapq.heappop(timestamps)

    log = logger.bind(component=COMPONENT_RANKER, subcomponent="timestamp")
    if not timestamps:
        log.warning("reference_timestamp_empty_input", clusters=len(clusters))
        return 0

    reference = timestamps[0]
    log.debug(
        "reference_timestamp_estimated",
        documents=num_docs,
        percentile=percentile,
        reference_timestamp=reference,
    )
    return reference
