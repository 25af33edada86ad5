"""Majority-vote category assignment for clusters."""

from collections import Counter

import structlog

from src.ranker.constants import COMPONENT_RANKER
from src.ranker.errors import EmptyClusterError, UnclassifiedDocumentError
from src.ranker.models import NEWS_CATEGORIES, Cluster, NewsCategory


logger = structlog.get_logger()


def classify_category(cluster: Cluster) -> NewsCategory:
    """Return the most frequent category among the cluster's documents.

    Ties go to the category with the lowest ordinal.

    Args:
        cluster: Non-empty cluster of news documents.

    Returns:
        Dominant news category.

    Raises:
        EmptyClusterError: If the cluster has no documents.
        UnclassifiedDocumentError: If a document has a non-news category.
    """
    if not cluster:
        raise EmptyClusterError()

    counts: Counter[NewsCategory] = Counter()
    for doc in cluster:
        if not doc.category.is_news:
            logger.error(
                "unclassified_document",
                component=COMPONENT_RANKER,
                subcomponent="classifier",
                url=doc.url,
                category=doc.category.value,
            )
            raise UnclassifiedDocumentError(doc)
        counts[doc.category] += 1

    best = NEWS_CATEGORIES[0]
    for category in NEWS_CATEGORIES:
        if counts[category] > counts[best]:
            best = category
    return best
