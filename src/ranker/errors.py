"""Domain exceptions for the cluster ranker.

All of these signal a broken upstream contract (unfiltered or malformed
clusters reaching the ranking stage). They are programming errors and are
not meant to be caught and recovered from inside a ranking pass.
"""

from src.ranker.models import Document, NewsCategory


class RankerError(Exception):
    """Base exception for all ranker errors."""


class UnclassifiedDocumentError(RankerError):
    """Raised when a document without a news category reaches classification.

    Documents marked as undefined or not-news must be filtered out by the
    clustering stage before ranking.
    """

    def __init__(self, document: Document) -> None:
        """Initialize the error with the offending document.

        Args:
            document: Document carrying a non-news category.
        """
        self.document = document
        super().__init__(
            f"Document {document.url!r} has non-news category "
            f"{document.category.value!r}"
        )


class UndefinedCategoryError(RankerError):
    """Raised when a weighted cluster without a news category is bucketed."""

    def __init__(self, title: str, category: NewsCategory) -> None:
        """Initialize the error.

        Args:
            title: Representative title of the cluster.
            category: The category that was computed for it.
        """
        self.title = title
        self.category = category
        super().__init__(
            f"Cluster {title!r} has non-news category {category.value!r}"
        )


class EmptyClusterError(RankerError):
    """Raised when an empty cluster is passed to the ranker."""

    def __init__(self, message: str = "Cluster must contain at least one document") -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)
