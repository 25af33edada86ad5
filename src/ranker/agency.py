"""Host extraction and agency reputation lookup."""

import math
import re
from collections.abc import Callable, Mapping
from urllib.parse import urlparse

from src.config.constants import DEFAULT_AGENCY_WEIGHT
from src.ranker.models import AgencyRating, Document


# Scheme prefix such as "https://"; "//" later in the URL does not count
SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.\-]*://", re.IGNORECASE)


def normalize_host(host: str) -> str:
    """Normalize a host name for comparison and rating lookup.

    Args:
        host: Raw host name.

    Returns:
        Lowercased host without surrounding whitespace or a leading "www.".
    """
    return host.strip().lower().removeprefix("www.")


def extract_host(url: str) -> str:
    """Extract the normalized host name of a URL.

    Normalization includes:
    - Lowercasing the host
    - Dropping the port and any credentials
    - Stripping a leading "www."

    URLs without a scheme (e.g. "example.com/path") are accepted.
    Unparseable URLs have no host.

    Args:
        url: The URL to extract the host from.

    Returns:
        Host name, or an empty string if none can be found.
    """
    if not url:
        return ""

    if not SCHEME_PATTERN.match(url) and not url.startswith("//"):
        url = f"//{url}"

    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        # Malformed netloc, e.g. an unclosed IPv6 bracket
        return ""
    return normalize_host(host)


def normalize_agency_rating(agency_rating: AgencyRating) -> dict[str, float]:
    """Normalize rating keys the same way document hosts are normalized.

    When two raw keys normalize to the same host, the last one wins.

    Args:
        agency_rating: Host to reputation score mapping.

    Returns:
        Mapping keyed by normalized host.
    """
    return {normalize_host(host): score for host, score in agency_rating.items()}


def lookup_agency_weight(
    agency_rating: Mapping[str, float],
    host: str,
    default: float = DEFAULT_AGENCY_WEIGHT,
) -> float:
    """Look up the weight of a normalized host.

    Args:
        agency_rating: Mapping keyed by normalized host.
        host: Normalized host name.
        default: Weight for hosts missing from the rating.

    Returns:
        Non-negative agency weight. NaN scores count as zero.
    """
    weight = agency_rating.get(host, default)
    if math.isnan(weight) or weight < 0:
        return 0.0
    return weight


def compute_agency_weight(
    document: Document,
    agency_rating: Mapping[str, float],
    default: float = DEFAULT_AGENCY_WEIGHT,
    host_extractor: Callable[[str], str] = extract_host,
) -> float:
    """Look up the reputation weight of a document's source.

    Rating keys may be raw host names; they are normalized like document
    hosts before the lookup.

    Args:
        document: Document to weigh.
        agency_rating: Host to reputation score mapping.
        default: Weight for hosts missing from the rating.
        host_extractor: Maps the document URL to its host.

    Returns:
        Non-negative agency weight.
    """
    host = host_extractor(document.url)
    if host not in agency_rating:
        agency_rating = normalize_agency_rating(agency_rating)
    return lookup_agency_weight(agency_rating, host, default)
