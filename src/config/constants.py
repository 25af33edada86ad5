"""Constants for the configuration module.

Ranking values are tuned defaults and are overridable through
``RankingConfig``.
"""

# Upper percentile of all fetch times used as the reference "now"
DEFAULT_REFERENCE_PERCENTILE: float = 0.9

# Percentile of a cluster's own fetch times used as its timestamp
CLUSTER_TIMESTAMP_PERCENTILE: float = 0.9

# Age in hours at which the recency multiplier crosses 0.5
RECENCY_CENTER_HOURS: float = 12.0

SECONDS_PER_HOUR: int = 3600

# Clusters smaller than 1 / SMALL_CLUSTER_COEF documents are pessimized
SMALL_CLUSTER_COEF: float = 0.2

# Agency weight for hosts missing from the rating
DEFAULT_AGENCY_WEIGHT: float = 0.0

# Log component names
COMPONENT_CONFIG = "config"
COMPONENT_CLI = "cli"

# File type identifiers
FILE_TYPE_RANKING = "ranking"
FILE_TYPE_AGENCY_RATING = "agency_rating"

# Supported agency rating file suffixes
AGENCY_RATING_SUFFIXES = (".yaml", ".yml", ".json")
