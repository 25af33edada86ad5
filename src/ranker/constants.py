"""Constants for the ranker module."""

# Log component name
COMPONENT_RANKER = "ranker"

# Weight percentiles reported in run summaries
WEIGHT_PERCENTILES: tuple[int, ...] = (50, 90, 99)
