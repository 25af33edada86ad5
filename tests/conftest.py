"""Shared pytest fixtures."""

from collections.abc import Iterator

import pytest
import structlog

from src.ranker.metrics import RankerMetrics


@pytest.fixture(autouse=True)
def _reset_global_state() -> Iterator[None]:
    """Reset logging configuration and metrics singleton between tests."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    RankerMetrics.reset()
