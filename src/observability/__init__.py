"""Structured logging for ranking runs."""

from src.observability.logging import bind_run_context, configure_logging


__all__ = ["bind_run_context", "configure_logging"]
