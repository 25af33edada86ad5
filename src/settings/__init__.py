"""Environment settings for the ranker CLI."""

from src.settings.app import AppSettings, get_settings


__all__ = ["AppSettings", "get_settings"]
