"""Roulette helpers shared by the seating engine."""

from .highlight import ROULETTE_INTERVAL_MS, HighlightConfig, HighlightTicker

__all__ = ["ROULETTE_INTERVAL_MS", "HighlightConfig", "HighlightTicker"]
