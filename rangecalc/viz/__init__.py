"""Visualization module."""

from .display import RangeDisplay, display_equities, display_frequencies, format_percent

__all__ = [
    "RangeDisplay",
    "display_equities",
    "display_frequencies",
    "format_percent",
]
