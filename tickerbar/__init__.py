"""Stock and crypto readouts for status bars, with a scrolling ticker mode."""

__version__ = "0.3.0"
