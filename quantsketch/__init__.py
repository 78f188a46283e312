"""Quantile sketches on a logarithmic key grid, with running summaries and an insert-buffering agent."""

__version__ = "0.1.0"
__all__ = ["agent", "bin", "config", "ddsketch", "equal", "key", "sketch", "store", "summary"]