"""Batched frame-classification quality evaluation for videos."""

__version__ = "0.0.1"
