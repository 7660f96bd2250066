"""Benchmark of third-party blockchain balance APIs."""

__version__ = "0.1.0"
