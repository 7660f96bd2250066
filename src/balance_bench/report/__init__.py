from __future__ import annotations

from .formatter import format_statistics_table
from .publisher import build_output, publish_results

__all__ = [
    "build_output",
    "format_statistics_table",
    "publish_results",
]
