from __future__ import annotations

import logging
from dataclasses import dataclass

from .settings import BenchmarkSettings

APP_LOGGER_NAME = "balance_bench"


@dataclass
class AppState:
    """Settings and logger handed from the CLI to the benchmark run."""

    settings: BenchmarkSettings
    logger: logging.Logger

    @classmethod
    def from_settings(cls, settings: BenchmarkSettings) -> AppState:
        return cls(settings=settings, logger=logging.getLogger(APP_LOGGER_NAME))
