"""
LedgerSettings schema.

Run settings for one ledger run. Values come from (lowest to highest
precedence) the defaults below, an optional YAML file, ``LEDGER_*``
environment variables and command-line arguments; ``ledger_config.loader``
composes them into one frozen instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_CHART_FILE = "kontoplan.csv"
DEFAULT_PERIOD_FILE = "regnskab.csv"
DEFAULT_BATCH_GLOB = "posteringer*.csv"
DEFAULT_ENCODING = "utf-8"
DEFAULT_LOG_LEVEL = "INFO"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LedgerSettings:
    """Where the run reads its files and how it logs."""

    input_dir: Path
    chart_file: str = DEFAULT_CHART_FILE
    period_file: str = DEFAULT_PERIOD_FILE
    batch_glob: str = DEFAULT_BATCH_GLOB
    encoding: str = DEFAULT_ENCODING
    log_level: str = DEFAULT_LOG_LEVEL
    verbose: bool = False

    @property
    def chart_path(self) -> Path:
        return self.input_dir / self.chart_file

    @property
    def period_path(self) -> Path:
        return self.input_dir / self.period_file
