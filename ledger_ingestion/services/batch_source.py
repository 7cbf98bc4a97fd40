"""
Batch source -- discovers and reads batch files.

Batch files are matched by a glob (default ``posteringer*.csv``) in the
top level of the input directory and returned in lexicographic order of
file name, so a run is reproducible. Each batch is read completely; the
file name is the batch label.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ledger_ingestion.adapters import CsvSourceAdapter

DEFAULT_BATCH_GLOB = "posteringer*.csv"


@dataclass(frozen=True)
class BatchFile:
    """One batch as read from disk."""

    label: str
    path: Path
    lines: tuple[str, ...]


def discover_batch_files(directory: Path, pattern: str = DEFAULT_BATCH_GLOB) -> list[Path]:
    return sorted(
        (p for p in directory.glob(pattern) if p.is_file()),
        key=lambda p: p.name,
    )


def read_batches(
    directory: Path,
    pattern: str = DEFAULT_BATCH_GLOB,
    options: dict[str, Any] | None = None,
    adapter: CsvSourceAdapter | None = None,
) -> list[BatchFile]:
    adapter = adapter or CsvSourceAdapter()
    return [
        BatchFile(label=path.name, path=path, lines=tuple(adapter.read_lines(path, options)))
        for path in discover_batch_files(directory, pattern)
    ]
