"""
Semicolon-separated source adapter.

Reads the ledger's input files completely before any processing starts.
Handles the UTF-8 BOM via utf-8-sig when encoding is utf-8. Two views of
a file are offered: raw lines (batches, whose header must match
byte-for-byte) and split rows with 1-based line numbers (chart and period
files).
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any

from ledger_kernel.exceptions import SourceFileError


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() in ("utf-8", "utf8"):
        return "utf-8-sig"  # Strip BOM if present
    return enc


class CsvSourceAdapter:
    """Read ``;``-separated ledger files."""

    def read_lines(self, source_path: Path, options: dict[str, Any] | None = None) -> list[str]:
        """All lines of the file without line terminators."""
        options = options or {}
        try:
            with source_path.open("r", encoding=_get_encoding(options), newline="") as f:
                return f.read().splitlines()
        except FileNotFoundError as exc:
            raise SourceFileError(str(source_path), "file not found") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceFileError(str(source_path), f"cannot read file: {exc}") from exc

    def read_rows(
        self, source_path: Path, options: dict[str, Any] | None = None
    ) -> list[tuple[int, list[str]]]:
        """
        Split non-blank lines into fields.

        Returns ``(line_number, fields)`` pairs; line numbers are 1-based and
        count blank lines, so they match what an editor shows.
        """
        options = options or {}
        delimiter = options.get("delimiter", ";")
        rows: list[tuple[int, list[str]]] = []
        for number, line in enumerate(self.read_lines(source_path, options), start=1):
            if not line.strip():
                continue
            fields = next(csv.reader([line], delimiter=delimiter))
            rows.append((number, [f.strip() for f in fields]))
        return rows
