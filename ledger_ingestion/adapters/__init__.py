"""Source adapters for ledger ingestion (file I/O only)."""

from ledger_ingestion.adapters.csv_adapter import CsvSourceAdapter

__all__ = [
    "CsvSourceAdapter",
]
