"""Ingestion services: loaders, batch discovery and the run service."""

from ledger_ingestion.services.batch_source import (
    BatchFile,
    discover_batch_files,
    read_batches,
)
from ledger_ingestion.services.chart_loader import load_chart_of_accounts
from ledger_ingestion.services.period_loader import load_period
from ledger_ingestion.services.run_service import LedgerRun, LedgerRunService

__all__ = [
    "BatchFile",
    "LedgerRun",
    "LedgerRunService",
    "discover_batch_files",
    "load_chart_of_accounts",
    "load_period",
    "read_batches",
]
