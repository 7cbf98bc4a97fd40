"""
ledger_ingestion -- File-driven loading of a ledger run.

Reads the chart of accounts, the accounting period and the batch files
from an input directory and drives the ledger_kernel engine over them.

Architecture:
    ledger_ingestion/ is a top-level package. Nothing in ledger_kernel/
    imports from ingestion.
"""
