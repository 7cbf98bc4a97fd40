"""
Command-line driver for the batch ledger.

Reads a chart of accounts, a period and every batch file of an input
directory, then prints either the rejected batches or the balances.

Entry point: ``ledger`` console script or ``python -m scripts.cli``.
"""

from scripts.cli.main import main

__all__ = ["main"]
