"""Services for the ledger kernel (write side)."""

from ledger_kernel.services.ledger_engine import EngineState, LedgerEngine

__all__ = [
    "EngineState",
    "LedgerEngine",
]
