"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- File system
- Configuration
- Time/clock

All domain objects are immutable and deterministic.
"""

from ledger_kernel.domain.accounts import (
    Account,
    AccountKind,
    AccountRegistry,
    SumRange,
    VatCode,
    parse_account_kind,
)
from ledger_kernel.domain.dtos import (
    BatchResult,
    BatchStatus,
    Posting,
    PostingOrigin,
    PostingSet,
    RawRecord,
    ValidationError,
)
from ledger_kernel.domain.period import Period

__all__ = [
    "Account",
    "AccountKind",
    "AccountRegistry",
    "BatchResult",
    "BatchStatus",
    "Period",
    "Posting",
    "PostingOrigin",
    "PostingSet",
    "RawRecord",
    "SumRange",
    "ValidationError",
    "VatCode",
    "parse_account_kind",
]
