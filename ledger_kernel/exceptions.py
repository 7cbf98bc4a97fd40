"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers must be able to react to a failure without parsing its message.
Every exception here has:
  1. A TYPED class (catch by type, not message)
  2. A CODE class attribute (machine-readable)
  3. Structured DATA attributes (line numbers, offending values)

Record-level defects inside a batch are NOT raised. They are collected as
``ValidationError`` values (see ``ledger_kernel.domain.dtos``) and returned
in a ``BatchResult`` so that a user sees every defect of a file in one pass.
Exceptions are reserved for configuration defects and state violations.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- ChartOfAccountsError
    |   +-- DuplicateAccountError
    |   +-- MalformedRecordError
    |   +-- InvalidFieldValueError
    |
    +-- PeriodConfigError
    |   +-- InvalidPeriodError
    |   +-- InvalidVatAccountConfigError
    |
    +-- EngineStateError
    |   +-- AlreadyFinalizedError
    |
    +-- InvalidGeneratedPostingError
    |
    +-- SourceFileError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Chart           | DUPLICATE_ACCOUNT           | Two accounts share a number
                | MALFORMED_RECORD            | Wrong column count, non-integer number
                | INVALID_FIELD_VALUE         | Unknown kind / VAT code, Status with VAT
----------------|-----------------------------|-----------------------------------------
Period          | INVALID_PERIOD              | Bad dates, span > 731 days, bad rate
                | INVALID_VAT_ACCOUNT_CONFIG  | VAT accounts inconsistent with rate
----------------|-----------------------------|-----------------------------------------
Engine          | ALREADY_FINALIZED           | ingest/finalize after finalize
                | INVALID_GENERATED_POSTING   | VAT posting fails validation
----------------|-----------------------------|-----------------------------------------
Source          | SOURCE_FILE_ERROR           | Missing or unreadable input file
"""

from __future__ import annotations

from typing import Any, Sequence


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Chart-of-accounts exceptions


class ChartOfAccountsError(LedgerKernelError):
    """Base exception for chart-of-accounts errors."""

    code: str = "CHART_OF_ACCOUNTS_ERROR"


class DuplicateAccountError(ChartOfAccountsError):
    """Two or more accounts share the same number."""

    code: str = "DUPLICATE_ACCOUNT"

    def __init__(self, numbers: Sequence[int]):
        self.numbers = tuple(sorted(numbers))
        super().__init__(
            f"Duplicate account numbers: {', '.join(str(n) for n in self.numbers)}"
        )


class MalformedRecordError(ChartOfAccountsError):
    """A chart-of-accounts line does not match the record schema."""

    code: str = "MALFORMED_RECORD"

    def __init__(self, line: int, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"Malformed record at line {line}: {reason}")


class InvalidFieldValueError(ChartOfAccountsError):
    """A field holds a value outside its allowed set or range."""

    code: str = "INVALID_FIELD_VALUE"

    def __init__(
        self,
        field: str,
        value: Any,
        reason: str,
        line: int | None = None,
    ):
        self.field = field
        self.value = value
        self.reason = reason
        self.line = line
        where = f" at line {line}" if line is not None else ""
        super().__init__(f"Invalid value {value!r} for {field}{where}: {reason}")


# Period exceptions


class PeriodConfigError(LedgerKernelError):
    """Base exception for accounting-period configuration errors."""

    code: str = "PERIOD_CONFIG_ERROR"


class InvalidPeriodError(PeriodConfigError):
    """Period dates, span, name or VAT rate violate their constraints."""

    code: str = "INVALID_PERIOD"

    def __init__(self, reason: str, value: Any = None):
        self.reason = reason
        self.value = value
        super().__init__(f"Invalid period: {reason}")


class InvalidVatAccountConfigError(PeriodConfigError):
    """VAT clearing accounts are inconsistent with the VAT rate."""

    code: str = "INVALID_VAT_ACCOUNT_CONFIG"

    def __init__(self, field: str, account: int, reason: str):
        self.field = field
        self.account = account
        self.reason = reason
        super().__init__(f"Invalid VAT account {field}={account}: {reason}")


# Engine exceptions


class EngineStateError(LedgerKernelError):
    """Base exception for ledger engine state-machine violations."""

    code: str = "ENGINE_STATE_ERROR"


class AlreadyFinalizedError(EngineStateError):
    """The engine was finalized; no further ingestion or finalization."""

    code: str = "ALREADY_FINALIZED"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation}: ledger is already finalized")


class InvalidGeneratedPostingError(LedgerKernelError):
    """
    A VAT-generated posting failed validation.

    This always indicates a configuration defect (e.g. a VAT clearing
    account missing from the chart), never a user data error. ``errors``
    holds every ``ValidationError`` found across the generated set.
    """

    code: str = "INVALID_GENERATED_POSTING"

    def __init__(self, errors: Sequence[Any]):
        self.errors = tuple(errors)
        summary = "; ".join(getattr(e, "message", str(e)) for e in self.errors[:5])
        super().__init__(
            f"{len(self.errors)} generated VAT posting error(s): {summary}"
        )


# Source exceptions


class SourceFileError(LedgerKernelError):
    """An input file is missing, unreadable or structurally empty."""

    code: str = "SOURCE_FILE_ERROR"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
