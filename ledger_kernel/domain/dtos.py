"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures that flow through the ledger
    pipeline: RawRecord (parsed batch line), Posting (final ledger entry),
    ValidationError (one collected defect), BatchResult
    (outcome of one ``ingest_batch`` call) and PostingSet (outcome of
    ``finalize``).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Data flow:
    batch lines -> RawRecord -> Posting (+ expansion) -> PostingSet
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable

from ledger_kernel.domain.values import exact_sum

# Machine-readable codes for record and batch level defects
MALFORMED_BATCH = "MALFORMED_BATCH"
INVALID_RECORD = "INVALID_RECORD"
UNKNOWN_ACCOUNT = "UNKNOWN_ACCOUNT"
DATE_OUT_OF_PERIOD = "DATE_OUT_OF_PERIOD"
PRIMO_ON_NON_STATUS_ACCOUNT = "PRIMO_ON_NON_STATUS_ACCOUNT"
UNBALANCED_BATCH = "UNBALANCED_BATCH"
DUPLICATE_BATCH = "DUPLICATE_BATCH"

VAT_SOURCE_BATCH = "Autogenereret"
VAT_TEXT_PREFIX = "Moms af "
PRIMO_TEXT_PREFIX = "PRIMO: "


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation error.

    Contract:
        Carries a machine-readable code, human-readable message, the 1-based
        source line when the defect belongs to one, the offending field, and
        optional details (offending value, violated limit).

    Non-goals:
        - Does NOT raise exceptions -- it IS the error representation.
    """

    code: str
    message: str
    line: int | None = None
    field: str | None = None
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        if self.line is not None:
            return f"line {self.line}: {self.message}"
        return self.message


class PostingOrigin(str, Enum):
    """How a posting came into existence."""

    MANUAL = "manual"
    COUNTER_ACCOUNT_EXPANSION = "counter_account_expansion"
    VAT_GENERATED = "vat_generated"
    PRIMO = "primo"


@dataclass(frozen=True)
class RawRecord:
    """One parsed batch line, before validation."""

    day: date | None
    voucher_number: int
    account: int
    text: str
    amount: Decimal
    source_batch: str
    line: int
    counter_account: int | None = None

    @property
    def is_primo(self) -> bool:
        return self.voucher_number < 0


@dataclass(frozen=True)
class Posting:
    """
    Final, expanded ledger entry.

    Guarantees:
        - Immutable
        - ``text`` is the text as written; ``display_text`` adds the primo
          prefix for presentation
    """

    day: date
    voucher_number: int
    account: int
    text: str
    amount: Decimal
    source_batch: str
    origin: PostingOrigin = PostingOrigin.MANUAL

    @property
    def display_text(self) -> str:
        if self.origin is PostingOrigin.PRIMO:
            return PRIMO_TEXT_PREFIX + self.text
        return self.text

    def __str__(self) -> str:
        return (
            f"{self.day.isoformat()} Bilag:{self.voucher_number} Konto:{self.account} "
            f"{self.amount:.2f} - {self.display_text} ({self.source_batch})"
        )


class BatchStatus(str, Enum):
    """Outcome of one ingest_batch call."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class BatchResult:
    """
    Result of ingesting one batch.

    Contract:
        ACCEPTED results carry no errors and the number of postings added;
        REJECTED results carry at least one error and added nothing.
    """

    status: BatchStatus
    batch_label: str
    errors: tuple[ValidationError, ...] = ()
    posting_count: int = 0

    @classmethod
    def accepted(cls, batch_label: str, posting_count: int) -> BatchResult:
        return cls(BatchStatus.ACCEPTED, batch_label, (), posting_count)

    @classmethod
    def rejected(cls, batch_label: str, errors: Iterable[ValidationError]) -> BatchResult:
        collected = tuple(errors)
        assert collected, "a rejected batch must carry at least one error"
        return cls(BatchStatus.REJECTED, batch_label, collected, 0)

    @property
    def is_success(self) -> bool:
        return self.status is BatchStatus.ACCEPTED

    @property
    def error_codes(self) -> frozenset[str]:
        return frozenset(e.code for e in self.errors)


@dataclass(frozen=True)
class PostingSet:
    """
    The finalized posting collection of a run.

    Guarantees:
        - Immutable snapshot; the engine accepts no further changes once
          a PostingSet exists
        - Ordered: ingested postings in batch order, then generated VAT
    """

    postings: tuple[Posting, ...]
    generated_count: int = 0

    def balance_of(self, account_number: int) -> Decimal:
        return exact_sum(p.amount for p in self.postings if p.account == account_number)

    def balance_of_accounts(self, account_numbers: Iterable[int]) -> Decimal:
        """Combined balance of several accounts."""
        numbers = set(account_numbers)
        return exact_sum(p.amount for p in self.postings if p.account in numbers)

    def balances(self) -> dict[int, Decimal]:
        """Balance per account with activity, ordered by account number."""
        amounts: dict[int, list[Decimal]] = defaultdict(list)
        for p in self.postings:
            amounts[p.account].append(p.amount)
        return {number: exact_sum(amounts[number]) for number in sorted(amounts)}

    def total(self) -> Decimal:
        return exact_sum(p.amount for p in self.postings)

    def accounts_with_activity(self) -> tuple[int, ...]:
        return tuple(sorted({p.account for p in self.postings}))

    def __len__(self) -> int:
        return len(self.postings)
