"""
Expansion -- Validated records to postings.

Responsibility:
    Turns a validated ``RawRecord`` into its postings: the record itself
    (origin MANUAL, or PRIMO for a negative voucher number) and, when a
    counter account is given, a synthetic posting on the counter account
    with the negated amount (origin COUNTER_ACCOUNT_EXPANSION).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O. Runs before the
    batch-balance check so a single-line entry with a counter account
    balances on its own.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable

from ledger_kernel.domain.dtos import Posting, PostingOrigin, RawRecord
from ledger_kernel.domain.values import exact_sum


def expand_record(record: RawRecord, day: date) -> tuple[Posting, ...]:
    """
    Expand one record; ``day`` is the effective date (primo-substituted).

    Always yields one posting, or exactly two when a counter account is set.
    """
    origin = PostingOrigin.PRIMO if record.is_primo else PostingOrigin.MANUAL
    primary = Posting(
        day=day,
        voucher_number=record.voucher_number,
        account=record.account,
        text=record.text,
        amount=record.amount,
        source_batch=record.source_batch,
        origin=origin,
    )
    if record.counter_account is None:
        return (primary,)
    counter = Posting(
        day=day,
        voucher_number=record.voucher_number,
        account=record.counter_account,
        text=record.text,
        amount=-record.amount,
        source_batch=record.source_batch,
        origin=PostingOrigin.COUNTER_ACCOUNT_EXPANSION,
    )
    return (primary, counter)


def batch_total(postings: Iterable[Posting], batch_label: str) -> Decimal:
    """Exact sum of the postings belonging to ``batch_label``."""
    return exact_sum(p.amount for p in postings if p.source_batch == batch_label)
