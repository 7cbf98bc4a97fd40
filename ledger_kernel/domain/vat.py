"""
VAT -- Automatic VAT postings derived from VAT-coded account activity.

Responsibility:
    For every posting on an account whose VAT code is INPUT or OUTPUT,
    extracts the VAT portion of the (VAT-inclusive) amount and emits a pair
    of postings: one on the same account, one mirror on the period's VAT
    clearing account.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O. Called once by
    ``LedgerEngine.finalize()`` over a snapshot of the ingested postings,
    so generated postings are never fed back into generation.

Sign rules (``vat`` is always non-negative):
    INPUT   same account: -vat if amount >= 0 else +vat; receivable mirror opposite
    OUTPUT  same account: +vat if amount >= 0 else -vat; payable mirror opposite
"""

from __future__ import annotations

from typing import Iterable

from ledger_kernel.domain.accounts import AccountRegistry, VatCode
from ledger_kernel.domain.dtos import (
    VAT_SOURCE_BATCH,
    VAT_TEXT_PREFIX,
    Posting,
    PostingOrigin,
)
from ledger_kernel.domain.period import Period
from ledger_kernel.domain.values import POSTING_TEXT_MAX_LENGTH, vat_portion
from ledger_kernel.logging_config import get_logger

logger = get_logger("domain.vat")


def _generated(source: Posting, account: int, amount, text: str) -> Posting:
    return Posting(
        day=source.day,
        voucher_number=source.voucher_number,
        account=account,
        text=text,
        amount=amount,
        source_batch=VAT_SOURCE_BATCH,
        origin=PostingOrigin.VAT_GENERATED,
    )


def vat_postings_for(
    posting: Posting,
    registry: AccountRegistry,
    period: Period,
) -> tuple[Posting, ...]:
    """The (zero or two) VAT postings derived from one posting."""
    if not period.charges_vat or posting.origin is PostingOrigin.VAT_GENERATED:
        return ()
    account = registry.lookup(posting.account)
    if account is None or not account.carries_vat:
        return ()

    vat = vat_portion(posting.amount, period.vat_rate)
    if vat == 0:
        return ()

    if account.vat_code is VatCode.INPUT:
        own = -vat if posting.amount >= 0 else vat
        clearing_account = period.input_vat_account
    else:
        own = vat if posting.amount >= 0 else -vat
        clearing_account = period.output_vat_account

    text = VAT_TEXT_PREFIX + posting.text
    if len(text) > POSTING_TEXT_MAX_LENGTH:
        logger.warning(
            "vat_text_truncated",
            extra={
                "source_batch": posting.source_batch,
                "voucher_number": posting.voucher_number,
                "account": posting.account,
                "original_length": len(text),
                "max_length": POSTING_TEXT_MAX_LENGTH,
            },
        )
        text = text[:POSTING_TEXT_MAX_LENGTH]

    return (
        _generated(posting, posting.account, own, text),
        _generated(posting, clearing_account, -own, text),
    )


def generate_vat_postings(
    postings: Iterable[Posting],
    registry: AccountRegistry,
    period: Period,
) -> tuple[Posting, ...]:
    """VAT postings for a snapshot of postings, in source order."""
    if not period.charges_vat:
        return ()
    generated: list[Posting] = []
    for posting in tuple(postings):
        generated.extend(vat_postings_for(posting, registry, period))
    return tuple(generated)
