"""
Values -- Field formats and decimal arithmetic shared by the ledger domain.

Responsibility:
    Owns the culture-invariant field formats of the input files (``dd-MM-yyyy``
    dates, integers, amounts with ``.`` or ``,`` as decimal separator) and the
    two-place rounding used for derived amounts. Every parser here raises
    ``ValueError`` with a human-readable reason; callers decide whether to
    collect or propagate it.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Failure modes:
    - ValueError on blank input, wrong format, or non-finite amounts.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, localcontext
from typing import Iterable

MIN_ACCOUNT_NUMBER = 1
MAX_ACCOUNT_NUMBER = 1_000_000
MAX_VOUCHER_NUMBER = 1_000_000

ACCOUNT_NAME_MAX_LENGTH = 100
POSTING_TEXT_MIN_LENGTH = 3
POSTING_TEXT_MAX_LENGTH = 200

BATCH_DATE_FORMAT = "%d-%m-%Y"
AMOUNT_PLACES = Decimal("0.01")

# Amount bounds; two-place results derived from them fit the default context.
MAX_AMOUNT_DIGITS = 28
MAX_AMOUNT_INTEGER_DIGITS = 18
# Sums of bounded amounts are exact at this precision.
SUM_PRECISION = 64

_INTEGER_RE = re.compile(r"^[+-]?\d+$", re.ASCII)
_AMOUNT_RE = re.compile(r"^[+-]?(\d+([.,]\d*)?|[.,]\d+)$", re.ASCII)


def parse_int(text: str, field: str) -> int:
    """Parse a plain integer field (no grouping, no decimals)."""
    value = (text or "").strip()
    if not value:
        raise ValueError(f"{field} is empty")
    if not _INTEGER_RE.match(value):
        raise ValueError(f"{field} is not an integer: {text!r}")
    return int(value)


def parse_amount(text: str, field: str = "Beløb") -> Decimal:
    """
    Parse an amount with either ``.`` or ``,`` as decimal separator.

    Thousands separators are not accepted: ``1.000,50`` is ambiguous with
    two separators and is rejected.
    """
    value = (text or "").strip()
    if not value:
        raise ValueError(f"{field} is empty")
    if not _AMOUNT_RE.match(value):
        raise ValueError(f"{field} is not a valid amount: {text!r}")
    try:
        amount = Decimal(value.replace(",", "."))
    except InvalidOperation as exc:
        raise ValueError(f"{field} is not a valid amount: {text!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"{field} is not a finite amount: {text!r}")
    if len(amount.as_tuple().digits) > MAX_AMOUNT_DIGITS:
        raise ValueError(
            f"{field} has more than {MAX_AMOUNT_DIGITS} significant digits: {text!r}"
        )
    if amount.adjusted() >= MAX_AMOUNT_INTEGER_DIGITS:
        raise ValueError(
            f"{field} has more than {MAX_AMOUNT_INTEGER_DIGITS} integer digits: {text!r}"
        )
    return amount


def parse_batch_date(text: str, field: str = "Dato") -> date:
    """Parse a batch date in the fixed ``dd-MM-yyyy`` format."""
    value = (text or "").strip()
    if not value:
        raise ValueError(f"{field} is empty")
    try:
        return datetime.strptime(value, BATCH_DATE_FORMAT).date()
    except ValueError as exc:
        raise ValueError(
            f"{field} {text!r} is not a valid date (expected dd-MM-yyyy)"
        ) from exc


def parse_flexible_date(text: str, field: str) -> date:
    """Parse an ISO ``yyyy-MM-dd`` or a ``dd-MM-yyyy`` date."""
    value = (text or "").strip()
    if not value:
        raise ValueError(f"{field} is empty")
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.strptime(value, BATCH_DATE_FORMAT).date()
    except ValueError as exc:
        raise ValueError(
            f"{field} {text!r} is not a valid date (expected yyyy-MM-dd or dd-MM-yyyy)"
        ) from exc


def round_amount(amount: Decimal) -> Decimal:
    """Round to two places with banker's rounding (half to even)."""
    return amount.quantize(AMOUNT_PLACES, rounding=ROUND_HALF_EVEN)


def exact_sum(amounts: Iterable[Decimal]) -> Decimal:
    """Sum without context rounding (amounts bounded by ``parse_amount``)."""
    with localcontext() as ctx:
        ctx.prec = SUM_PRECISION
        return sum(amounts, Decimal("0"))


def vat_portion(gross_amount: Decimal, rate: Decimal) -> Decimal:
    """
    Extract the VAT portion of a VAT-inclusive amount.

    ``round(|gross| * rate / (1 + rate), 2)``; always non-negative.
    """
    return round_amount(abs(gross_amount) * (rate / (Decimal(1) + rate)))


def in_account_range(number: int) -> bool:
    return MIN_ACCOUNT_NUMBER <= number <= MAX_ACCOUNT_NUMBER


def format_amount(amount: Decimal) -> str:
    """Two-place rendering used in messages and listings."""
    return f"{round_amount(amount):.2f}"
