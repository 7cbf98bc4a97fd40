"""
Period -- The accounting period a ledger run is booked into.

Responsibility:
    Holds the validated period metadata: name, date span, VAT rate and the
    two VAT clearing accounts. Validation happens on construction, so a
    ``Period`` instance is always usable by the engine.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O. The file format is
    read by ``ledger_ingestion.services.period_loader``.

Invariants enforced:
    - ``end > start`` and the span is at most 731 days (two years plus a
      leap day).
    - ``0 <= vat_rate < 0.5``.
    - VAT clearing accounts are 0 when the rate is 0, otherwise in
      [1, 1_000_000]. Their existence in the chart is checked only when VAT
      postings are generated, where chart and period are first available
      together.

Failure modes:
    - InvalidPeriodError for name, date, span and rate violations.
    - InvalidVatAccountConfigError for VAT account / rate mismatches.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ledger_kernel.domain.values import MAX_ACCOUNT_NUMBER, in_account_range
from ledger_kernel.exceptions import InvalidPeriodError, InvalidVatAccountConfigError

MAX_PERIOD_SPAN_DAYS = 731
MAX_VAT_RATE = Decimal("0.5")
PERIOD_NAME_MIN_LENGTH = 2
PERIOD_NAME_MAX_LENGTH = 100


@dataclass(frozen=True, slots=True)
class Period:
    """
    Validated accounting period.

    Guarantees:
        - Immutable
        - ``contains(d)`` is inclusive at both ends
    """

    name: str
    start: date
    end: date
    vat_rate: Decimal = Decimal("0")
    input_vat_account: int = 0
    output_vat_account: int = 0

    def __post_init__(self) -> None:
        name = (self.name or "").strip()
        if not PERIOD_NAME_MIN_LENGTH <= len(name) <= PERIOD_NAME_MAX_LENGTH:
            raise InvalidPeriodError(
                f"name must be {PERIOD_NAME_MIN_LENGTH}-{PERIOD_NAME_MAX_LENGTH} characters",
                self.name,
            )
        if self.end <= self.start:
            raise InvalidPeriodError(
                f"end {self.end.isoformat()} must be after start {self.start.isoformat()}",
                (self.start, self.end),
            )
        if self.span_days > MAX_PERIOD_SPAN_DAYS:
            raise InvalidPeriodError(
                f"span of {self.span_days} days exceeds {MAX_PERIOD_SPAN_DAYS} days",
                self.span_days,
            )
        if not isinstance(self.vat_rate, Decimal) or not self.vat_rate.is_finite():
            raise InvalidPeriodError("VAT rate must be a finite decimal", self.vat_rate)
        if not Decimal(0) <= self.vat_rate < MAX_VAT_RATE:
            raise InvalidPeriodError(
                f"VAT rate must satisfy 0 <= rate < {MAX_VAT_RATE}", self.vat_rate
            )
        for field_name in ("input_vat_account", "output_vat_account"):
            self._check_vat_account(field_name, getattr(self, field_name))

    def _check_vat_account(self, field_name: str, account: int) -> None:
        if self.vat_rate == 0:
            if account != 0:
                raise InvalidVatAccountConfigError(
                    field_name, account, "must be 0 when the VAT rate is 0"
                )
        elif not in_account_range(account):
            raise InvalidVatAccountConfigError(
                field_name,
                account,
                f"must be between 1 and {MAX_ACCOUNT_NUMBER} when VAT is charged",
            )

    @property
    def span_days(self) -> int:
        return (self.end - self.start).days

    @property
    def charges_vat(self) -> bool:
        return self.vat_rate != 0

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def describe(self) -> str:
        return f"{self.name} ({self.start.isoformat()} - {self.end.isoformat()})"
