"""
Accounts -- Chart-of-accounts value objects and the Account Registry.

Responsibility:
    Defines ``Account`` with its closed ``AccountKind`` variant and
    ``VatCode``, and ``AccountRegistry``, the immutable, number-ordered set
    of accounts that every posting is validated against.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O. The file format is
    read by ``ledger_ingestion.services.chart_loader``; this module only
    decides what a valid account is.

Invariants enforced:
    - Account numbers lie in [1, 1_000_000] and are unique in a registry.
    - The dynamic ``type`` string (``drift`` / ``status`` / ``sum:a-b``) is
      decided once, at load time, into ``AccountKind``; unknown forms never
      reach the engine.
    - A STATUS account always carries ``VatCode.NONE``.

Failure modes:
    - InvalidFieldValueError on construction with out-of-range or
      inconsistent fields, or when parsing an unknown kind / VAT code.
    - DuplicateAccountError when a registry is built from duplicates.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

from ledger_kernel.domain.values import (
    ACCOUNT_NAME_MAX_LENGTH,
    MAX_ACCOUNT_NUMBER,
    in_account_range,
)
from ledger_kernel.exceptions import DuplicateAccountError, InvalidFieldValueError
from ledger_kernel.logging_config import get_logger

logger = get_logger("domain.accounts")

_SUM_RANGE_RE = re.compile(r"^sum:(\d+)-(\d+)$", re.ASCII)


class AccountKind(str, Enum):
    """Account classification as written in the chart file."""

    OPERATING = "drift"  # Income statement
    STATUS = "status"  # Balance sheet
    SUM_RANGE = "sum"  # Subtotal over a number range


class VatCode(str, Enum):
    """VAT treatment of postings on an account."""

    NONE = "INGEN"
    INPUT = "INDG"  # Purchases: VAT receivable
    OUTPUT = "UDG"  # Sales: VAT payable

    @classmethod
    def parse(cls, text: str) -> VatCode:
        """Parse the exact chart token (case-sensitive)."""
        value = (text or "").strip()
        for member in cls:
            if member.value == value:
                return member
        raise InvalidFieldValueError(
            "moms", text, "must be one of 'INDG', 'UDG' or 'INGEN'"
        )


@dataclass(frozen=True, slots=True)
class SumRange:
    """Inclusive account-number range summed by a SUM_RANGE account."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if not (1 <= self.start < self.end <= MAX_ACCOUNT_NUMBER):
            raise InvalidFieldValueError(
                "type",
                f"sum:{self.start}-{self.end}",
                f"sum range requires 1 <= from < to <= {MAX_ACCOUNT_NUMBER}",
            )

    def __contains__(self, number: object) -> bool:
        return isinstance(number, int) and self.start <= number <= self.end

    def __str__(self) -> str:
        return f"sum:{self.start}-{self.end}"


def parse_account_kind(text: str) -> tuple[AccountKind, SumRange | None]:
    """
    Decide the account kind from its chart token.

    Returns ``(kind, sum_range)``; ``sum_range`` is set only for SUM_RANGE.
    """
    value = (text or "").strip()
    if value == AccountKind.OPERATING.value:
        return AccountKind.OPERATING, None
    if value == AccountKind.STATUS.value:
        return AccountKind.STATUS, None
    match = _SUM_RANGE_RE.match(value)
    if match:
        return AccountKind.SUM_RANGE, SumRange(int(match.group(1)), int(match.group(2)))
    raise InvalidFieldValueError(
        "type", text, "must be 'drift', 'status' or 'sum:<from>-<to>' with from < to"
    )


@dataclass(frozen=True, slots=True)
class Account:
    """
    One account of the chart.

    Contract:
        Validated on construction; an ``Account`` instance is always
        internally consistent.

    Guarantees:
        - Immutable and hashable
        - ``sum_range`` is set if and only if ``kind`` is SUM_RANGE
        - STATUS accounts have ``vat_code`` NONE
    """

    number: int
    name: str
    kind: AccountKind
    vat_code: VatCode = VatCode.NONE
    sum_range: SumRange | None = None

    def __post_init__(self) -> None:
        if not in_account_range(self.number):
            raise InvalidFieldValueError(
                "nr", self.number, f"must be between 1 and {MAX_ACCOUNT_NUMBER}"
            )
        if not self.name or not self.name.strip():
            raise InvalidFieldValueError("navn", self.name, "must not be empty")
        if len(self.name) > ACCOUNT_NAME_MAX_LENGTH:
            raise InvalidFieldValueError(
                "navn",
                self.name,
                f"must be at most {ACCOUNT_NAME_MAX_LENGTH} characters",
            )
        if (self.kind is AccountKind.SUM_RANGE) != (self.sum_range is not None):
            raise InvalidFieldValueError(
                "type", self.kind.value, "a sum range is required exactly for sum accounts"
            )
        if self.kind is AccountKind.STATUS and self.vat_code is not VatCode.NONE:
            raise InvalidFieldValueError(
                "moms",
                self.vat_code.value,
                "status accounts must have VAT code 'INGEN'",
            )

    @property
    def is_status(self) -> bool:
        return self.kind is AccountKind.STATUS

    @property
    def carries_vat(self) -> bool:
        return self.vat_code is not VatCode.NONE

    @property
    def type_token(self) -> str:
        """The chart-file spelling of the kind."""
        if self.sum_range is not None:
            return str(self.sum_range)
        return self.kind.value

    def __str__(self) -> str:
        return f"{self.number}: {self.name} ({self.type_token}, {self.vat_code.value})"


class AccountRegistry:
    """
    Immutable chart of accounts.

    Contract:
        Built once from validated accounts; answers existence and lookup
        queries for the rest of the run.

    Guarantees:
        - ``all()`` is ordered by account number.
        - ``lookup()`` returns None (never raises) for unknown numbers.

    Non-goals:
        - Does NOT read files (see ledger_ingestion.services.chart_loader).
    """

    def __init__(self, accounts: Iterable[Account]):
        ordered = tuple(sorted(accounts, key=lambda a: a.number))
        counts = Counter(a.number for a in ordered)
        duplicates = [number for number, count in counts.items() if count > 1]
        if duplicates:
            raise DuplicateAccountError(duplicates)
        self._accounts = ordered
        self._by_number = {a.number: a for a in ordered}

    @classmethod
    def from_accounts(cls, accounts: Iterable[Account]) -> AccountRegistry:
        registry = cls(accounts)
        logger.info(
            "account_registry_built",
            extra={
                "account_count": len(registry),
                "vat_account_count": sum(1 for a in registry if a.carries_vat),
            },
        )
        return registry

    def lookup(self, number: int) -> Account | None:
        return self._by_number.get(number)

    def all(self) -> tuple[Account, ...]:
        return self._accounts

    def by_kind(self, kind: AccountKind) -> tuple[Account, ...]:
        return tuple(a for a in self._accounts if a.kind is kind)

    def by_vat_code(self, vat_code: VatCode) -> tuple[Account, ...]:
        return tuple(a for a in self._accounts if a.vat_code is vat_code)

    def members_of(self, sum_account: Account) -> tuple[Account, ...]:
        """Accounts summed by a SUM_RANGE account (other sum accounts excluded)."""
        if sum_account.sum_range is None:
            return ()
        return tuple(
            a
            for a in self._accounts
            if a.number in sum_account.sum_range and a.kind is not AccountKind.SUM_RANGE
        )

    def __contains__(self, number: object) -> bool:
        return number in self._by_number

    def __iter__(self) -> Iterator[Account]:
        return iter(self._accounts)

    def __len__(self) -> int:
        return len(self._accounts)
