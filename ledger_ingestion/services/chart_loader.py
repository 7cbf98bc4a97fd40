"""
Chart-of-accounts loader.

Reads ``nr;navn;type;moms`` files into an ``AccountRegistry``. The header
is matched case-insensitively; fields are trimmed; blank lines are skipped.

Failure modes:
    - SourceFileError: file missing/unreadable, or no account rows.
    - MalformedRecordError: bad header, wrong column count, non-integer nr.
    - InvalidFieldValueError: unknown type / moms token, out-of-range values,
      status account with VAT.
    - DuplicateAccountError: two rows with the same nr.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ledger_ingestion.adapters import CsvSourceAdapter
from ledger_kernel.domain.accounts import (
    Account,
    AccountRegistry,
    VatCode,
    parse_account_kind,
)
from ledger_kernel.domain.values import parse_int
from ledger_kernel.exceptions import (
    InvalidFieldValueError,
    MalformedRecordError,
    SourceFileError,
)
from ledger_kernel.logging_config import get_logger

logger = get_logger("ingestion.chart_loader")

CHART_COLUMNS = ("nr", "navn", "type", "moms")


def parse_account_row(line: int, fields: list[str]) -> Account:
    """Build one Account from a split chart row, tagging errors with ``line``."""
    if len(fields) != len(CHART_COLUMNS):
        raise MalformedRecordError(
            line, f"expected {len(CHART_COLUMNS)} fields, found {len(fields)}"
        )
    try:
        number = parse_int(fields[0], "nr")
    except ValueError as exc:
        raise MalformedRecordError(line, str(exc)) from exc
    try:
        kind, sum_range = parse_account_kind(fields[2])
        return Account(
            number=number,
            name=fields[1],
            kind=kind,
            vat_code=VatCode.parse(fields[3]),
            sum_range=sum_range,
        )
    except InvalidFieldValueError as exc:
        raise InvalidFieldValueError(exc.field, exc.value, exc.reason, line=line) from exc


def load_chart_of_accounts(
    path: Path,
    options: dict[str, Any] | None = None,
    adapter: CsvSourceAdapter | None = None,
) -> AccountRegistry:
    """Load and validate a chart of accounts file."""
    adapter = adapter or CsvSourceAdapter()
    rows = adapter.read_rows(path, options)
    if not rows:
        raise SourceFileError(str(path), "chart of accounts is empty")

    header_line, header = rows[0]
    if [h.lower() for h in header] != list(CHART_COLUMNS):
        raise MalformedRecordError(
            header_line, f"header must be {';'.join(CHART_COLUMNS)!r}"
        )
    if len(rows) < 2:
        raise SourceFileError(str(path), "chart of accounts has no accounts")

    accounts = [parse_account_row(line, fields) for line, fields in rows[1:]]
    registry = AccountRegistry.from_accounts(accounts)
    logger.info(
        "chart_of_accounts_loaded",
        extra={"path": str(path), "account_count": len(registry)},
    )
    return registry
