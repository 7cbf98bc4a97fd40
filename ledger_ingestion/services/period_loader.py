"""
Accounting-period loader.

Reads a one-row period file::

    regnskabsNavn;periodeFra;periodeTil;kontoTilgodehavendeMoms;kontoSkyldigMoms;momsprocent

The header is matched case-insensitively. Dates accept ``yyyy-MM-dd`` or
``dd-MM-yyyy``; the VAT rate is a fraction (``0.25`` or ``0,25``).

Failure modes:
    - SourceFileError: file missing/unreadable or without a data row.
    - InvalidPeriodError: bad header/row shape, unparsable fields, and all
      Period constraint violations.
    - InvalidVatAccountConfigError: VAT accounts inconsistent with the rate.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ledger_ingestion.adapters import CsvSourceAdapter
from ledger_kernel.domain.period import Period
from ledger_kernel.domain.values import parse_amount, parse_flexible_date, parse_int
from ledger_kernel.exceptions import InvalidPeriodError, SourceFileError
from ledger_kernel.logging_config import get_logger

logger = get_logger("ingestion.period_loader")

PERIOD_COLUMNS = (
    "regnskabsnavn",
    "periodefra",
    "periodetil",
    "kontotilgodehavendemoms",
    "kontoskyldigmoms",
    "momsprocent",
)


def parse_period_row(fields: list[str]) -> Period:
    if len(fields) != len(PERIOD_COLUMNS):
        raise InvalidPeriodError(
            f"expected {len(PERIOD_COLUMNS)} fields, found {len(fields)}", ";".join(fields)
        )
    try:
        start = parse_flexible_date(fields[1], "periodeFra")
        end = parse_flexible_date(fields[2], "periodeTil")
        input_vat_account = parse_int(fields[3], "kontoTilgodehavendeMoms")
        output_vat_account = parse_int(fields[4], "kontoSkyldigMoms")
        vat_rate = parse_amount(fields[5], "momsprocent")
    except ValueError as exc:
        raise InvalidPeriodError(str(exc)) from exc
    return Period(
        name=fields[0],
        start=start,
        end=end,
        vat_rate=vat_rate,
        input_vat_account=input_vat_account,
        output_vat_account=output_vat_account,
    )


def load_period(
    path: Path,
    options: dict[str, Any] | None = None,
    adapter: CsvSourceAdapter | None = None,
) -> Period:
    """Load and validate the accounting period file."""
    adapter = adapter or CsvSourceAdapter()
    rows = adapter.read_rows(path, options)
    if len(rows) < 2:
        raise SourceFileError(str(path), "period file needs a header and one data row")
    if len(rows) > 2:
        raise InvalidPeriodError(
            f"period file must hold exactly one data row, found {len(rows) - 1}"
        )

    _, header = rows[0]
    if [h.lower() for h in header] != list(PERIOD_COLUMNS):
        raise InvalidPeriodError(
            "header must be regnskabsNavn;periodeFra;periodeTil;"
            "kontoTilgodehavendeMoms;kontoSkyldigMoms;momsprocent",
            ";".join(header),
        )

    period = parse_period_row(rows[1][1])
    logger.info(
        "period_loaded",
        extra={
            "path": str(path),
            "period": period.describe(),
            "vat_rate": period.vat_rate,
        },
    )
    return period
