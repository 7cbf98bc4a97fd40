"""
Pytest fixtures for the batch ledger test suite.

Provides:
- Structured logging configuration and LogContext isolation
- A standard chart of accounts and a VAT-charging period
- Engine and batch-line factories
- tmp_path writers for chart, period and batch files
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from pathlib import Path

import pytest

from ledger_kernel.domain.accounts import (
    Account,
    AccountKind,
    AccountRegistry,
    SumRange,
    VatCode,
)
from ledger_kernel.domain.batch_parser import BATCH_HEADER, BATCH_HEADER_WITH_COUNTER
from ledger_kernel.domain.period import Period
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.services.ledger_engine import LedgerEngine

# Account numbers of the standard chart
BANK = 1000
OUTPUT_VAT = 3000  # Skyldig moms
INPUT_VAT = 3100  # Tilgodehavende moms
EQUITY = 4000
SALES = 5000  # UDG
PURCHASES = 6000  # INDG
RENT = 7000  # INGEN
RESULT_SUM = 9000  # sum:5000-7999

CHART_CSV = """nr;navn;type;moms
1000;Bank;status;INGEN
3000;Skyldig moms;status;INGEN
3100;Tilgodehavende moms;status;INGEN
4000;Egenkapital;status;INGEN
5000;Salg;drift;UDG
6000;Varekøb;drift;INDG
7000;Husleje;drift;INGEN
9000;Resultat;sum:5000-7999;INGEN
"""

PERIOD_CSV = """regnskabsNavn;periodeFra;periodeTil;kontoTilgodehavendeMoms;kontoSkyldigMoms;momsprocent
Regnskab 2025;2025-01-01;2025-12-31;3100;3000;0.25
"""


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, engine):
            engine.ingest_batch(lines, "posteringer1.csv")
            logs = captured_logs()
            assert any(r["message"] == "batch_ingested" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def accounts() -> list[Account]:
    return [
        Account(BANK, "Bank", AccountKind.STATUS),
        Account(OUTPUT_VAT, "Skyldig moms", AccountKind.STATUS),
        Account(INPUT_VAT, "Tilgodehavende moms", AccountKind.STATUS),
        Account(EQUITY, "Egenkapital", AccountKind.STATUS),
        Account(SALES, "Salg", AccountKind.OPERATING, VatCode.OUTPUT),
        Account(PURCHASES, "Varekøb", AccountKind.OPERATING, VatCode.INPUT),
        Account(RENT, "Husleje", AccountKind.OPERATING),
        Account(
            RESULT_SUM,
            "Resultat",
            AccountKind.SUM_RANGE,
            sum_range=SumRange(5000, 7999),
        ),
    ]


@pytest.fixture
def registry(accounts) -> AccountRegistry:
    return AccountRegistry.from_accounts(accounts)


@pytest.fixture
def make_period():
    """Factory for periods; defaults to calendar 2025 with 25% VAT."""

    def _make(**overrides) -> Period:
        values = dict(
            name="Regnskab 2025",
            start=date(2025, 1, 1),
            end=date(2025, 12, 31),
            vat_rate=Decimal("0.25"),
            input_vat_account=INPUT_VAT,
            output_vat_account=OUTPUT_VAT,
        )
        values.update(overrides)
        return Period(**values)

    return _make


@pytest.fixture
def period(make_period) -> Period:
    return make_period()


@pytest.fixture
def vat_free_period(make_period) -> Period:
    return make_period(vat_rate=Decimal("0"), input_vat_account=0, output_vat_account=0)


@pytest.fixture
def engine(registry, period) -> LedgerEngine:
    return LedgerEngine(registry, period)


@pytest.fixture
def batch_lines():
    """
    Build the lines of a batch from data rows.

    ``batch_lines("01-02-2025;1;5000;Salg;1000", ...)`` prefixes the plain
    header; pass ``counter=True`` for the Modkonto layout.
    """

    def _make(*rows: str, counter: bool = False) -> list[str]:
        header = BATCH_HEADER_WITH_COUNTER if counter else BATCH_HEADER
        return [header, *rows]

    return _make


# =============================================================================
# File fixtures
# =============================================================================


@pytest.fixture
def write_file(tmp_path):
    """Write ``content`` to ``tmp_path / name`` as UTF-8 and return the path."""

    def _write(name: str, content: str, encoding: str = "utf-8") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding=encoding)
        return path

    return _write


@pytest.fixture
def input_dir(tmp_path, write_file) -> Path:
    """Input directory with the standard chart and period files, no batches."""
    write_file("kontoplan.csv", CHART_CSV)
    write_file("regnskab.csv", PERIOD_CSV)
    return tmp_path
