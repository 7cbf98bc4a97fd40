"""CLI utilities: amount formatting, log level mapping."""

import logging
from decimal import Decimal

from ledger_kernel.domain.values import round_amount


def fmt_amount(v) -> str:
    """Format amount for display (e.g. 1,234.50 / -200.00)."""
    d = round_amount(Decimal(str(v)))
    return f"{d:,.2f}"


def log_level_for(name: str, verbose: bool = False) -> int:
    """Map a settings log level name to a logging level; verbose forces DEBUG."""
    if verbose:
        return logging.DEBUG
    return logging.getLevelName(name.upper()) if name else logging.INFO
