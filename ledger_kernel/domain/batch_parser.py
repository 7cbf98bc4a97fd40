"""
Batch parser -- Raw batch lines to RawRecord values.

Responsibility:
    Checks the batch header and turns every non-blank data line into a
    ``RawRecord``. Field-level failures are collected as ``INVALID_RECORD``
    errors keyed by line number; nothing is raised for bad data.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O. Callers pass the
    already-read lines of one batch.

Format:
    ``Dato;Bilagsnummer;Konto;Tekst;Beløb[;Modkonto]`` -- the header must
    match one of the two layouts exactly; every data line must have the
    header's column count. Line numbers are 1-based and count the header.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ledger_kernel.domain.dtos import (
    INVALID_RECORD,
    MALFORMED_BATCH,
    RawRecord,
    ValidationError,
)
from ledger_kernel.domain.values import parse_amount, parse_batch_date, parse_int

BATCH_COLUMNS = ("Dato", "Bilagsnummer", "Konto", "Tekst", "Beløb")
BATCH_COLUMNS_WITH_COUNTER = BATCH_COLUMNS + ("Modkonto",)
BATCH_HEADER = ";".join(BATCH_COLUMNS)
BATCH_HEADER_WITH_COUNTER = ";".join(BATCH_COLUMNS_WITH_COUNTER)

_BOM = "\ufeff"


@dataclass(frozen=True)
class ParsedBatch:
    """Records that parsed cleanly plus every line-level error."""

    records: tuple[RawRecord, ...]
    errors: tuple[ValidationError, ...]

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _strip_line(line: str) -> str:
    return line.rstrip("\r\n")


def check_header(lines: Sequence[str]) -> tuple[int | None, ValidationError | None]:
    """
    Return ``(column_count, None)`` for a valid header, else ``(None, error)``.
    """
    if not lines:
        return None, ValidationError(
            code=MALFORMED_BATCH,
            message="batch is empty; expected a header line",
            line=1,
        )
    header = _strip_line(lines[0])
    if header.startswith(_BOM):
        header = header[len(_BOM):]
    if header == BATCH_HEADER:
        return len(BATCH_COLUMNS), None
    if header == BATCH_HEADER_WITH_COUNTER:
        return len(BATCH_COLUMNS_WITH_COUNTER), None
    return None, ValidationError(
        code=MALFORMED_BATCH,
        message=(
            f"invalid header: expected {BATCH_HEADER!r} or "
            f"{BATCH_HEADER_WITH_COUNTER!r}, found {header!r}"
        ),
        line=1,
        details={"found": header},
    )


def parse_record(
    line: str,
    line_number: int,
    column_count: int,
    batch_label: str,
) -> tuple[RawRecord | None, list[ValidationError]]:
    """Parse one data line; every failing field yields its own error."""
    fields = _strip_line(line).split(";")
    if len(fields) != column_count:
        return None, [
            ValidationError(
                code=INVALID_RECORD,
                message=f"expected {column_count} fields, found {len(fields)}",
                line=line_number,
                details={"expected": column_count, "found": len(fields)},
            )
        ]

    errors: list[ValidationError] = []

    def attempt(field_name: str, parser, raw: str):
        try:
            return parser(raw, field_name)
        except ValueError as exc:
            errors.append(
                ValidationError(
                    code=INVALID_RECORD,
                    message=str(exc),
                    line=line_number,
                    field=field_name,
                    details={"value": raw},
                )
            )
            return None

    # Blank date is legal syntax here; the validator decides if it is a primo
    raw_date = fields[0].strip()
    day = attempt("Dato", parse_batch_date, raw_date) if raw_date else None
    voucher = attempt("Bilagsnummer", parse_int, fields[1])
    account = attempt("Konto", parse_int, fields[2])
    amount = attempt("Beløb", parse_amount, fields[4])
    counter_account = None
    if column_count == len(BATCH_COLUMNS_WITH_COUNTER) and fields[5].strip():
        counter_account = attempt("Modkonto", parse_int, fields[5])

    if errors:
        return None, errors
    return (
        RawRecord(
            day=day,
            voucher_number=voucher,
            account=account,
            text=fields[3].strip(),
            amount=amount,
            source_batch=batch_label,
            line=line_number,
            counter_account=counter_account,
        ),
        [],
    )


def parse_batch(lines: Sequence[str], batch_label: str) -> ParsedBatch:
    """
    Parse a whole batch.

    A bad header yields a single MALFORMED_BATCH error and no records;
    otherwise all data lines are parsed and all their errors collected.
    """
    column_count, header_error = check_header(lines)
    if header_error is not None:
        return ParsedBatch(records=(), errors=(header_error,))

    records: list[RawRecord] = []
    errors: list[ValidationError] = []
    for index, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        record, line_errors = parse_record(line, index, column_count, batch_label)
        if record is not None:
            records.append(record)
        errors.extend(line_errors)
    return ParsedBatch(records=tuple(records), errors=tuple(errors))
