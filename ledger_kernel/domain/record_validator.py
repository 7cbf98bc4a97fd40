"""
Record validator -- Business rules for one record against chart and period.

Responsibility:
    Applies the field-range rules and the cross-entity checks (account
    existence, date within period, primo only on status accounts) to a
    parsed ``RawRecord`` or a generated ``Posting``. Returns every failure as
    a ``ValidationError``; never raises for bad data.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O. Used by the engine
    for ingested batches and, with primo handling disabled, for generated
    VAT postings.

Primo handling:
    A record with a negative voucher number is an opening-balance (primo)
    record. When its date is blank, the period start date is substituted.
    The text rule is checked against the text as written; the ``PRIMO: ``
    prefix is presentation-only (see ``Posting.display_text``).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from ledger_kernel.domain.accounts import AccountRegistry
from ledger_kernel.domain.dtos import (
    DATE_OUT_OF_PERIOD,
    INVALID_RECORD,
    PRIMO_ON_NON_STATUS_ACCOUNT,
    UNKNOWN_ACCOUNT,
    Posting,
    RawRecord,
    ValidationError,
)
from ledger_kernel.domain.period import Period
from ledger_kernel.domain.values import (
    MAX_ACCOUNT_NUMBER,
    MAX_VOUCHER_NUMBER,
    POSTING_TEXT_MAX_LENGTH,
    POSTING_TEXT_MIN_LENGTH,
    in_account_range,
)


class RecordValidator:
    """
    Validates records against one chart of accounts and one period.

    Contract:
        ``validate_record`` accepts a parsed ``RawRecord`` (primo rules
        apply); ``validate_posting`` accepts an already-built ``Posting``
        (primo substitution disabled, used for generated postings).

    Guarantees:
        - Returns all errors for the record, never only the first.
        - Pure: the same inputs always give the same errors.
    """

    def __init__(self, registry: AccountRegistry, period: Period):
        self._registry = registry
        self._period = period

    def effective_date(self, record: RawRecord) -> date | None:
        """The posting date: as written, or period start for a dateless primo."""
        if record.day is None and record.is_primo:
            return self._period.start
        return record.day

    def validate_record(self, record: RawRecord) -> list[ValidationError]:
        line = record.line
        errors: list[ValidationError] = []

        day = self.effective_date(record)
        if day is None:
            errors.append(
                ValidationError(
                    code=INVALID_RECORD,
                    message="Dato is empty; only primo records (negative Bilagsnummer) may omit it",
                    line=line,
                    field="Dato",
                )
            )
        errors.extend(self._check_voucher(record.voucher_number, line))
        errors.extend(self._check_account(record.account, line, "Konto"))
        errors.extend(self._check_text(record.text, line))
        errors.extend(self._check_amount(record.amount, line))
        if not record.source_batch.strip():
            errors.append(
                ValidationError(
                    code=INVALID_RECORD,
                    message="source batch label must not be empty",
                    line=line,
                )
            )
        if record.counter_account is not None:
            errors.extend(self._check_account(record.counter_account, line, "Modkonto"))
            if record.counter_account == record.account:
                errors.append(
                    ValidationError(
                        code=INVALID_RECORD,
                        message="Modkonto must differ from Konto",
                        line=line,
                        field="Modkonto",
                        details={"value": record.counter_account},
                    )
                )
        if day is not None:
            errors.extend(self._check_date(day, line))
        if record.is_primo:
            errors.extend(self._check_primo_target(record.account, line))
            if record.counter_account is not None:
                errors.extend(self._check_primo_target(record.counter_account, line))
        return errors

    def validate_posting(self, posting: Posting) -> list[ValidationError]:
        errors: list[ValidationError] = []
        errors.extend(self._check_voucher(posting.voucher_number, None))
        errors.extend(self._check_account(posting.account, None, "Konto"))
        errors.extend(self._check_text(posting.text, None))
        errors.extend(self._check_amount(posting.amount, None))
        errors.extend(self._check_date(posting.day, None))
        if posting.voucher_number < 0:
            errors.extend(self._check_primo_target(posting.account, None))
        if not posting.source_batch.strip():
            errors.append(
                ValidationError(
                    code=INVALID_RECORD,
                    message="source batch label must not be empty",
                )
            )
        return errors

    # -------------------------------------------------------------------------
    # Individual rules
    # -------------------------------------------------------------------------

    def _check_voucher(self, voucher: int, line: int | None) -> list[ValidationError]:
        if voucher == 0 or not -MAX_VOUCHER_NUMBER <= voucher <= MAX_VOUCHER_NUMBER:
            return [
                ValidationError(
                    code=INVALID_RECORD,
                    message=(
                        f"Bilagsnummer {voucher} must be non-zero and between "
                        f"-{MAX_VOUCHER_NUMBER} and {MAX_VOUCHER_NUMBER}"
                    ),
                    line=line,
                    field="Bilagsnummer",
                    details={"value": voucher},
                )
            ]
        return []

    def _check_account(
        self, number: int, line: int | None, field_name: str
    ) -> list[ValidationError]:
        if not in_account_range(number):
            return [
                ValidationError(
                    code=INVALID_RECORD,
                    message=f"{field_name} {number} must be between 1 and {MAX_ACCOUNT_NUMBER}",
                    line=line,
                    field=field_name,
                    details={"value": number},
                )
            ]
        if number not in self._registry:
            return [
                ValidationError(
                    code=UNKNOWN_ACCOUNT,
                    message=f"account {number} does not exist in the chart of accounts",
                    line=line,
                    field=field_name,
                    details={"number": number},
                )
            ]
        return []

    def _check_text(self, text: str, line: int | None) -> list[ValidationError]:
        if not POSTING_TEXT_MIN_LENGTH <= len(text) <= POSTING_TEXT_MAX_LENGTH:
            return [
                ValidationError(
                    code=INVALID_RECORD,
                    message=(
                        f"Tekst must be {POSTING_TEXT_MIN_LENGTH}-{POSTING_TEXT_MAX_LENGTH} "
                        f"characters, found {len(text)}"
                    ),
                    line=line,
                    field="Tekst",
                    details={"length": len(text)},
                )
            ]
        return []

    def _check_amount(self, amount: Decimal, line: int | None) -> list[ValidationError]:
        if amount == 0:
            return [
                ValidationError(
                    code=INVALID_RECORD,
                    message="Beløb must not be zero",
                    line=line,
                    field="Beløb",
                )
            ]
        return []

    def _check_date(self, day: date, line: int | None) -> list[ValidationError]:
        if not self._period.contains(day):
            return [
                ValidationError(
                    code=DATE_OUT_OF_PERIOD,
                    message=(
                        f"date {day.isoformat()} is outside the period "
                        f"{self._period.start.isoformat()} - {self._period.end.isoformat()}"
                    ),
                    line=line,
                    field="Dato",
                    details={"date": day.isoformat()},
                )
            ]
        return []

    def _check_primo_target(self, number: int, line: int | None) -> list[ValidationError]:
        account = self._registry.lookup(number)
        if account is not None and not account.is_status:
            return [
                ValidationError(
                    code=PRIMO_ON_NON_STATUS_ACCOUNT,
                    message=(
                        f"primo posting (negative Bilagsnummer) targets account {number}, "
                        f"which is not a status account"
                    ),
                    line=line,
                    field="Konto",
                    details={"account": number},
                )
            ]
        return []
