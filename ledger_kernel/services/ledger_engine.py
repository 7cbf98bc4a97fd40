"""
LedgerEngine -- batch ingestion, expansion, VAT generation and balances.

Responsibility:
    Owns the posting collection of one run. Ingests raw batches (header
    check, record parse, per-record validation, counter-account expansion,
    batch-balance check), generates the automatic VAT postings once at
    ``finalize()``, and answers balance and posting queries.

Architecture position:
    Kernel > Services -- the only writer of the posting collection. Callers
    (``ledger_ingestion.services.run_service``, tests) pass the lines of a
    batch that has already been read completely.

Invariants enforced:
    - Every accepted batch sums to exactly zero after expansion.
    - A rejected batch adds nothing; earlier batches are never rolled back.
    - VAT generation runs at most once, over a snapshot of the ingested
      postings, and is all-or-nothing.
    - State machine EMPTY -> INGESTING -> FINALIZED; nothing is accepted
      after FINALIZED.

Failure modes:
    - Data defects within a batch -> ``BatchResult`` with status REJECTED
      carrying every ``ValidationError`` found.
    - AlreadyFinalizedError on ingest_batch / finalize after finalize.
    - InvalidGeneratedPostingError when a VAT posting fails validation
      (e.g. a VAT clearing account missing from the chart).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Sequence

from ledger_kernel.domain.accounts import AccountRegistry
from ledger_kernel.domain.batch_parser import parse_batch
from ledger_kernel.domain.dtos import (
    DUPLICATE_BATCH,
    UNBALANCED_BATCH,
    BatchResult,
    Posting,
    PostingSet,
    ValidationError,
)
from ledger_kernel.domain.expansion import batch_total, expand_record
from ledger_kernel.domain.period import Period
from ledger_kernel.domain.record_validator import RecordValidator
from ledger_kernel.domain.values import exact_sum, format_amount
from ledger_kernel.domain.vat import generate_vat_postings
from ledger_kernel.exceptions import AlreadyFinalizedError, InvalidGeneratedPostingError
from ledger_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.ledger_engine")


class EngineState(str, Enum):
    """Lifecycle of a LedgerEngine."""

    EMPTY = "empty"
    INGESTING = "ingesting"
    FINALIZED = "finalized"


class LedgerEngine:
    """
    Single-writer posting store for one accounting run.

    Contract:
        ``ingest_batch()`` any number of times, then ``finalize()`` exactly
        once. ``balance_of()`` and ``postings()`` are part of the public
        contract after a successful ``finalize()``; before that they reflect
        only the ingested postings.

    Guarantees:
        - Batches are kept in ingestion order; generated VAT postings follow
          all ingested postings.
        - ``postings()`` returns an immutable tuple snapshot.

    Non-goals:
        - Does NOT read files (see ledger_ingestion).
        - Does NOT persist anything beyond the run.
    """

    def __init__(self, registry: AccountRegistry, period: Period):
        self._registry = registry
        self._period = period
        self._validator = RecordValidator(registry, period)
        self._postings: list[Posting] = []
        self._batch_labels: list[str] = []
        self._state = EngineState.EMPTY

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def period(self) -> Period:
        return self._period

    @property
    def registry(self) -> AccountRegistry:
        return self._registry

    @property
    def batch_labels(self) -> tuple[str, ...]:
        return tuple(self._batch_labels)

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------

    def ingest_batch(self, lines: Sequence[str], batch_label: str) -> BatchResult:
        """
        Parse, validate, expand and balance-check one batch.

        Preconditions:
            - The engine is not FINALIZED.

        Postconditions:
            - ACCEPTED: the batch's postings are appended.
            - REJECTED: nothing changed; ``errors`` lists every defect.

        Raises:
            AlreadyFinalizedError: if called after finalize().
        """
        if self._state is EngineState.FINALIZED:
            raise AlreadyFinalizedError("ingest a batch")

        with LogContext.bind(batch_label=batch_label):
            result = self._ingest(lines, batch_label)
            if result.is_success:
                logger.info(
                    "batch_ingested",
                    extra={"posting_count": result.posting_count},
                )
            else:
                logger.warning(
                    "batch_rejected",
                    extra={
                        "error_count": len(result.errors),
                        "error_codes": sorted(result.error_codes),
                    },
                )
            return result

    def _ingest(self, lines: Sequence[str], batch_label: str) -> BatchResult:
        if batch_label in self._batch_labels:
            return BatchResult.rejected(
                batch_label,
                [
                    ValidationError(
                        code=DUPLICATE_BATCH,
                        message=f"batch {batch_label!r} has already been ingested",
                        details={"batch": batch_label},
                    )
                ],
            )

        parsed = parse_batch(lines, batch_label)
        errors: list[ValidationError] = list(parsed.errors)
        for record in parsed.records:
            errors.extend(self._validator.validate_record(record))
        if errors:
            errors.sort(key=lambda e: e.line or 0)
            return BatchResult.rejected(batch_label, errors)

        expanded: list[Posting] = []
        for record in parsed.records:
            expanded.extend(expand_record(record, self._validator.effective_date(record)))

        total = batch_total(expanded, batch_label)
        if total != 0:
            return BatchResult.rejected(
                batch_label,
                [
                    ValidationError(
                        code=UNBALANCED_BATCH,
                        message=(
                            f"batch {batch_label!r} does not balance "
                            f"(sum {format_amount(total)}); the postings of each batch must sum to 0"
                        ),
                        details={"batch": batch_label, "sum": total},
                    )
                ],
            )

        self._postings.extend(expanded)
        self._batch_labels.append(batch_label)
        self._state = EngineState.INGESTING
        return BatchResult.accepted(batch_label, len(expanded))

    # -------------------------------------------------------------------------
    # Finalization
    # -------------------------------------------------------------------------

    def finalize(self) -> PostingSet:
        """
        Generate VAT postings once and freeze the ledger.

        Postconditions:
            - State is FINALIZED and the returned PostingSet holds every
              ingested and generated posting.

        Raises:
            AlreadyFinalizedError: on a second call.
            InvalidGeneratedPostingError: if any generated posting fails
                validation; nothing is appended and the engine stays open.
        """
        if self._state is EngineState.FINALIZED:
            raise AlreadyFinalizedError("finalize")

        snapshot = tuple(self._postings)
        generated = generate_vat_postings(snapshot, self._registry, self._period)

        errors: list[ValidationError] = []
        for posting in generated:
            errors.extend(self._validator.validate_posting(posting))
        if errors:
            logger.error(
                "vat_generation_failed",
                extra={
                    "generated_count": len(generated),
                    "error_count": len(errors),
                },
            )
            raise InvalidGeneratedPostingError(errors)

        self._postings.extend(generated)
        self._state = EngineState.FINALIZED
        posting_set = PostingSet(
            postings=tuple(self._postings),
            generated_count=len(generated),
        )
        logger.info(
            "ledger_finalized",
            extra={
                "batch_count": len(self._batch_labels),
                "posting_count": len(self._postings),
                "vat_posting_count": len(generated),
                "vat_rate": self._period.vat_rate,
            },
        )
        return posting_set

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def postings(self) -> tuple[Posting, ...]:
        return tuple(self._postings)

    def balance_of(self, account_number: int) -> Decimal:
        return exact_sum(p.amount for p in self._postings if p.account == account_number)

    def sum_balance(self, sum_account_number: int) -> Decimal:
        """Total of the member balances of a SUM_RANGE account (0 otherwise)."""
        account = self._registry.lookup(sum_account_number)
        if account is None:
            return Decimal("0")
        members = {a.number for a in self._registry.members_of(account)}
        return exact_sum(p.amount for p in self._postings if p.account in members)

    def postings_for_account(self, account_number: int) -> tuple[Posting, ...]:
        return tuple(p for p in self._postings if p.account == account_number)

    def postings_between(self, start: date, end: date) -> tuple[Posting, ...]:
        """Postings dated within ``[start, end]`` inclusive."""
        return tuple(p for p in self._postings if start <= p.day <= end)
