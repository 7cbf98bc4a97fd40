"""
LedgerRunService -- one complete run over an input directory.

Responsibility:
    Loads the chart of accounts and the period, feeds every batch file to a
    fresh ``LedgerEngine`` in lexicographic file-name order and, when every
    batch was accepted, finalizes the ledger.

Architecture position:
    Ingestion > Services. Depends on ``ledger_kernel`` and
    ``ledger_config``; called by the CLI and by tests.

Failure modes:
    - Configuration defects (chart, period, unreadable files) propagate as
      ``LedgerKernelError`` subclasses; nothing is ingested.
    - Rejected batches are reported in ``LedgerRun.batch_results``; the run
      is then not finalized and ``posting_set`` is None.
    - InvalidGeneratedPostingError from finalize() propagates.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from ledger_config.schema import LedgerSettings
from ledger_ingestion.adapters import CsvSourceAdapter
from ledger_ingestion.services.batch_source import read_batches
from ledger_ingestion.services.chart_loader import load_chart_of_accounts
from ledger_ingestion.services.period_loader import load_period
from ledger_kernel.domain.accounts import AccountRegistry
from ledger_kernel.domain.dtos import BatchResult, PostingSet
from ledger_kernel.domain.period import Period
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.services.ledger_engine import LedgerEngine

logger = get_logger("ingestion.run_service")


@dataclass(frozen=True)
class LedgerRun:
    """Outcome of one run."""

    run_id: str
    registry: AccountRegistry
    period: Period
    batch_results: tuple[BatchResult, ...]
    posting_set: PostingSet | None = None

    @property
    def is_success(self) -> bool:
        return self.posting_set is not None and all(
            r.is_success for r in self.batch_results
        )

    @property
    def rejected(self) -> tuple[BatchResult, ...]:
        return tuple(r for r in self.batch_results if not r.is_success)


class LedgerRunService:
    """Drive chart + period + batches through a LedgerEngine."""

    def __init__(
        self,
        settings: LedgerSettings,
        adapter: CsvSourceAdapter | None = None,
    ):
        self._settings = settings
        self._adapter = adapter or CsvSourceAdapter()

    @property
    def _options(self) -> dict[str, str]:
        return {"encoding": self._settings.encoding}

    def run(self, run_id: str | None = None) -> LedgerRun:
        run_id = run_id or str(uuid.uuid4())
        settings = self._settings
        with LogContext.bind(run_id=run_id):
            logger.info(
                "ledger_run_started",
                extra={"input_dir": str(settings.input_dir)},
            )

            with LogContext.bind(source_file=settings.chart_file):
                registry = load_chart_of_accounts(
                    settings.chart_path, self._options, self._adapter
                )
            with LogContext.bind(source_file=settings.period_file):
                period = load_period(settings.period_path, self._options, self._adapter)

            engine = LedgerEngine(registry, period)
            batches = read_batches(
                settings.input_dir, settings.batch_glob, self._options, self._adapter
            )
            if not batches:
                logger.warning(
                    "no_batches_found",
                    extra={"batch_glob": settings.batch_glob},
                )

            results: list[BatchResult] = []
            for batch in batches:
                with LogContext.bind(source_file=str(batch.path)):
                    results.append(engine.ingest_batch(batch.lines, batch.label))

            if any(not r.is_success for r in results):
                logger.warning(
                    "ledger_run_not_finalized",
                    extra={
                        "rejected_batches": [
                            r.batch_label for r in results if not r.is_success
                        ],
                    },
                )
                return LedgerRun(run_id, registry, period, tuple(results))

            posting_set = engine.finalize()
            logger.info(
                "ledger_run_completed",
                extra={
                    "batch_count": len(results),
                    "posting_count": len(posting_set),
                },
            )
            return LedgerRun(run_id, registry, period, tuple(results), posting_set)
