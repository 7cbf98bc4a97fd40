"""
Tests for LedgerEngine: ingestion pipeline, state machine, VAT
finalization and balance queries.
"""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.dtos import (
    DATE_OUT_OF_PERIOD,
    DUPLICATE_BATCH,
    INVALID_RECORD,
    MALFORMED_BATCH,
    PRIMO_ON_NON_STATUS_ACCOUNT,
    UNBALANCED_BATCH,
    UNKNOWN_ACCOUNT,
    BatchStatus,
    PostingOrigin,
)
from ledger_kernel.exceptions import AlreadyFinalizedError, InvalidGeneratedPostingError
from ledger_kernel.services.ledger_engine import EngineState, LedgerEngine

B1 = "posteringer1.csv"
B2 = "posteringer2.csv"


class TestIngestBatch:

    def test_accepted_batch(self, engine, batch_lines):
        result = engine.ingest_batch(
            batch_lines("01-02-2025;1;5000;Salg;1000", "01-02-2025;1;1000;Salg;-1000"),
            B1,
        )
        assert result.status is BatchStatus.ACCEPTED
        assert result.posting_count == 2
        assert result.errors == ()
        assert engine.state is EngineState.INGESTING
        assert engine.batch_labels == (B1,)

    def test_counter_account_expansion(self, engine, batch_lines):
        result = engine.ingest_batch(
            batch_lines("01-02-2025;1;5000;Salg;1000;1000", counter=True), B1
        )
        assert result.is_success
        assert result.posting_count == 2
        origins = [p.origin for p in engine.postings()]
        assert origins == [PostingOrigin.MANUAL, PostingOrigin.COUNTER_ACCOUNT_EXPANSION]

    def test_mixed_counter_and_plain_rows(self, engine, batch_lines):
        result = engine.ingest_batch(
            batch_lines(
                "01-02-2025;1;7000;Husleje;500;",
                "01-02-2025;1;1000;Husleje;-500;",
                "02-02-2025;2;7000;Husleje;100;1000",
                counter=True,
            ),
            B1,
        )
        assert result.is_success
        assert result.posting_count == 4

    def test_unbalanced_batch(self, engine, batch_lines):
        result = engine.ingest_batch(
            batch_lines("01-02-2025;1;5000;Salg;1000", "01-02-2025;1;1000;Salg;-999.99"),
            B1,
        )
        assert result.status is BatchStatus.REJECTED
        assert [e.code for e in result.errors] == [UNBALANCED_BATCH]
        assert result.errors[0].details == {"batch": B1, "sum": Decimal("0.01")}
        assert engine.postings() == ()
        assert engine.state is EngineState.EMPTY

    def test_malformed_header(self, engine):
        result = engine.ingest_batch(["Dato;Konto", "01-02-2025;1000"], B1)
        assert result.error_codes == {MALFORMED_BATCH}

    def test_empty_batch(self, engine):
        result = engine.ingest_batch([], B1)
        assert result.error_codes == {MALFORMED_BATCH}

    def test_all_record_errors_reported_in_line_order(self, engine, batch_lines):
        result = engine.ingest_batch(
            batch_lines(
                "01-02-2025;1;1234;Salg;1000",
                "01-02-2026;1;1000;Salg;-1000",
                "01-02-2025;x;1000;Salg;5",
            ),
            B1,
        )
        assert not result.is_success
        assert [(e.line, e.code) for e in result.errors] == [
            (2, UNKNOWN_ACCOUNT),
            (3, DATE_OUT_OF_PERIOD),
            (4, INVALID_RECORD),
        ]

    def test_rejected_batch_leaves_earlier_batches(self, engine, batch_lines):
        engine.ingest_batch(
            batch_lines("01-02-2025;1;7000;Husleje;500;1000", counter=True), B1
        )
        result = engine.ingest_batch(batch_lines("01-02-2025;2;7000;Husleje;1"), B2)
        assert not result.is_success
        assert len(engine.postings()) == 2
        assert engine.batch_labels == (B1,)

    def test_large_amounts_balance_exactly(self, engine, batch_lines):
        result = engine.ingest_batch(
            batch_lines(
                "01-02-2025;1;7000;Husleje;999999999999999999.99",
                "01-02-2025;1;7000;Husleje;0.00000000001",
                "01-02-2025;1;1000;Husleje;-999999999999999999.99",
                "01-02-2025;1;1000;Husleje;-0.00000000001",
            ),
            B1,
        )
        assert result.is_success, result.errors
        assert engine.balance_of(7000) == Decimal("999999999999999999.99000000001")

    def test_amount_beyond_precision_is_invalid_record(self, engine, batch_lines):
        result = engine.ingest_batch(
            batch_lines("01-02-2025;1;5000;Salg;1000000000000000000000000000;1000", counter=True),
            B1,
        )
        assert result.error_codes == {INVALID_RECORD}
        assert result.errors[0].line == 2
        assert engine.finalize().total() == 0

    def test_duplicate_batch_label(self, engine, batch_lines):
        lines = batch_lines("01-02-2025;1;7000;Husleje;500;1000", counter=True)
        assert engine.ingest_batch(lines, B1).is_success
        result = engine.ingest_batch(lines, B1)
        assert result.error_codes == {DUPLICATE_BATCH}
        assert len(engine.postings()) == 2

    def test_ingest_logged_with_batch_context(self, engine, batch_lines, captured_logs):
        engine.ingest_batch(batch_lines("01-02-2025;1;7000;Husleje;1"), B1)
        logs = captured_logs()
        rejected = [r for r in logs if r["message"] == "batch_rejected"]
        assert rejected
        assert rejected[0]["batch_label"] == B1
        assert rejected[0]["error_codes"] == [UNBALANCED_BATCH]


class TestPrimo:

    def test_dateless_primo_posted_at_period_start(self, engine, batch_lines, period):
        result = engine.ingest_batch(
            batch_lines(";-1;1000;Primo bank;5000;4000", counter=True), B1
        )
        assert result.is_success
        bank = engine.postings_for_account(1000)[0]
        assert bank.day == period.start
        assert bank.origin is PostingOrigin.PRIMO
        assert bank.display_text == "PRIMO: Primo bank"
        assert bank.text == "Primo bank"

    def test_primo_on_operating_account_rejected(self, engine, batch_lines):
        result = engine.ingest_batch(
            batch_lines(";-1;5000;Primo salg;100", ";-1;1000;Primo salg;-100"), B1
        )
        assert result.error_codes == {PRIMO_ON_NON_STATUS_ACCOUNT}

    def test_blank_date_on_ordinary_voucher_rejected(self, engine, batch_lines):
        result = engine.ingest_batch(
            batch_lines(";1;1000;Bank;100", ";1;4000;Bank;-100"), B1
        )
        assert result.error_codes == {INVALID_RECORD}
        assert [e.line for e in result.errors] == [2, 3]


class TestFinalize:

    def test_end_to_end_output_vat(self, engine, batch_lines):
        engine.ingest_batch(batch_lines("01-02-2025;1;5000;Salg;1000;1000", counter=True), B1)
        posting_set = engine.finalize()

        assert engine.state is EngineState.FINALIZED
        assert posting_set.generated_count == 2
        assert posting_set.balance_of(5000) == Decimal("1200.00")
        assert posting_set.balance_of(3000) == Decimal("-200.00")
        assert posting_set.balance_of(1000) == Decimal("-1000")
        assert posting_set.total() == 0

    def test_input_vat(self, engine, batch_lines):
        engine.ingest_batch(batch_lines("03-03-2025;2;6000;Varekøb;500;1000", counter=True), B1)
        posting_set = engine.finalize()
        assert posting_set.balance_of(6000) == Decimal("400.00")
        assert posting_set.balance_of(3100) == Decimal("100.00")
        assert posting_set.total() == 0

    def test_largest_amount_on_vat_account(self, engine, batch_lines):
        engine.ingest_batch(
            batch_lines("01-02-2025;1;5000;Salg;999999999999999999.99;1000", counter=True), B1
        )
        posting_set = engine.finalize()
        # 999999999999999999.99 * 0.2 = 199999999999999999.998
        assert posting_set.balance_of(3000) == Decimal("-200000000000000000.00")
        assert posting_set.balance_of(5000) == Decimal("1199999999999999999.99")
        assert posting_set.total() == 0

    def test_period_end_is_postable(self, engine, batch_lines):
        result = engine.ingest_batch(
            batch_lines("31-12-2025;9;7000;Husleje;250;1000", counter=True), B1
        )
        assert result.is_success
        assert engine.finalize().balance_of(7000) == Decimal("250")

    def test_vat_free_period(self, registry, vat_free_period, batch_lines):
        engine = LedgerEngine(registry, vat_free_period)
        engine.ingest_batch(batch_lines("01-02-2025;1;5000;Salg;1000;1000", counter=True), B1)
        posting_set = engine.finalize()
        assert posting_set.generated_count == 0
        assert posting_set.balance_of(5000) == Decimal("1000")

    def test_generated_postings_follow_ingested(self, engine, batch_lines):
        engine.ingest_batch(batch_lines("01-02-2025;1;5000;Salg;1000;1000", counter=True), B1)
        postings = engine.finalize().postings
        assert [p.origin for p in postings[2:]] == [PostingOrigin.VAT_GENERATED] * 2

    def test_finalize_empty_engine(self, engine):
        posting_set = engine.finalize()
        assert len(posting_set) == 0
        assert engine.state is EngineState.FINALIZED

    def test_second_finalize_raises(self, engine):
        engine.finalize()
        with pytest.raises(AlreadyFinalizedError) as exc_info:
            engine.finalize()
        assert exc_info.value.code == "ALREADY_FINALIZED"

    def test_ingest_after_finalize_raises(self, engine, batch_lines):
        engine.finalize()
        with pytest.raises(AlreadyFinalizedError):
            engine.ingest_batch(batch_lines(), B1)

    def test_missing_clearing_account_is_config_error(self, registry, make_period, batch_lines):
        engine = LedgerEngine(registry, make_period(output_vat_account=3999))
        engine.ingest_batch(batch_lines("01-02-2025;1;5000;Salg;1000;1000", counter=True), B1)

        with pytest.raises(InvalidGeneratedPostingError) as exc_info:
            engine.finalize()

        assert {e.code for e in exc_info.value.errors} == {UNKNOWN_ACCOUNT}
        assert engine.state is EngineState.INGESTING
        assert len(engine.postings()) == 2

    def test_finalize_logged(self, engine, batch_lines, captured_logs):
        engine.ingest_batch(batch_lines("01-02-2025;1;5000;Salg;1000;1000", counter=True), B1)
        engine.finalize()
        finalized = [r for r in captured_logs() if r["message"] == "ledger_finalized"]
        assert finalized[0]["vat_posting_count"] == 2
        assert finalized[0]["vat_rate"] == "0.25"


class TestQueries:

    @pytest.fixture
    def loaded(self, engine, batch_lines):
        engine.ingest_batch(
            batch_lines(
                "01-02-2025;1;5000;Salg;1000;1000",
                "15-03-2025;2;6000;Varekøb;500;1000",
                "20-04-2025;3;7000;Husleje;300;1000",
                counter=True,
            ),
            B1,
        )
        engine.finalize()
        return engine

    def test_balance_of(self, loaded):
        assert loaded.balance_of(1000) == Decimal("-1800")
        assert loaded.balance_of(4000) == 0

    def test_sum_balance(self, loaded):
        # 5000: 1200, 6000: 400, 7000: 300
        assert loaded.sum_balance(9000) == Decimal("1900.00")

    def test_sum_balance_of_plain_account_is_zero(self, loaded):
        assert loaded.sum_balance(1000) == 0
        assert loaded.sum_balance(4242) == 0

    def test_postings_between(self, loaded):
        march = loaded.postings_between(date(2025, 3, 1), date(2025, 3, 31))
        assert {p.account for p in march} == {6000, 1000, 3100}

    def test_posting_set_balances(self, engine, batch_lines):
        engine.ingest_batch(batch_lines("01-02-2025;1;5000;Salg;1000;1000", counter=True), B1)
        posting_set = engine.finalize()
        assert posting_set.accounts_with_activity() == (1000, 3000, 5000)
        assert posting_set.balances() == {
            1000: Decimal("-1000"),
            3000: Decimal("-200.00"),
            5000: Decimal("1200.00"),
        }

    def test_sum_balance_ignores_postings_on_the_sum_account(self, engine, batch_lines):
        engine.ingest_batch(
            batch_lines(
                "01-02-2025;1;9000;Omposter;50;1000",
                "01-02-2025;2;7000;Husleje;300;1000",
                counter=True,
            ),
            B1,
        )
        posting_set = engine.finalize()
        assert engine.sum_balance(9000) == Decimal("300")
        assert posting_set.balance_of_accounts([5000, 6000, 7000]) == engine.sum_balance(9000)
        assert posting_set.balance_of(9000) == Decimal("50")

    def test_postings_snapshot_is_immutable(self, loaded):
        assert isinstance(loaded.postings(), tuple)
