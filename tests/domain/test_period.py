"""
Tests for Period validation and queries.
"""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.period import MAX_PERIOD_SPAN_DAYS, Period
from ledger_kernel.exceptions import InvalidPeriodError, InvalidVatAccountConfigError


class TestPeriodValidation:

    def test_valid_period(self, period):
        assert period.charges_vat
        assert period.span_days == 364

    def test_name_too_short(self, make_period):
        with pytest.raises(InvalidPeriodError):
            make_period(name="A")

    def test_name_is_trimmed_before_length_check(self, make_period):
        with pytest.raises(InvalidPeriodError):
            make_period(name="  A  ")

    def test_name_too_long(self, make_period):
        with pytest.raises(InvalidPeriodError):
            make_period(name="x" * 101)

    def test_end_must_be_after_start(self, make_period):
        with pytest.raises(InvalidPeriodError, match="after start"):
            make_period(end=date(2025, 1, 1))

    def test_span_limit_inclusive(self, make_period):
        start = date(2024, 1, 1)
        period = make_period(start=start, end=date(2026, 1, 1))
        assert period.span_days == MAX_PERIOD_SPAN_DAYS

    def test_span_over_limit(self, make_period):
        with pytest.raises(InvalidPeriodError, match="exceeds"):
            make_period(start=date(2024, 1, 1), end=date(2026, 1, 2))

    @pytest.mark.parametrize("rate", ["-0.01", "0.5", "0.75"])
    def test_rate_bounds(self, make_period, rate):
        with pytest.raises(InvalidPeriodError):
            make_period(vat_rate=Decimal(rate))

    def test_rate_must_be_finite(self, make_period):
        with pytest.raises(InvalidPeriodError):
            make_period(vat_rate=Decimal("NaN"))

    def test_zero_rate_requires_zero_accounts(self, make_period):
        with pytest.raises(InvalidVatAccountConfigError) as exc_info:
            make_period(vat_rate=Decimal("0"), output_vat_account=0)
        assert exc_info.value.field == "input_vat_account"

    def test_zero_rate_with_zero_accounts(self, vat_free_period):
        assert not vat_free_period.charges_vat

    def test_vat_rate_requires_accounts_in_range(self, make_period):
        with pytest.raises(InvalidVatAccountConfigError) as exc_info:
            make_period(output_vat_account=0)
        assert exc_info.value.field == "output_vat_account"
        assert exc_info.value.code == "INVALID_VAT_ACCOUNT_CONFIG"


class TestPeriodQueries:

    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2024, 12, 31), False),
            (date(2025, 1, 1), True),
            (date(2025, 6, 15), True),
            (date(2025, 12, 31), True),
            (date(2026, 1, 1), False),
        ],
    )
    def test_contains_inclusive(self, period, day, expected):
        assert period.contains(day) is expected

    def test_describe(self, period):
        assert period.describe() == "Regnskab 2025 (2025-01-01 - 2025-12-31)"

    def test_immutable(self, period):
        with pytest.raises(AttributeError):
            period.vat_rate = Decimal("0.1")

    def test_default_is_vat_free(self):
        period = Period("Test", date(2025, 1, 1), date(2025, 2, 1))
        assert period.vat_rate == 0
        assert period.input_vat_account == 0
