"""Contract tests for currency minor-unit conversion.

These tests define how display prices map to stored minor units and serve
as regression tests for rounding and fallback behavior.
"""

from decimal import Decimal

import pytest

from pricing_engine.config import Config
from pricing_engine.services.currency import (
    CurrencyService,
    format_duration,
    from_storage,
    normalize_minor_units,
    to_storage,
)


@pytest.fixture
def currency_service():
    return CurrencyService(Config())


class TestConversionContracts:
    """Test the storage/display conversion contracts."""

    def test_rounds_instead_of_truncating(self):
        assert to_storage(2.99, 2) == 299
        assert to_storage(0.29, 2) == 29
        assert to_storage(1.005, 2) == 101
        assert to_storage("12.50", 2) == 1250

    def test_minor_unit_counts(self):
        assert to_storage(Decimal("1500"), 0) == 1500
        assert to_storage(Decimal("12.345"), 3) == 12345
        assert from_storage(1500, 0) == Decimal("1500")
        assert from_storage(12345, 3) == Decimal("12.345")

    def test_round_trip(self):
        """from_storage(to_storage(x)) == x for amounts with at most u decimals."""
        cases = [
            (Decimal("0"), 0),
            (Decimal("7"), 0),
            (Decimal("2.99"), 2),
            (Decimal("10.5"), 2),
            (Decimal("1234.56"), 2),
            (Decimal("0.001"), 3),
            (Decimal("99.999"), 3),
        ]
        for amount, units in cases:
            assert from_storage(to_storage(amount, units), units) == amount, (amount, units)

    def test_empty_values_normalize_to_zero(self):
        assert to_storage(None, 2) == 0
        assert to_storage("", 2) == 0
        assert to_storage(0, 2) == 0
        assert from_storage(None, 2) == Decimal("0")
        assert from_storage(0, 3) == Decimal("0")

    def test_unparseable_input_is_zero(self):
        assert to_storage("abc", 2) == 0
        assert to_storage(float("nan"), 2) == 0

    def test_unsupported_minor_units_fall_back_to_two(self):
        assert normalize_minor_units(5) == 2
        assert to_storage(Decimal("1.23"), 7) == 123
        assert from_storage(123, 1) == Decimal("1.23")


class TestCurrencyRegistry:
    """Test currency metadata lookups."""

    def test_lookup_is_case_insensitive(self, currency_service):
        assert currency_service.get_currency("eur").code == "EUR"
        assert currency_service.get_minor_units("jpy") == 0
        assert currency_service.get_minor_units("BHD") == 3

    def test_unknown_code_fails_safe(self, currency_service):
        assert currency_service.get_minor_units("XYZ") == 2
        assert currency_service.get_minor_units(None) == 2
        assert currency_service.get_currency("XYZ").code == "EUR"

    def test_legacy_currency_is_not_selectable(self, currency_service):
        codes = {meta.code for meta in currency_service.selectable_currencies()}
        assert "HRK" not in codes
        assert {"EUR", "USD", "TRY"} <= codes
        assert currency_service.get_currency("HRK").selectable is False

    def test_price_conversion_by_code(self, currency_service):
        assert currency_service.price_to_storage("2.99", "usd") == 299
        assert currency_service.price_to_storage("1500", "JPY") == 1500
        assert currency_service.price_from_storage(1250, "eur") == Decimal("12.50")

    def test_format_price(self, currency_service):
        assert currency_service.format_price(1250, "EUR") == "€12.50"
        assert currency_service.format_price(0, "USD") == "$0.00"
        assert currency_service.format_price(1500, "JPY") == "¥1500"

    def test_missing_currency_table_uses_default(self, tmp_path):
        service = CurrencyService(Config(config_dir=tmp_path))
        meta = service.get_currency("EUR")
        assert meta.code == "EUR"
        assert meta.minor_units == 2
        assert service.format_price(299, "EUR") == "2.99 EUR"


def test_format_duration():
    assert format_duration(45) == "45m"
    assert format_duration(60) == "1h"
    assert format_duration(90) == "1h 30m"
    assert format_duration(125) == "2h 5m"
