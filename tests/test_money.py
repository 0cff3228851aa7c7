"""Tests for money arithmetic and input validation."""
from decimal import Decimal

import pytest

from mistock.core.errors import InvalidAmount, InvalidDiscount, InvalidQuantity, MissingReason
from mistock.utils.money import (
    format_amount,
    from_cents,
    line_total,
    percent_of,
    round_cents,
    to_cents,
)
from mistock.utils.validation import (
    validate_discount_percent,
    validate_non_negative_amount,
    validate_positive_amount,
    validate_quantity,
    validate_reason,
    validate_tax_rate,
)


def test_round_cents_half_up():
    assert round_cents(Decimal("0.5")) == 1
    assert round_cents(Decimal("1.49")) == 1
    assert round_cents(Decimal("2.5")) == 3


def test_line_total_with_discount():
    assert line_total(100, 2) == 200
    assert line_total(100, 2, 10) == 180
    # 333 * 1 * 0.85 = 283.05 -> 283
    assert line_total(333, 1, Decimal("15")) == 283
    assert line_total(100, 3, 100) == 0


def test_percent_of():
    assert percent_of(1000, Decimal("7.5")) == 75
    assert percent_of(1000, 0) == 0
    assert percent_of(1, Decimal("50")) == 1


def test_to_and_from_cents():
    assert to_cents("12.50") == 1250
    assert to_cents(0.1) == 10
    assert from_cents(150050) == Decimal("1500.50")


def test_format_amount():
    assert format_amount(150050) == "₦1,500.50"
    assert format_amount(-250, symbol="$") == "-$2.50"


class TestValidation:

    def test_quantity_must_be_positive_integer(self):
        validate_quantity(1)
        for bad in (0, -1, 2.5, True, "3"):
            with pytest.raises(InvalidQuantity):
                validate_quantity(bad)

    def test_discount_range(self):
        assert validate_discount_percent(100) == Decimal(100)
        assert validate_discount_percent("12.5") == Decimal("12.5")
        for bad in (0, -5, Decimal("100.01"), "abc"):
            with pytest.raises(InvalidDiscount):
                validate_discount_percent(bad)

    def test_reason_required(self):
        assert validate_reason("  damaged ", "void") == "damaged"
        for bad in (None, "", "   "):
            with pytest.raises(MissingReason):
                validate_reason(bad, "void")

    def test_amounts(self):
        validate_positive_amount(1)
        validate_non_negative_amount(0)
        with pytest.raises(InvalidAmount):
            validate_positive_amount(0)
        with pytest.raises(InvalidAmount):
            validate_non_negative_amount(-1)
        with pytest.raises(InvalidAmount):
            validate_positive_amount(10.5)

    def test_tax_rate(self):
        assert validate_tax_rate("7.5") == Decimal("7.5")
        with pytest.raises(InvalidAmount):
            validate_tax_rate(101)
