"""Tests for amount parsing."""

import pytest
from decimal import Decimal

from bookit.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", "123.45"),
        ("-123.45", "-123.45"),
        ("+7", "7.00"),
        ("1,234.56", "1234.56"),
        ("123,45", "123.45"),
        ("-1.234,56", "-1234.56"),
        ("1,234", "1234.00"),
        ("€ 123,45", "123.45"),
        ("-€123.45", "-123.45"),
        ("(123.45)", "-123.45"),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == Decimal(expected)


@pytest.mark.parametrize("text", ["", "   ", "ten", "1.2.3,4,5", "NaN"])
def test_invalid_amounts(text):
    with pytest.raises(ValueError):
        parse_amount(text)
