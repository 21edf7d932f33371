from decimal import Decimal

import pytest

from app.utils.decimal_utils import to_tonnage, sum_tonnage


@pytest.mark.parametrize(
    "value, expected",
    [
        (25.5, Decimal("25.50")),
        ("30.5", Decimal("30.50")),
        (Decimal("0.005"), Decimal("0.01")),
        (Decimal("-0.005"), Decimal("-0.01")),
        (7, Decimal("7.00")),
        (None, Decimal("0.00")),
    ],
)
def test_to_tonnage(value, expected):
    assert to_tonnage(value) == expected


def test_float_does_not_leak_binary_expansion():
    assert str(to_tonnage(0.1 + 0.2)) == "0.30"


@pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", "1000000000000"])
def test_to_tonnage_rejects_invalid(value):
    with pytest.raises(ValueError):
        to_tonnage(value)


def test_to_tonnage_rejects_bool():
    with pytest.raises(TypeError):
        to_tonnage(True)


def test_sum_tonnage():
    assert sum_tonnage(["0.10", 0.2, Decimal("0.30")]) == Decimal("0.60")
    assert sum_tonnage([]) == Decimal("0.00")
