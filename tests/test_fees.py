"""Tests for the tiered fee schedule."""

from decimal import Decimal

import pytest

from bank_management.models.enums import TransactionType
from bank_management.services import fees


@pytest.mark.parametrize(
    "amount, expected",
    [
        ("0.01", "5.00"),
        ("1000", "5.00"),
        ("1000.01", "10.00"),
        ("5000", "10.00"),
        ("5000.01", "10.00"),
        ("10000", "20.00"),
    ],
)
def test_withdrawal_fee_tiers(amount, expected):
    assert fees.withdrawal_fee(Decimal(amount)) == Decimal(expected)


@pytest.mark.parametrize(
    "amount, expected",
    [
        ("500", "2.00"),
        ("1000", "2.00"),
        ("1000.01", "5.00"),
        ("10000", "5.00"),
        ("20000", "20.00"),
    ],
)
def test_transfer_fee_tiers(amount, expected):
    assert fees.transfer_fee(Decimal(amount)) == Decimal(expected)


def test_deposits_are_free():
    assert fees.deposit_fee(Decimal("123456.78")) == Decimal("0")


def test_percentage_fee_rounds_half_up():
    # 0.2% of 6002.50 = 12.005
    assert fees.withdrawal_fee(Decimal("6002.50")) == Decimal("12.01")


def test_calculate_fee_is_case_insensitive():
    assert fees.calculate_fee("WITHDRAWAL", Decimal("100")) == Decimal("5.00")
    assert fees.calculate_fee("transfer", Decimal("100")) == Decimal("2.00")
    assert fees.calculate_fee(TransactionType.withdrawal, Decimal("100")) == Decimal("5.00")


def test_unknown_fee_kind_is_free():
    assert fees.calculate_fee("Payment", Decimal("100")) == Decimal("0")
    assert fees.calculate_fee("something-else", Decimal("100")) == Decimal("0")


def test_to_money_quantizes_to_cents():
    assert fees.to_money("10.005") == Decimal("10.01")
    assert fees.to_money(3) == Decimal("3.00")
