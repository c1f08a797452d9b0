"""Tiered fee schedule for money movements.

Deposits are free. Withdrawals and transfers pay a flat fee up to a
threshold and a percentage above it. Fees are rounded half-up to cents.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from bank_management.models.enums import TransactionType

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

WITHDRAWAL_TIERS = (
    (Decimal("1000"), Decimal("5")),
    (Decimal("5000"), Decimal("10")),
)
WITHDRAWAL_RATE = Decimal("0.002")

TRANSFER_TIERS = (
    (Decimal("1000"), Decimal("2")),
    (Decimal("10000"), Decimal("5")),
)
TRANSFER_RATE = Decimal("0.001")


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _tiered(amount: Decimal, tiers, rate: Decimal) -> Decimal:
    for ceiling, flat_fee in tiers:
        if amount <= ceiling:
            return to_money(flat_fee)
    return to_money(amount * rate)


def deposit_fee(amount: Decimal) -> Decimal:
    return ZERO


def withdrawal_fee(amount: Decimal) -> Decimal:
    return _tiered(amount, WITHDRAWAL_TIERS, WITHDRAWAL_RATE)


def transfer_fee(amount: Decimal) -> Decimal:
    return _tiered(amount, TRANSFER_TIERS, TRANSFER_RATE)


_FEES_BY_KIND = {
    TransactionType.deposit.value.lower(): deposit_fee,
    TransactionType.withdrawal.value.lower(): withdrawal_fee,
    TransactionType.transfer.value.lower(): transfer_fee,
}


def calculate_fee(kind: Union[str, TransactionType], amount: Decimal) -> Decimal:
    """Fee for ``kind`` (case-insensitive); unknown kinds are free."""
    if isinstance(kind, TransactionType):
        kind = kind.value
    fee_for = _FEES_BY_KIND.get((kind or "").strip().lower())
    if fee_for is None:
        return ZERO
    return fee_for(to_money(amount))
