"""
Identifier generation for externally visible numbers.

Account numbers, transaction ids, card and loan numbers come from an
injectable generator so tests can assert exact identifiers. Uniqueness is
checked against the database by ``allocate_unique``.
"""

import itertools
import random
import uuid
from typing import Callable, Optional

from sqlmodel import Session, select, func

from bank_management.core.exceptions import IdAllocationError

MAX_ALLOCATION_ATTEMPTS = 20


class IdGenerator:
    def account_number(self) -> str:
        raise NotImplementedError

    def transaction_id(self) -> str:
        raise NotImplementedError

    def card_number(self) -> str:
        raise NotImplementedError

    def loan_number(self) -> str:
        raise NotImplementedError


class RandomIdGenerator(IdGenerator):
    """Random identifiers: ``ACC`` + 9 digits, ``TXN`` + 12 hex chars."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.SystemRandom()

    def account_number(self) -> str:
        return f"ACC{self._rng.randint(100000000, 999999999)}"

    def transaction_id(self) -> str:
        return f"TXN{uuid.UUID(int=self._rng.getrandbits(128)).hex[:12].upper()}"

    def card_number(self) -> str:
        r = self._rng
        return f"4{r.randint(100, 999)}-{r.randint(1000, 9999)}-{r.randint(1000, 9999)}-{r.randint(1000, 9999)}"

    def loan_number(self) -> str:
        return f"LOAN{self._rng.randint(100000, 999999)}"


class SequentialIdGenerator(IdGenerator):
    """Deterministic, monotonically increasing identifiers."""

    def __init__(self, start: int = 1):
        self._accounts = itertools.count(start)
        self._transactions = itertools.count(start)
        self._cards = itertools.count(start)
        self._loans = itertools.count(start)

    def account_number(self) -> str:
        return f"ACC{next(self._accounts):09d}"

    def transaction_id(self) -> str:
        return f"TXN{next(self._transactions):012X}"

    def card_number(self) -> str:
        n = f"{next(self._cards):015d}"
        return f"4{n[:3]}-{n[3:7]}-{n[7:11]}-{n[11:15]}"

    def loan_number(self) -> str:
        return f"LOAN{next(self._loans):06d}"


def allocate_unique(session: Session, column, factory: Callable[[], str]) -> str:
    """Draw identifiers from ``factory`` until one is not present in ``column``."""
    for _ in range(MAX_ALLOCATION_ATTEMPTS):
        candidate = factory()
        taken = session.exec(select(func.count()).where(column == candidate)).one()
        if not taken:
            return candidate
    raise IdAllocationError("Could not allocate a unique identifier")


_default_generator: IdGenerator = RandomIdGenerator()


def get_id_generator() -> IdGenerator:
    return _default_generator
