from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

from bank_management.models.enums import AccountStatus, AccountType
from bank_management.utils.dates import utcnow

if TYPE_CHECKING:
    from bank_management.models.card import Card
    from bank_management.models.loan import Loan
    from bank_management.models.transaction import Transaction


class Account(SQLModel, table=True):
    __tablename__ = "account"

    id: Optional[int] = Field(default=None, primary_key=True)
    account_number: str = Field(max_length=20, unique=True, index=True)
    owner_name: str = Field(max_length=100)
    email: str = Field(max_length=120, unique=True, index=True)
    phone_number: Optional[str] = Field(default=None, max_length=20)
    balance: Decimal = Field(default=Decimal("0.00"), max_digits=18, decimal_places=2)
    account_type: AccountType = Field(default=AccountType.savings)
    status: AccountStatus = Field(default=AccountStatus.active)
    notes: Optional[str] = Field(default=None, max_length=500)

    # optimistic concurrency token, bumped on every write to the row
    version: int = Field(default=1)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    transactions: List["Transaction"] = Relationship(
        back_populates="account",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    cards: List["Card"] = Relationship(
        back_populates="account",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    loans: List["Loan"] = Relationship(
        back_populates="account",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.active

    def can_deposit(self, amount: Decimal) -> bool:
        return self.is_active and amount > 0

    def can_withdraw(self, amount: Decimal) -> bool:
        # does not know about fees; callers re-check balance against amount + fee
        return self.is_active and self.balance >= amount and amount > 0
