from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

from bank_management.models.enums import TransactionStatus, TransactionType
from bank_management.utils.dates import utcnow

if TYPE_CHECKING:
    from bank_management.models.account import Account


class Transaction(SQLModel, table=True):
    __tablename__ = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    transaction_id: str = Field(max_length=50, unique=True, index=True)
    account_id: int = Field(foreign_key="account.id", index=True)
    transaction_type: TransactionType
    amount: Decimal = Field(max_digits=18, decimal_places=2)
    balance_after: Decimal = Field(default=Decimal("0.00"), max_digits=18, decimal_places=2)
    description: Optional[str] = Field(default=None, max_length=255)
    reference: Optional[str] = Field(default=None, max_length=100)

    # transfers only: the counterparty of the movement
    recipient_account: Optional[str] = Field(default=None, max_length=20)
    recipient_name: Optional[str] = Field(default=None, max_length=100)

    status: TransactionStatus = Field(default=TransactionStatus.completed)
    fee: Optional[Decimal] = Field(default=Decimal("0.00"), max_digits=18, decimal_places=2)
    timestamp: datetime = Field(default_factory=utcnow, index=True)

    account: Optional["Account"] = Relationship(back_populates="transactions")

    def is_transfer(self) -> bool:
        return self.transaction_type == TransactionType.transfer

    def is_debit(self) -> bool:
        return self.transaction_type in (
            TransactionType.withdrawal,
            TransactionType.transfer,
            TransactionType.payment,
        )

    def is_credit(self) -> bool:
        return self.transaction_type == TransactionType.deposit
