from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Dict, List, Optional

from pydantic import Field

from bank_management.models.enums import TransactionStatus, TransactionType
from bank_management.models.transaction import Transaction
from bank_management.schemas.common import CamelModel, Money

PositiveAmount = Annotated[Decimal, Field(gt=0, max_digits=18, decimal_places=2)]


class TransactionRead(CamelModel):
    id: int
    transaction_id: str
    account_id: int
    account_number: str = ""
    account_owner_name: str = ""
    transaction_type: TransactionType
    amount: Money
    balance_after: Money
    description: Optional[str] = None
    recipient_account: Optional[str] = None
    recipient_name: Optional[str] = None
    status: TransactionStatus
    reference: Optional[str] = None
    fee: Optional[Money] = None
    timestamp: datetime

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionRead":
        read = cls.model_validate(transaction)
        if transaction.account is not None:
            read.account_number = transaction.account.account_number
            read.account_owner_name = transaction.account.owner_name
        return read


class DepositRequest(CamelModel):
    amount: PositiveAmount
    description: Optional[Annotated[str, Field(max_length=255)]] = None
    reference: Optional[Annotated[str, Field(max_length=100)]] = None


class WithdrawRequest(DepositRequest):
    pass


class TransferRequest(CamelModel):
    to_account_number: Annotated[str, Field(min_length=1, max_length=20)]
    amount: PositiveAmount
    description: Optional[Annotated[str, Field(max_length=255)]] = None
    reference: Optional[Annotated[str, Field(max_length=100)]] = None


class TransferResult(CamelModel):
    from_transaction: TransactionRead
    to_transaction: TransactionRead
    from_account_new_balance: Money
    to_account_new_balance: Money
    total_fee: Money
    message: str = ""


class CancelTransactionRequest(CamelModel):
    reason: Annotated[str, Field(min_length=1, max_length=500)]


class FeeQuote(CamelModel):
    transaction_type: str
    amount: Money
    fee: Money


class DailyTransactionSummary(CamelModel):
    date: date
    count: int
    amount: Money


class TransactionStatistics(CamelModel):
    total_transactions: int = 0
    total_amount: Money = Decimal("0.00")
    today_transactions: int = 0
    today_amount: Money = Decimal("0.00")
    this_month_transactions: int = 0
    this_month_amount: Money = Decimal("0.00")
    transaction_type_count: Dict[str, int] = Field(default_factory=dict)
    transaction_type_amount: Dict[str, Money] = Field(default_factory=dict)
    transaction_status_count: Dict[str, int] = Field(default_factory=dict)
    total_deposits: Money = Decimal("0.00")
    total_withdrawals: Money = Decimal("0.00")
    total_transfers: Money = Decimal("0.00")
    total_fees: Money = Decimal("0.00")
    average_transaction_amount: Money = Decimal("0.00")
    daily_transactions: List[DailyTransactionSummary] = Field(default_factory=list)
