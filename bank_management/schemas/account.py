from datetime import datetime
from decimal import Decimal
from typing import Annotated, Dict, Optional

from pydantic import EmailStr, Field

from bank_management.models.account import Account
from bank_management.models.enums import AccountStatus, AccountType, AuditAction
from bank_management.schemas.common import CamelModel, Money

PHONE_PATTERN = r"^\+?[0-9 ()\-]{6,20}$"


class AccountCreate(CamelModel):
    owner_name: Annotated[str, Field(min_length=1, max_length=100)]
    email: Annotated[EmailStr, Field(max_length=120)]
    phone_number: Optional[Annotated[str, Field(max_length=20, pattern=PHONE_PATTERN)]] = None
    account_type: AccountType = AccountType.savings
    initial_balance: Annotated[Decimal, Field(ge=0, max_digits=18, decimal_places=2)] = Decimal("0")
    notes: Optional[Annotated[str, Field(max_length=500)]] = None


class AccountUpdate(CamelModel):
    owner_name: Annotated[str, Field(min_length=1, max_length=100)]
    phone_number: Optional[Annotated[str, Field(max_length=20, pattern=PHONE_PATTERN)]] = None
    status: Optional[AccountStatus] = None
    notes: Optional[Annotated[str, Field(max_length=500)]] = None


class AccountRead(CamelModel):
    id: int
    owner_name: str
    account_number: str
    email: str
    phone_number: Optional[str] = None
    balance: Money
    account_type: AccountType
    status: AccountStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    transaction_count: int = 0
    card_count: int = 0
    loan_count: int = 0

    @classmethod
    def from_account(
        cls,
        account: Account,
        transaction_count: int = 0,
        card_count: int = 0,
        loan_count: int = 0,
    ) -> "AccountRead":
        read = cls.model_validate(account)
        read.transaction_count = transaction_count
        read.card_count = card_count
        read.loan_count = loan_count
        return read


class AccountBalance(CamelModel):
    account_id: int
    account_number: str
    balance: Money


class StatusChangeRequest(CamelModel):
    reason: Annotated[str, Field(min_length=1, max_length=500)]


class ActivateRequest(CamelModel):
    reason: Optional[Annotated[str, Field(max_length=500)]] = None


class AuditEventRead(CamelModel):
    id: int
    account_id: int
    action: AuditAction
    actor: str
    reason: Optional[str] = None
    timestamp: datetime


class AccountStatistics(CamelModel):
    total_accounts: int = 0
    active_accounts: int = 0
    suspended_accounts: int = 0
    closed_accounts: int = 0
    total_balance: Money = Decimal("0.00")
    average_balance: Money = Decimal("0.00")
    account_type_distribution: Dict[str, int] = Field(default_factory=dict)
    account_type_balances: Dict[str, Money] = Field(default_factory=dict)
    new_accounts_this_month: int = 0
    total_deposits_this_month: Money = Decimal("0.00")
    total_withdrawals_this_month: Money = Decimal("0.00")
