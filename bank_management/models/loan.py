from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

from bank_management.models.enums import LoanPaymentStatus, LoanStatus, LoanType
from bank_management.utils.dates import utcnow

if TYPE_CHECKING:
    from bank_management.models.account import Account


class Loan(SQLModel, table=True):
    __tablename__ = "loan"

    id: Optional[int] = Field(default=None, primary_key=True)
    loan_number: str = Field(max_length=50, unique=True)
    account_id: int = Field(foreign_key="account.id", index=True)
    loan_type: LoanType = Field(default=LoanType.personal)
    principal_amount: Decimal = Field(max_digits=18, decimal_places=2)
    outstanding_amount: Decimal = Field(default=Decimal("0.00"), max_digits=18, decimal_places=2)
    interest_rate: Decimal = Field(default=Decimal("0.00"), max_digits=5, decimal_places=2)  # annual %
    term_in_months: int
    monthly_payment: Decimal = Field(default=Decimal("0.00"), max_digits=18, decimal_places=2)
    status: LoanStatus = Field(default=LoanStatus.active)
    start_date: datetime = Field(default_factory=utcnow)
    end_date: Optional[datetime] = None
    next_payment_date: Optional[datetime] = None
    purpose: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    account: Optional["Account"] = Relationship(back_populates="loans")
    payments: List["LoanPayment"] = Relationship(
        back_populates="loan",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class LoanPayment(SQLModel, table=True):
    __tablename__ = "loan_payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    loan_id: int = Field(foreign_key="loan.id", index=True)
    amount: Decimal = Field(max_digits=18, decimal_places=2)
    principal_amount: Decimal = Field(default=Decimal("0.00"), max_digits=18, decimal_places=2)
    interest_amount: Decimal = Field(default=Decimal("0.00"), max_digits=18, decimal_places=2)
    status: LoanPaymentStatus = Field(default=LoanPaymentStatus.completed)
    payment_date: datetime = Field(default_factory=utcnow)
    due_date: datetime
    notes: Optional[str] = Field(default=None, max_length=255)

    loan: Optional[Loan] = Relationship(back_populates="payments")
