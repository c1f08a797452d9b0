"""Amortized-loan arithmetic."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from bank_management.core.exceptions import ValidationError
from bank_management.models.enums import LoanPaymentStatus, LoanStatus
from bank_management.models.loan import Loan
from bank_management.services.fees import to_money
from bank_management.utils.dates import utcnow


def calculate_monthly_payment(principal: Decimal, annual_rate_percent: Decimal, term_in_months: int) -> Decimal:
    """Fixed monthly installment: P*r*(1+r)^n / ((1+r)^n - 1), r = monthly rate."""
    if term_in_months <= 0:
        raise ValidationError("Loan term must be at least one month")

    principal = Decimal(principal)
    if not annual_rate_percent:
        return to_money(principal / term_in_months)

    monthly_rate = Decimal(annual_rate_percent) / Decimal(100) / Decimal(12)
    growth = (1 + monthly_rate) ** term_in_months
    return to_money(principal * monthly_rate * growth / (growth - 1))


def calculate_total_interest(monthly_payment: Decimal, term_in_months: int, principal: Decimal) -> Decimal:
    return to_money(Decimal(monthly_payment) * term_in_months - Decimal(principal))


def is_overdue(loan: Loan, now: Optional[datetime] = None) -> bool:
    now = now or utcnow()
    return (
        loan.status == LoanStatus.active
        and loan.next_payment_date is not None
        and now > loan.next_payment_date
    )


def remaining_payments(loan: Loan) -> int:
    paid = sum(1 for p in loan.payments if p.status == LoanPaymentStatus.completed)
    return max(0, loan.term_in_months - paid)
