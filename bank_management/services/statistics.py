"""Account and transaction statistics, recomputed from the rows on every call."""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from sqlmodel import Session, select

from bank_management.models.account import Account
from bank_management.models.enums import AccountStatus, TransactionStatus, TransactionType
from bank_management.models.transaction import Transaction
from bank_management.schemas.account import AccountStatistics
from bank_management.schemas.transaction import DailyTransactionSummary, TransactionStatistics
from bank_management.services.fees import ZERO, to_money
from bank_management.utils.dates import start_of_day, start_of_month, to_naive_utc, utcnow


def account_statistics(session: Session, now: Optional[datetime] = None) -> AccountStatistics:
    now = now or utcnow()
    month_start = start_of_month(now)

    accounts = session.exec(select(Account)).all()

    status_count: Dict[AccountStatus, int] = defaultdict(int)
    type_count: Dict[str, int] = defaultdict(int)
    type_balance: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    total_balance = ZERO
    new_this_month = 0

    for account in accounts:
        status_count[account.status] += 1
        type_count[account.account_type.value] += 1
        type_balance[account.account_type.value] += account.balance
        # only money sitting in active accounts counts towards the total
        if account.status == AccountStatus.active:
            total_balance += account.balance
        if account.created_at >= month_start:
            new_this_month += 1

    month_movements = session.exec(
        select(Transaction).where(
            Transaction.timestamp >= month_start,
            Transaction.status == TransactionStatus.completed,
            Transaction.transaction_type.in_([TransactionType.deposit, TransactionType.withdrawal]),
        )
    ).all()
    deposits = sum((t.amount for t in month_movements if t.transaction_type == TransactionType.deposit), ZERO)
    withdrawals = sum((t.amount for t in month_movements if t.transaction_type == TransactionType.withdrawal), ZERO)

    total_accounts = len(accounts)
    return AccountStatistics(
        total_accounts=total_accounts,
        active_accounts=status_count[AccountStatus.active],
        suspended_accounts=status_count[AccountStatus.suspended],
        closed_accounts=status_count[AccountStatus.closed],
        total_balance=to_money(total_balance),
        average_balance=to_money(total_balance / total_accounts) if total_accounts else ZERO,
        account_type_distribution=dict(type_count),
        account_type_balances={k: to_money(v) for k, v in type_balance.items()},
        new_accounts_this_month=new_this_month,
        total_deposits_this_month=to_money(deposits),
        total_withdrawals_this_month=to_money(withdrawals),
    )


def transaction_statistics(
    session: Session,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> TransactionStatistics:
    """Counts include every status; amounts only count completed transactions."""
    now = now or utcnow()
    today_start = start_of_day(now.date())
    month_start = start_of_month(now)

    query = select(Transaction)
    if start_date is not None:
        query = query.where(Transaction.timestamp >= to_naive_utc(start_date))
    if end_date is not None:
        query = query.where(Transaction.timestamp <= to_naive_utc(end_date))
    transactions = session.exec(query.order_by(Transaction.timestamp)).all()

    stats = TransactionStatistics(total_transactions=len(transactions))
    type_count: Dict[str, int] = defaultdict(int)
    type_amount: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    status_count: Dict[str, int] = defaultdict(int)
    daily_count: Dict = defaultdict(int)
    daily_amount: Dict = defaultdict(lambda: ZERO)

    total_amount = today_amount = month_amount = ZERO
    deposits = withdrawals = transfers = fees_total = ZERO

    for t in transactions:
        type_count[t.transaction_type.value] += 1
        status_count[t.status.value] += 1
        day = t.timestamp.date()
        daily_count[day] += 1

        if t.timestamp >= today_start:
            stats.today_transactions += 1
        if t.timestamp >= month_start:
            stats.this_month_transactions += 1

        if t.status != TransactionStatus.completed:
            continue

        total_amount += t.amount
        type_amount[t.transaction_type.value] += t.amount
        daily_amount[day] += t.amount
        fees_total += t.fee or ZERO
        if t.timestamp >= today_start:
            today_amount += t.amount
        if t.timestamp >= month_start:
            month_amount += t.amount

        if t.is_credit():
            deposits += t.amount
        elif t.is_transfer():
            transfers += t.amount
        elif t.transaction_type == TransactionType.withdrawal:
            withdrawals += t.amount

    stats.total_amount = to_money(total_amount)
    stats.today_amount = to_money(today_amount)
    stats.this_month_amount = to_money(month_amount)
    stats.transaction_type_count = dict(type_count)
    stats.transaction_type_amount = {k: to_money(v) for k, v in type_amount.items()}
    stats.transaction_status_count = dict(status_count)
    stats.total_deposits = to_money(deposits)
    stats.total_withdrawals = to_money(withdrawals)
    stats.total_transfers = to_money(transfers)
    stats.total_fees = to_money(fees_total)
    if stats.total_transactions:
        stats.average_transaction_amount = to_money(total_amount / stats.total_transactions)
    stats.daily_transactions = [
        DailyTransactionSummary(date=day, count=count, amount=to_money(daily_amount[day]))
        for day, count in sorted(daily_count.items())
    ]
    return stats
