"""Money movement: deposit, withdraw and transfer.

Each operation reads the account(s), checks eligibility, computes the fee and
new balance(s), and writes the transaction row(s) together with the guarded
balance update(s) in one unit of work.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlmodel import Session, func, select

from bank_management.core.exceptions import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidOperationError,
    SameAccountError,
    TransactionNotFoundError,
    ValidationError,
)
from bank_management.core.id_generator import IdGenerator, allocate_unique
from bank_management.core.logging_config import get_logger
from bank_management.database import unit_of_work
from bank_management.models.account import Account
from bank_management.models.enums import TransactionStatus, TransactionType
from bank_management.models.transaction import Transaction
from bank_management.services import fees
from bank_management.services.accounts import get_account, write_balance
from bank_management.utils.dates import utcnow

logger = get_logger(__name__)


@dataclass
class TransferOutcome:
    debit: Transaction
    credit: Transaction
    from_balance: Decimal
    to_balance: Decimal
    fee: Decimal


def _new_transaction(session: Session, ids: IdGenerator, **fields) -> Transaction:
    transaction = Transaction(
        transaction_id=allocate_unique(session, Transaction.transaction_id, ids.transaction_id),
        status=TransactionStatus.completed,
        **fields,
    )
    session.add(transaction)
    return transaction


def _require_positive(amount: Decimal) -> Decimal:
    # checked after rounding so a sub-cent amount cannot post as 0.00
    money = fees.to_money(amount) if amount is not None else None
    if money is None or money <= 0:
        raise InvalidOperationError("Amount must be greater than zero")
    return money


def deposit(
    session: Session,
    account_id: int,
    amount: Decimal,
    ids: IdGenerator,
    description: Optional[str] = None,
    reference: Optional[str] = None,
) -> Transaction:
    account = get_account(session, account_id)

    if not account.can_deposit(amount):
        logger.warning("Deposit of %s rejected for account %s (status=%s)", amount, account_id, account.status.value)
        raise InvalidOperationError("Deposits are not allowed on this account")
    amount = _require_positive(amount)

    fee = fees.deposit_fee(amount)
    new_balance = account.balance + amount

    with unit_of_work(session):
        write_balance(session, account, new_balance)
        transaction = _new_transaction(
            session,
            ids,
            account_id=account.id,
            transaction_type=TransactionType.deposit,
            amount=amount,
            balance_after=new_balance,
            description=description or "Cash deposit",
            reference=reference,
            fee=fee,
        )

    session.refresh(transaction)
    logger.info("Deposit completed. Account: %s, Amount: %s", account_id, amount)
    return transaction


def withdraw(
    session: Session,
    account_id: int,
    amount: Decimal,
    ids: IdGenerator,
    description: Optional[str] = None,
    reference: Optional[str] = None,
) -> Transaction:
    account = get_account(session, account_id)

    if not account.is_active:
        raise InvalidOperationError("Withdrawals are not allowed on an inactive account")
    amount = _require_positive(amount)

    # two checks: the amount alone, then amount plus fee
    if not account.can_withdraw(amount):
        logger.warning("Withdrawal of %s rejected for account %s: insufficient balance", amount, account_id)
        raise InsufficientFundsError("Insufficient balance")

    fee = fees.withdrawal_fee(amount)
    total = amount + fee
    if account.balance < total:
        logger.warning("Withdrawal of %s rejected for account %s: cannot cover fee %s", amount, account_id, fee)
        raise InsufficientFundsError("Insufficient balance to cover the amount and fees")

    new_balance = account.balance - total

    with unit_of_work(session):
        write_balance(session, account, new_balance)
        transaction = _new_transaction(
            session,
            ids,
            account_id=account.id,
            transaction_type=TransactionType.withdrawal,
            amount=amount,
            balance_after=new_balance,
            description=description or "Cash withdrawal",
            reference=reference,
            fee=fee,
        )

    session.refresh(transaction)
    logger.info("Withdrawal completed. Account: %s, Amount: %s, Fee: %s", account_id, amount, fee)
    return transaction


def transfer(
    session: Session,
    from_account_id: int,
    to_account_number: str,
    amount: Decimal,
    ids: IdGenerator,
    description: Optional[str] = None,
    reference: Optional[str] = None,
) -> TransferOutcome:
    """Move ``amount`` between two accounts; the source also pays the transfer fee.

    Produces a debit leg on the source (carrying the fee) and a credit leg on
    the destination (fee 0). Both balance writes and both rows commit together.
    """
    source = get_account(session, from_account_id)

    destination = session.exec(
        select(Account).where(Account.account_number == to_account_number)
    ).first()
    if not destination:
        raise AccountNotFoundError("Destination account not found")

    if source.id == destination.id:
        raise SameAccountError("Cannot transfer to the same account")

    if not source.is_active:
        raise InvalidOperationError("Transfers are not allowed from an inactive account")
    amount = _require_positive(amount)
    if not source.can_withdraw(amount):
        raise InsufficientFundsError("Insufficient balance")
    if not destination.can_deposit(amount):
        raise InvalidOperationError("The destination account cannot receive transfers")

    fee = fees.transfer_fee(amount)
    total = amount + fee
    if source.balance < total:
        logger.warning("Transfer of %s from account %s rejected: cannot cover fee %s", amount, source.id, fee)
        raise InsufficientFundsError("Insufficient balance to cover the amount and fees")

    from_balance = source.balance - total
    to_balance = destination.balance + amount
    now = utcnow()

    with unit_of_work(session):
        write_balance(session, source, from_balance)
        write_balance(session, destination, to_balance)

        debit = _new_transaction(
            session,
            ids,
            account_id=source.id,
            transaction_type=TransactionType.transfer,
            amount=amount,
            balance_after=from_balance,
            description=description or f"Transfer to {destination.account_number}",
            reference=reference,
            recipient_account=destination.account_number,
            recipient_name=destination.owner_name,
            fee=fee,
            timestamp=now,
        )
        credit = _new_transaction(
            session,
            ids,
            account_id=destination.id,
            transaction_type=TransactionType.transfer,
            amount=amount,
            balance_after=to_balance,
            description=description or f"Transfer from {source.account_number}",
            reference=reference,
            recipient_account=source.account_number,
            recipient_name=source.owner_name,
            fee=Decimal("0.00"),
            timestamp=now,
        )

    session.refresh(debit)
    session.refresh(credit)
    logger.info(
        "Transfer completed. From: %s, To: %s, Amount: %s, Fee: %s",
        source.account_number, destination.account_number, amount, fee,
    )
    return TransferOutcome(debit=debit, credit=credit, from_balance=from_balance, to_balance=to_balance, fee=fee)


def get_transaction(session: Session, transaction_id: int) -> Transaction:
    if transaction_id <= 0:
        raise ValidationError("Invalid transaction id")
    transaction = session.get(Transaction, transaction_id)
    if not transaction:
        raise TransactionNotFoundError("Transaction not found")
    return transaction


def get_transaction_by_reference_id(session: Session, transaction_id: str) -> Transaction:
    transaction = session.exec(
        select(Transaction).where(Transaction.transaction_id == transaction_id)
    ).first()
    if not transaction:
        raise TransactionNotFoundError("Transaction not found")
    return transaction


def transaction_exists(session: Session, transaction_id: str) -> bool:
    count = session.exec(
        select(func.count()).select_from(Transaction).where(Transaction.transaction_id == transaction_id)
    ).one()
    return count > 0


def cancel_transaction(session: Session, transaction_id: int, reason: str) -> Transaction:
    transaction = get_transaction(session, transaction_id)
    if transaction.status != TransactionStatus.pending:
        raise InvalidOperationError("Only pending transactions can be cancelled")

    with unit_of_work(session):
        transaction.status = TransactionStatus.cancelled
        if transaction.description:
            transaction.description = f"{transaction.description} - Cancelled: {reason}"
        else:
            transaction.description = f"Cancelled: {reason}"
        # column holds 255 chars
        transaction.description = transaction.description[:255]
        session.add(transaction)

    session.refresh(transaction)
    logger.info("Transaction %s cancelled: %s", transaction.transaction_id, reason)
    return transaction


def process_transaction(session: Session, transaction_id: int) -> Transaction:
    transaction = get_transaction(session, transaction_id)
    if transaction.status != TransactionStatus.pending:
        raise InvalidOperationError("Transaction is not pending")

    with unit_of_work(session):
        transaction.status = TransactionStatus.completed
        session.add(transaction)

    session.refresh(transaction)
    logger.info("Transaction %s processed", transaction.transaction_id)
    return transaction
