"""Account lifecycle: creation, profile updates, status transitions and deletion.

Every state change writes an ``AccountAuditEvent`` in the same unit of work,
so the audit trail and the account never disagree.
"""

from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm.attributes import set_committed_value
from sqlmodel import Session, func, select

from bank_management.core.exceptions import (
    AccountNotFoundError,
    ConcurrencyConflictError,
    InvalidOperationError,
    ValidationError,
)
from bank_management.core.id_generator import IdGenerator, allocate_unique
from bank_management.core.logging_config import get_logger
from bank_management.database import unit_of_work
from bank_management.models.account import Account
from bank_management.models.audit_event import AccountAuditEvent
from bank_management.models.card import Card
from bank_management.models.enums import (
    AccountStatus,
    AuditAction,
    LoanStatus,
    TransactionStatus,
    TransactionType,
)
from bank_management.models.loan import Loan
from bank_management.models.transaction import Transaction
from bank_management.schemas.account import AccountCreate, AccountRead, AccountUpdate
from bank_management.services.fees import to_money
from bank_management.utils.dates import utcnow

logger = get_logger(__name__)

INITIAL_DEPOSIT_DESCRIPTION = "Initial balance on account opening"

# current status -> statuses it may move to
ALLOWED_TRANSITIONS = {
    AccountStatus.active: {AccountStatus.suspended, AccountStatus.closed},
    AccountStatus.suspended: {AccountStatus.active, AccountStatus.closed},
    AccountStatus.closed: set(),
}

TRANSITION_ACTIONS = {
    AccountStatus.active: AuditAction.activated,
    AccountStatus.suspended: AuditAction.suspended,
    AccountStatus.closed: AuditAction.closed,
}


def get_account(session: Session, account_id: int) -> Account:
    if account_id <= 0:
        raise ValidationError("Invalid account id")
    account = session.get(Account, account_id)
    if not account:
        raise AccountNotFoundError("Account not found")
    return account


def get_account_by_number(session: Session, account_number: str) -> Account:
    if not account_number or not account_number.strip():
        raise ValidationError("Account number is required")
    account = session.exec(
        select(Account).where(Account.account_number == account_number.strip())
    ).first()
    if not account:
        raise AccountNotFoundError("Account not found")
    return account


def get_account_balance(session: Session, account_id: int) -> Decimal:
    return get_account(session, account_id).balance


def account_exists(session: Session, account_id: int) -> bool:
    return session.get(Account, account_id) is not None


def email_in_use(session: Session, email: str) -> bool:
    count = session.exec(
        select(func.count()).select_from(Account).where(func.lower(Account.email) == email.lower())
    ).one()
    return count > 0


def record_audit(
    session: Session,
    account_id: int,
    action: AuditAction,
    actor: str,
    reason: Optional[str] = None,
) -> AccountAuditEvent:
    event = AccountAuditEvent(account_id=account_id, action=action, actor=actor, reason=reason)
    session.add(event)
    return event


def _guarded_update(session: Session, account: Account, **values) -> None:
    """Write ``values`` only if the row still carries the version that was read.

    Every write bumps the version, so balance changes, status changes, profile
    edits and deletes all invalidate each other. A miss raises
    ``ConcurrencyConflictError`` and leaves the caller's unit of work to roll back.
    """
    values["version"] = account.version + 1
    values["updated_at"] = utcnow()
    result = session.exec(
        update(Account)
        .where(Account.id == account.id, Account.version == account.version)
        .values(**values)
    )
    if result.rowcount != 1:
        logger.warning("Concurrent modification of account %s detected", account.id)
        raise ConcurrencyConflictError("The account was modified by another operation, please retry")
    # keep the loaded instance in step without marking it dirty
    for key, value in values.items():
        set_committed_value(account, key, value)


def write_balance(session: Session, account: Account, new_balance: Decimal) -> None:
    if new_balance < 0:
        raise InvalidOperationError("Balance cannot become negative")
    _guarded_update(session, account, balance=new_balance)


def _relation_counts(session: Session, model, account_ids: List[int]) -> Dict[int, int]:
    rows = session.exec(
        select(model.account_id, func.count())
        .where(model.account_id.in_(account_ids))
        .group_by(model.account_id)
    ).all()
    return {account_id: count for account_id, count in rows}


def account_reads(session: Session, accounts: List[Account]) -> List[AccountRead]:
    """Build read models with related-row counts, three grouped queries per batch."""
    if not accounts:
        return []
    account_ids = [a.id for a in accounts]
    transactions = _relation_counts(session, Transaction, account_ids)
    cards = _relation_counts(session, Card, account_ids)
    loans = _relation_counts(session, Loan, account_ids)
    return [
        AccountRead.from_account(
            a,
            transaction_count=transactions.get(a.id, 0),
            card_count=cards.get(a.id, 0),
            loan_count=loans.get(a.id, 0),
        )
        for a in accounts
    ]


def account_read(session: Session, account: Account) -> AccountRead:
    return account_reads(session, [account])[0]


def create_account(
    session: Session,
    data: AccountCreate,
    ids: IdGenerator,
    actor: str = "system",
) -> Account:
    email = str(data.email)
    if email_in_use(session, email):
        raise InvalidOperationError("Email is already in use")

    initial_balance = to_money(data.initial_balance)

    with unit_of_work(session):
        account = Account(
            account_number=allocate_unique(session, Account.account_number, ids.account_number),
            owner_name=data.owner_name,
            email=email,
            phone_number=data.phone_number,
            account_type=data.account_type,
            balance=initial_balance,
            notes=data.notes,
            status=AccountStatus.active,
        )
        session.add(account)
        session.flush()

        if initial_balance > 0:
            session.add(
                Transaction(
                    transaction_id=allocate_unique(session, Transaction.transaction_id, ids.transaction_id),
                    account_id=account.id,
                    transaction_type=TransactionType.deposit,
                    amount=initial_balance,
                    balance_after=initial_balance,
                    description=INITIAL_DEPOSIT_DESCRIPTION,
                    fee=Decimal("0.00"),
                    status=TransactionStatus.completed,
                )
            )

        record_audit(session, account.id, AuditAction.created, actor)

    session.refresh(account)
    logger.info("Account %s created for %s (id=%s)", account.account_number, account.owner_name, account.id)
    return account


def _apply_transition(
    session: Session,
    account: Account,
    target: AccountStatus,
    actor: str,
    reason: Optional[str],
) -> None:
    if account.status == target:
        raise InvalidOperationError(f"Account is already {target.value.lower()}")
    if account.status == AccountStatus.closed:
        raise InvalidOperationError("A closed account cannot be changed")
    if target not in ALLOWED_TRANSITIONS[account.status]:
        raise InvalidOperationError(f"Cannot change account from {account.status.value} to {target.value}")
    if target == AccountStatus.closed and account.balance != 0:
        raise InvalidOperationError("Cannot close an account with a non-zero balance")

    _guarded_update(session, account, status=target)
    record_audit(session, account.id, TRANSITION_ACTIONS[target], actor, reason)


def change_status(
    session: Session,
    account_id: int,
    target: AccountStatus,
    actor: str = "system",
    reason: Optional[str] = None,
) -> Account:
    account = get_account(session, account_id)
    try:
        with unit_of_work(session):
            _apply_transition(session, account, target, actor, reason)
    except InvalidOperationError as exc:
        logger.warning("Status change of account %s to %s rejected: %s", account_id, target.value, exc.message)
        raise

    session.refresh(account)
    logger.info("Account %s is now %s (by %s)", account.account_number, account.status.value, actor)
    return account


def suspend_account(session: Session, account_id: int, reason: str, actor: str = "system") -> Account:
    return change_status(session, account_id, AccountStatus.suspended, actor, reason)


def activate_account(session: Session, account_id: int, reason: Optional[str] = None, actor: str = "system") -> Account:
    return change_status(session, account_id, AccountStatus.active, actor, reason)


def close_account(session: Session, account_id: int, reason: str, actor: str = "system") -> Account:
    return change_status(session, account_id, AccountStatus.closed, actor, reason)


def update_account(session: Session, account_id: int, data: AccountUpdate, actor: str = "system") -> Account:
    account = get_account(session, account_id)

    with unit_of_work(session):
        _guarded_update(
            session,
            account,
            owner_name=data.owner_name,
            phone_number=data.phone_number,
            notes=data.notes,
        )
        record_audit(session, account.id, AuditAction.updated, actor)

        # same rules as suspend/activate/close
        if data.status is not None and data.status != account.status:
            _apply_transition(session, account, data.status, actor, "Status changed by account update")

    session.refresh(account)
    logger.info("Account %s updated by %s", account.account_number, actor)
    return account


def delete_account(session: Session, account_id: int, actor: str = "system") -> None:
    account = get_account(session, account_id)

    if account.balance > 0:
        raise InvalidOperationError("Cannot delete an account that still holds a balance")

    pending = session.exec(
        select(func.count()).select_from(Transaction).where(
            Transaction.account_id == account_id,
            Transaction.status == TransactionStatus.pending,
        )
    ).one()
    active_loans = session.exec(
        select(func.count()).select_from(Loan).where(
            Loan.account_id == account_id,
            Loan.status == LoanStatus.active,
        )
    ).one()
    if pending or active_loans:
        logger.warning("Cannot delete account %s - has pending transactions or active loans", account_id)
        raise InvalidOperationError("Cannot delete the account - it has pending transactions or active loans")

    number = account.account_number
    with unit_of_work(session):
        # a deposit or status change since the checks above loses the race here
        _guarded_update(session, account)
        session.delete(account)
        record_audit(session, account_id, AuditAction.deleted, actor, f"Account {number} deleted")

    logger.info("Account %s (id=%s) deleted by %s", number, account_id, actor)


def get_account_history(session: Session, account_id: int) -> List[AccountAuditEvent]:
    get_account(session, account_id)
    return session.exec(
        select(AccountAuditEvent)
        .where(AccountAuditEvent.account_id == account_id)
        .order_by(AccountAuditEvent.timestamp.desc(), AccountAuditEvent.id.desc())
    ).all()
