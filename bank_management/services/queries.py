from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from math import ceil
from typing import Callable, List, Optional, TypeVar

from sqlmodel import Session, func, or_, select

from bank_management.core.config import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_RECENT_COUNT,
    MAX_PAGE_SIZE,
)
from bank_management.core.exceptions import ValidationError
from bank_management.models.account import Account
from bank_management.models.enums import AccountStatus, AccountType, TransactionStatus, TransactionType
from bank_management.models.transaction import Transaction
from bank_management.schemas.common import PagedResult
from bank_management.services.accounts import get_account
from bank_management.utils.dates import to_naive_utc

T = TypeVar("T")

ACCOUNT_SORT_COLUMNS = {
    "createdat": Account.created_at,
    "ownername": Account.owner_name,
    "balance": Account.balance,
    "accountnumber": Account.account_number,
    "accounttype": Account.account_type,
    "status": Account.status,
}


@dataclass
class PageRequest:
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        if self.page is None or self.page < 1:
            self.page = 1
        if self.page_size is None or self.page_size < 1:
            self.page_size = DEFAULT_PAGE_SIZE
        elif self.page_size > MAX_PAGE_SIZE:
            self.page_size = MAX_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class AccountFilters:
    search_term: Optional[str] = None
    account_type: Optional[AccountType] = None
    status: Optional[AccountStatus] = None
    sort_by: Optional[str] = None
    sort_direction: Optional[str] = None


@dataclass
class TransactionFilters:
    transaction_type: Optional[TransactionType] = None
    status: Optional[TransactionStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    search_term: Optional[str] = None


def _normalize_sort_key(sort_by: Optional[str]) -> str:
    return (sort_by or "").replace("_", "").lower()


def paginate(
    session: Session,
    query,
    paging: PageRequest,
    convert: Callable[[object], T] = lambda row: row,
) -> PagedResult[T]:
    """Count the filtered rows, then fetch one page of them.

    ``query`` must already carry its ordering.
    """
    total = session.exec(select(func.count()).select_from(query.subquery())).one()
    rows = session.exec(query.offset(paging.offset).limit(paging.page_size)).all()

    total_pages = ceil(total / paging.page_size) if total else 0
    return PagedResult(
        items=[convert(row) for row in rows],
        total_count=total,
        page=paging.page,
        page_size=paging.page_size,
        total_pages=total_pages,
        has_next_page=paging.page < total_pages,
        has_previous_page=paging.page > 1,
    )


def _contains(column, term: str):
    return func.lower(column).contains(term.lower(), autoescape=True)


def search_accounts(
    session: Session,
    filters: AccountFilters,
    paging: PageRequest,
    convert: Callable[[Account], T] = lambda row: row,
) -> PagedResult[T]:
    query = select(Account)

    if filters.search_term and filters.search_term.strip():
        term = filters.search_term.strip()
        query = query.where(
            or_(
                _contains(Account.owner_name, term),
                _contains(Account.email, term),
                _contains(Account.account_number, term),
            )
        )
    if filters.account_type is not None:
        query = query.where(Account.account_type == filters.account_type)
    if filters.status is not None:
        query = query.where(Account.status == filters.status)

    column = ACCOUNT_SORT_COLUMNS.get(_normalize_sort_key(filters.sort_by), Account.created_at)
    descending = (filters.sort_direction or "desc").lower() != "asc"
    if descending:
        query = query.order_by(column.desc(), Account.id.desc())
    else:
        query = query.order_by(column.asc(), Account.id.asc())

    return paginate(session, query, paging, convert)


def quick_search_accounts(session: Session, search_term: str) -> List[Account]:
    if not search_term or not search_term.strip():
        raise ValidationError("Search term is required")
    term = search_term.strip()
    return session.exec(
        select(Account)
        .where(
            or_(
                _contains(Account.owner_name, term),
                _contains(Account.email, term),
                _contains(Account.account_number, term),
                _contains(Account.phone_number, term),
            )
        )
        .order_by(Account.owner_name, Account.id)
    ).all()


def list_account_transactions(
    session: Session,
    account_id: int,
    filters: TransactionFilters,
    paging: PageRequest,
    convert: Callable[[Transaction], T] = lambda row: row,
) -> PagedResult[T]:
    get_account(session, account_id)

    query = select(Transaction).where(Transaction.account_id == account_id)

    if filters.transaction_type is not None:
        query = query.where(Transaction.transaction_type == filters.transaction_type)
    if filters.status is not None:
        query = query.where(Transaction.status == filters.status)
    if filters.start_date is not None:
        query = query.where(Transaction.timestamp >= to_naive_utc(filters.start_date))
    if filters.end_date is not None:
        query = query.where(Transaction.timestamp <= to_naive_utc(filters.end_date))
    if filters.min_amount is not None:
        query = query.where(Transaction.amount >= filters.min_amount)
    if filters.max_amount is not None:
        query = query.where(Transaction.amount <= filters.max_amount)
    if filters.search_term and filters.search_term.strip():
        term = filters.search_term.strip()
        query = query.where(
            or_(
                _contains(Transaction.description, term),
                _contains(Transaction.reference, term),
                _contains(Transaction.transaction_id, term),
            )
        )

    query = query.order_by(Transaction.timestamp.desc(), Transaction.id.desc())
    return paginate(session, query, paging, convert)


def recent_transactions(session: Session, count: int = DEFAULT_RECENT_COUNT) -> List[Transaction]:
    if count is None:
        count = DEFAULT_RECENT_COUNT
    count = max(1, min(count, MAX_PAGE_SIZE))
    return session.exec(
        select(Transaction)
        .order_by(Transaction.timestamp.desc(), Transaction.id.desc())
        .limit(count)
    ).all()


def pending_transactions(session: Session) -> List[Transaction]:
    return session.exec(
        select(Transaction)
        .where(Transaction.status == TransactionStatus.pending)
        .order_by(Transaction.timestamp.asc(), Transaction.id.asc())
    ).all()
