from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from bank_management.core.config import DEFAULT_RECENT_COUNT, DEFAULT_TRANSACTION_PAGE_SIZE
from bank_management.core.security import get_current_admin
from bank_management.database import get_session
from bank_management.models.enums import TransactionStatus, TransactionType
from bank_management.schemas.common import ApiResponse, PagedResult, ok
from bank_management.schemas.transaction import (
    CancelTransactionRequest,
    FeeQuote,
    TransactionRead,
    TransactionStatistics,
)
from bank_management.services import fees, queries, statistics
from bank_management.services import transactions as transaction_service

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("/recent", response_model=ApiResponse[List[TransactionRead]])
def get_recent_transactions(
    count: int = Query(DEFAULT_RECENT_COUNT),
    session: Session = Depends(get_session),
):
    found = queries.recent_transactions(session, count)
    return ok([TransactionRead.from_transaction(t) for t in found], "Recent transactions retrieved successfully")


@router.get("/pending", response_model=ApiResponse[List[TransactionRead]])
def get_pending_transactions(session: Session = Depends(get_session)):
    found = queries.pending_transactions(session)
    return ok([TransactionRead.from_transaction(t) for t in found], "Pending transactions retrieved successfully")


@router.get("/statistics", response_model=ApiResponse[TransactionStatistics])
def get_transaction_statistics(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    session: Session = Depends(get_session),
):
    stats = statistics.transaction_statistics(session, start_date, end_date)
    return ok(stats, "Statistics retrieved successfully")


@router.get("/calculate-fee", response_model=ApiResponse[FeeQuote])
def calculate_fee(
    transaction_type: str = Query(..., alias="transactionType"),
    amount: Decimal = Query(..., gt=0),
):
    quote = FeeQuote(
        transaction_type=transaction_type,
        amount=amount,
        fee=fees.calculate_fee(transaction_type, amount),
    )
    return ok(quote, "Fee calculated successfully")


@router.get("/by-transaction-id/{transaction_id}", response_model=ApiResponse[TransactionRead])
def get_by_transaction_id(transaction_id: str, session: Session = Depends(get_session)):
    transaction = transaction_service.get_transaction_by_reference_id(session, transaction_id)
    return ok(TransactionRead.from_transaction(transaction), "Transaction retrieved successfully")


@router.get("/accounts/{account_id}", response_model=ApiResponse[PagedResult[TransactionRead]])
def get_account_transactions(
    account_id: int,
    transaction_type: Optional[TransactionType] = Query(None, alias="transactionType"),
    transaction_status: Optional[TransactionStatus] = Query(None, alias="status"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    min_amount: Optional[Decimal] = Query(None, alias="minAmount"),
    max_amount: Optional[Decimal] = Query(None, alias="maxAmount"),
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    page: int = Query(1),
    page_size: int = Query(DEFAULT_TRANSACTION_PAGE_SIZE, alias="pageSize"),
    session: Session = Depends(get_session),
):
    filters = queries.TransactionFilters(
        transaction_type=transaction_type,
        status=transaction_status,
        start_date=start_date,
        end_date=end_date,
        min_amount=min_amount,
        max_amount=max_amount,
        search_term=search_term,
    )
    result = queries.list_account_transactions(
        session, account_id, filters, queries.PageRequest(page, page_size), TransactionRead.from_transaction
    )
    return ok(result, "Transactions retrieved successfully")


@router.get("/{transaction_id}", response_model=ApiResponse[TransactionRead])
def get_transaction(transaction_id: int, session: Session = Depends(get_session)):
    transaction = transaction_service.get_transaction(session, transaction_id)
    return ok(TransactionRead.from_transaction(transaction), "Transaction retrieved successfully")


@router.post("/{transaction_id}/cancel", response_model=ApiResponse[TransactionRead])
def cancel_transaction(
    transaction_id: int,
    data: CancelTransactionRequest,
    session: Session = Depends(get_session),
):
    transaction = transaction_service.cancel_transaction(session, transaction_id, data.reason)
    return ok(TransactionRead.from_transaction(transaction), "Transaction cancelled successfully")


@router.post("/{transaction_id}/process", response_model=ApiResponse[TransactionRead])
def process_transaction(transaction_id: int, session: Session = Depends(get_session)):
    transaction = transaction_service.process_transaction(session, transaction_id)
    return ok(TransactionRead.from_transaction(transaction), "Transaction processed successfully")
