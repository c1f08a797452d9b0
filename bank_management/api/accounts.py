from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from bank_management.core.id_generator import IdGenerator, get_id_generator
from bank_management.core.security import get_current_admin
from bank_management.database import get_session
from bank_management.models.enums import AccountStatus, AccountType
from bank_management.schemas.account import (
    AccountBalance,
    AccountCreate,
    AccountRead,
    AccountStatistics,
    AccountUpdate,
    ActivateRequest,
    AuditEventRead,
    StatusChangeRequest,
)
from bank_management.schemas.common import ApiResponse, PagedResult, ok
from bank_management.schemas.transaction import (
    DepositRequest,
    TransactionRead,
    TransferRequest,
    TransferResult,
    WithdrawRequest,
)
from bank_management.services import accounts as account_service
from bank_management.services import queries, statistics
from bank_management.services import transactions as transaction_service

router = APIRouter(
    prefix="/accounts",
    tags=["accounts"],
    dependencies=[Depends(get_current_admin)],
)


# Static paths go before /{account_id}

@router.get("/", response_model=ApiResponse[PagedResult[AccountRead]])
def list_accounts(
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    account_type: Optional[AccountType] = Query(None, alias="accountType"),
    account_status: Optional[AccountStatus] = Query(None, alias="status"),
    page: int = Query(1),
    page_size: int = Query(10, alias="pageSize"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_direction: Optional[str] = Query(None, alias="sortDirection"),
    session: Session = Depends(get_session),
):
    filters = queries.AccountFilters(
        search_term=search_term,
        account_type=account_type,
        status=account_status,
        sort_by=sort_by,
        sort_direction=sort_direction,
    )
    result = queries.search_accounts(session, filters, queries.PageRequest(page, page_size))
    result = result.model_copy(update={"items": account_service.account_reads(session, result.items)})
    return ok(result, "Accounts retrieved successfully")


@router.get("/search", response_model=ApiResponse[List[AccountRead]])
def quick_search(
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    session: Session = Depends(get_session),
):
    found = queries.quick_search_accounts(session, search_term)
    return ok(account_service.account_reads(session, found), f"Found {len(found)} account(s)")


@router.get("/statistics", response_model=ApiResponse[AccountStatistics])
def get_account_statistics(session: Session = Depends(get_session)):
    return ok(statistics.account_statistics(session), "Statistics retrieved successfully")


@router.get("/by-number/{account_number}", response_model=ApiResponse[AccountRead])
def get_account_by_number(account_number: str, session: Session = Depends(get_session)):
    account = account_service.get_account_by_number(session, account_number)
    return ok(account_service.account_read(session, account), "Account retrieved successfully")


@router.post("/", response_model=ApiResponse[AccountRead], status_code=status.HTTP_201_CREATED)
def create_account(
    data: AccountCreate,
    session: Session = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
    actor: str = Depends(get_current_admin),
):
    account = account_service.create_account(session, data, ids, actor)
    return ok(account_service.account_read(session, account), "Account created successfully")


@router.get("/{account_id}", response_model=ApiResponse[AccountRead])
def get_account(account_id: int, session: Session = Depends(get_session)):
    account = account_service.get_account(session, account_id)
    return ok(account_service.account_read(session, account), "Account retrieved successfully")


@router.get("/{account_id}/balance", response_model=ApiResponse[AccountBalance])
def get_balance(account_id: int, session: Session = Depends(get_session)):
    account = account_service.get_account(session, account_id)
    balance = AccountBalance(
        account_id=account.id,
        account_number=account.account_number,
        balance=account_service.get_account_balance(session, account_id),
    )
    return ok(balance, "Balance retrieved successfully")


@router.get("/{account_id}/history", response_model=ApiResponse[List[AuditEventRead]])
def get_history(account_id: int, session: Session = Depends(get_session)):
    events = account_service.get_account_history(session, account_id)
    return ok([AuditEventRead.model_validate(e) for e in events], "History retrieved successfully")


@router.put("/{account_id}", response_model=ApiResponse[AccountRead])
def update_account(
    account_id: int,
    data: AccountUpdate,
    session: Session = Depends(get_session),
    actor: str = Depends(get_current_admin),
):
    account = account_service.update_account(session, account_id, data, actor)
    return ok(account_service.account_read(session, account), "Account updated successfully")


@router.delete("/{account_id}", response_model=ApiResponse[bool])
def delete_account(
    account_id: int,
    session: Session = Depends(get_session),
    actor: str = Depends(get_current_admin),
):
    account_service.delete_account(session, account_id, actor)
    return ok(True, "Account deleted successfully")


@router.post("/{account_id}/suspend", response_model=ApiResponse[AccountRead])
def suspend_account(
    account_id: int,
    data: StatusChangeRequest,
    session: Session = Depends(get_session),
    actor: str = Depends(get_current_admin),
):
    account = account_service.suspend_account(session, account_id, data.reason, actor)
    return ok(account_service.account_read(session, account), "Account suspended successfully")


@router.post("/{account_id}/activate", response_model=ApiResponse[AccountRead])
def activate_account(
    account_id: int,
    data: Optional[ActivateRequest] = None,
    session: Session = Depends(get_session),
    actor: str = Depends(get_current_admin),
):
    reason = data.reason if data else None
    account = account_service.activate_account(session, account_id, reason, actor)
    return ok(account_service.account_read(session, account), "Account activated successfully")


@router.post("/{account_id}/close", response_model=ApiResponse[AccountRead])
def close_account(
    account_id: int,
    data: StatusChangeRequest,
    session: Session = Depends(get_session),
    actor: str = Depends(get_current_admin),
):
    account = account_service.close_account(session, account_id, data.reason, actor)
    return ok(account_service.account_read(session, account), "Account closed successfully")


# Money movement

@router.post("/{account_id}/deposit", response_model=ApiResponse[TransactionRead])
def deposit(
    account_id: int,
    data: DepositRequest,
    session: Session = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
):
    transaction = transaction_service.deposit(
        session, account_id, data.amount, ids, data.description, data.reference
    )
    return ok(TransactionRead.from_transaction(transaction), "Deposit completed successfully")


@router.post("/{account_id}/withdraw", response_model=ApiResponse[TransactionRead])
def withdraw(
    account_id: int,
    data: WithdrawRequest,
    session: Session = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
):
    transaction = transaction_service.withdraw(
        session, account_id, data.amount, ids, data.description, data.reference
    )
    return ok(TransactionRead.from_transaction(transaction), "Withdrawal completed successfully")


@router.post("/{account_id}/transfer", response_model=ApiResponse[TransferResult])
def transfer(
    account_id: int,
    data: TransferRequest,
    session: Session = Depends(get_session),
    ids: IdGenerator = Depends(get_id_generator),
):
    outcome = transaction_service.transfer(
        session, account_id, data.to_account_number, data.amount, ids, data.description, data.reference
    )
    message = "Transfer completed successfully"
    result = TransferResult(
        from_transaction=TransactionRead.from_transaction(outcome.debit),
        to_transaction=TransactionRead.from_transaction(outcome.credit),
        from_account_new_balance=outcome.from_balance,
        to_account_new_balance=outcome.to_balance,
        total_fee=outcome.fee,
        message=message,
    )
    return ok(result, message)
