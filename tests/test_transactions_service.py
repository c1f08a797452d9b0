"""Tests for deposits, withdrawals, transfers and pending-transaction handling."""

from decimal import Decimal

import pytest
from sqlalchemy import text
from sqlmodel import Session, select

from bank_management.core.exceptions import (
    AccountNotFoundError,
    ConcurrencyConflictError,
    InsufficientFundsError,
    InvalidOperationError,
    SameAccountError,
    TransactionNotFoundError,
)
from bank_management.models.account import Account
from bank_management.models.enums import AccountStatus, TransactionStatus, TransactionType
from bank_management.models.transaction import Transaction
from bank_management.services import accounts as account_service
from bank_management.services import transactions as transaction_service


def _balance(session, account_id):
    session.expire_all()
    return session.get(Account, account_id).balance


def _count(session, account_id=None):
    query = select(Transaction)
    if account_id is not None:
        query = query.where(Transaction.account_id == account_id)
    return len(session.exec(query).all())


@pytest.fixture
def pending_transaction(session, make_account):
    account = make_account()
    transaction = Transaction(
        transaction_id="TXNPENDING01",
        account_id=account.id,
        transaction_type=TransactionType.deposit,
        amount=Decimal("75"),
        description="Cheque deposit",
        status=TransactionStatus.pending,
    )
    session.add(transaction)
    session.commit()
    session.refresh(transaction)
    return transaction


class TestDeposit:
    def test_deposit_increases_balance(self, session, ids, make_account):
        account = make_account(balance="100")

        transaction = transaction_service.deposit(session, account.id, Decimal("50.25"), ids)

        assert transaction.transaction_type == TransactionType.deposit
        assert transaction.amount == Decimal("50.25")
        assert transaction.balance_after == Decimal("150.25")
        assert transaction.fee == Decimal("0")
        assert transaction.description == "Cash deposit"
        assert transaction.status == TransactionStatus.completed
        assert _balance(session, account.id) == Decimal("150.25")

    def test_deposit_bumps_account_version(self, session, ids, make_account):
        account = make_account()
        transaction_service.deposit(session, account.id, Decimal("10"), ids)
        session.expire_all()
        assert session.get(Account, account.id).version == 2

    def test_deposit_keeps_description_and_reference(self, session, ids, make_account):
        account = make_account()
        transaction = transaction_service.deposit(
            session, account.id, Decimal("10"), ids, description="Salary", reference="PAY-42"
        )
        assert transaction.description == "Salary"
        assert transaction.reference == "PAY-42"

    def test_deposit_on_suspended_account_is_rejected(self, session, ids, make_account):
        account = make_account()
        account_service.suspend_account(session, account.id, "review")

        with pytest.raises(InvalidOperationError):
            transaction_service.deposit(session, account.id, Decimal("10"), ids)
        assert _count(session, account.id) == 0

    def test_deposit_of_zero_is_rejected(self, session, ids, make_account):
        account = make_account()
        with pytest.raises(InvalidOperationError):
            transaction_service.deposit(session, account.id, Decimal("0"), ids)

    def test_deposit_that_rounds_to_zero_is_rejected(self, session, ids, make_account):
        account = make_account()
        with pytest.raises(InvalidOperationError):
            transaction_service.deposit(session, account.id, Decimal("0.004"), ids)
        assert _count(session, account.id) == 0
        assert _balance(session, account.id) == Decimal("0")

    def test_sub_cent_withdrawal_is_rejected(self, session, ids, make_account):
        account = make_account(balance="10")
        with pytest.raises(InvalidOperationError):
            transaction_service.withdraw(session, account.id, Decimal("0.001"), ids)
        assert _count(session, account.id) == 1

    def test_deposit_to_missing_account(self, session, ids):
        with pytest.raises(AccountNotFoundError):
            transaction_service.deposit(session, 404, Decimal("10"), ids)


class TestWithdraw:
    def test_withdraw_charges_fee(self, session, ids, make_account):
        account = make_account(balance="500")

        transaction = transaction_service.withdraw(session, account.id, Decimal("100"), ids)

        assert transaction.fee == Decimal("5.00")
        assert transaction.balance_after == Decimal("395.00")
        assert transaction.description == "Cash withdrawal"
        assert _balance(session, account.id) == Decimal("395.00")

    def test_withdraw_more_than_balance(self, session, ids, make_account):
        account = make_account(balance="50")

        with pytest.raises(InsufficientFundsError):
            transaction_service.withdraw(session, account.id, Decimal("60"), ids)
        assert _balance(session, account.id) == Decimal("50")

    def test_withdraw_that_cannot_cover_fee(self, session, ids, make_account):
        account = make_account(balance="100")

        with pytest.raises(InsufficientFundsError):
            transaction_service.withdraw(session, account.id, Decimal("100"), ids)
        assert _balance(session, account.id) == Decimal("100")
        assert _count(session, account.id) == 1

    def test_withdraw_exact_amount_plus_fee_empties_account(self, session, ids, make_account):
        account = make_account(balance="105")

        transaction = transaction_service.withdraw(session, account.id, Decimal("100"), ids)

        assert transaction.balance_after == Decimal("0")
        assert _balance(session, account.id) == Decimal("0")

    def test_withdraw_from_suspended_account(self, session, ids, make_account):
        account = make_account(balance="500")
        account_service.suspend_account(session, account.id, "review")

        with pytest.raises(InvalidOperationError):
            transaction_service.withdraw(session, account.id, Decimal("10"), ids)


class TestTransfer:
    def test_transfer_moves_money_and_charges_source(self, session, ids, make_account):
        source = make_account("Alice", balance="1000")
        destination = make_account("Bob", balance="10")

        outcome = transaction_service.transfer(
            session, source.id, destination.account_number, Decimal("200"), ids
        )

        assert outcome.fee == Decimal("2.00")
        assert outcome.from_balance == Decimal("798.00")
        assert outcome.to_balance == Decimal("210")
        assert _balance(session, source.id) == Decimal("798.00")
        assert _balance(session, destination.id) == Decimal("210")

    def test_transfer_creates_both_legs(self, session, ids, make_account):
        source = make_account("Alice", balance="1000")
        destination = make_account("Bob")

        outcome = transaction_service.transfer(
            session, source.id, destination.account_number, Decimal("200"), ids
        )
        debit, credit = outcome.debit, outcome.credit

        assert debit.account_id == source.id
        assert debit.fee == Decimal("2.00")
        assert debit.recipient_account == destination.account_number
        assert debit.recipient_name == "Bob"
        assert debit.description == f"Transfer to {destination.account_number}"

        assert credit.account_id == destination.id
        assert credit.fee == Decimal("0")
        assert credit.recipient_account == source.account_number
        assert credit.recipient_name == "Alice"
        assert credit.description == f"Transfer from {source.account_number}"

        assert debit.timestamp == credit.timestamp
        assert debit.transaction_id != credit.transaction_id

    def test_transfer_conserves_money_minus_fee(self, session, ids, make_account):
        source = make_account("Alice", balance="5000")
        destination = make_account("Bob", balance="300")
        before = Decimal("5300")

        outcome = transaction_service.transfer(
            session, source.id, destination.account_number, Decimal("1500"), ids
        )

        after = _balance(session, source.id) + _balance(session, destination.id)
        assert before - after == outcome.fee

    def test_transfer_to_unknown_account(self, session, ids, make_account):
        source = make_account(balance="100")
        with pytest.raises(AccountNotFoundError):
            transaction_service.transfer(session, source.id, "ACC404404404", Decimal("10"), ids)

    def test_transfer_to_same_account(self, session, ids, make_account):
        source = make_account(balance="100")
        with pytest.raises(SameAccountError):
            transaction_service.transfer(session, source.id, source.account_number, Decimal("10"), ids)

    def test_transfer_to_suspended_account(self, session, ids, make_account):
        source = make_account("Alice", balance="100")
        destination = make_account("Bob")
        account_service.suspend_account(session, destination.id, "review")

        with pytest.raises(InvalidOperationError):
            transaction_service.transfer(session, source.id, destination.account_number, Decimal("10"), ids)
        assert _balance(session, source.id) == Decimal("100")

    def test_transfer_that_cannot_cover_fee_changes_nothing(self, session, ids, make_account):
        source = make_account("Alice", balance="100")
        destination = make_account("Bob")

        with pytest.raises(InsufficientFundsError):
            transaction_service.transfer(session, source.id, destination.account_number, Decimal("99"), ids)

        assert _balance(session, source.id) == Decimal("100")
        assert _balance(session, destination.id) == Decimal("0")
        assert _count(session, destination.id) == 0


class TestConcurrency:
    def test_stale_version_raises_conflict_and_rolls_back(self, session, ids, make_account):
        account = make_account(balance="100")
        account = session.get(Account, account.id)
        assert account.version == 1

        # another writer bumps the row behind the session's back
        session.connection().execute(
            text("UPDATE account SET version = version + 1 WHERE id = :id"), {"id": account.id}
        )

        with pytest.raises(ConcurrencyConflictError):
            transaction_service.deposit(session, account.id, Decimal("10"), ids)

        assert _balance(session, account.id) == Decimal("100")
        assert _count(session, account.id) == 1

    def test_close_loses_to_a_deposit_made_after_it_read_the_account(self, session, make_account):
        account = make_account()
        account = session.get(Account, account.id)
        assert account.balance == Decimal("0.00")

        # a deposit lands after the closer loaded the zero balance
        session.connection().execute(
            text("UPDATE account SET balance = 100, version = version + 1 WHERE id = :id"), {"id": account.id}
        )

        with pytest.raises(ConcurrencyConflictError):
            account_service.close_account(session, account.id, "Customer request")

        session.expire_all()
        assert session.get(Account, account.id).status == AccountStatus.active

    def test_deposit_loses_to_a_suspension_made_after_it_read_the_account(self, session, engine, ids, make_account):
        account = make_account(balance="50")
        account = session.get(Account, account.id)
        assert account.status == AccountStatus.active

        with Session(engine) as other:
            account_service.suspend_account(other, account.id, "Fraud review")

        with pytest.raises(ConcurrencyConflictError):
            transaction_service.deposit(session, account.id, Decimal("10"), ids)

        session.expire_all()
        reloaded = session.get(Account, account.id)
        assert reloaded.status == AccountStatus.suspended
        assert reloaded.balance == Decimal("50.00")

    def test_status_change_and_delete_bump_the_version(self, session, make_account):
        account = make_account()
        assert account.version == 1

        suspended = account_service.suspend_account(session, account.id, "Review")
        assert suspended.version == 2

        session.connection().execute(
            text("UPDATE account SET version = version + 1 WHERE id = :id"), {"id": account.id}
        )

        with pytest.raises(ConcurrencyConflictError):
            account_service.delete_account(session, account.id)
        assert account_service.account_exists(session, account.id)


class TestPendingTransactions:
    def test_cancel_pending_transaction(self, session, pending_transaction):
        cancelled = transaction_service.cancel_transaction(session, pending_transaction.id, "Bounced")

        assert cancelled.status == TransactionStatus.cancelled
        assert cancelled.description == "Cheque deposit - Cancelled: Bounced"

    def test_cancel_completed_transaction_is_rejected(self, session, ids, make_account):
        account = make_account()
        transaction = transaction_service.deposit(session, account.id, Decimal("10"), ids)

        with pytest.raises(InvalidOperationError):
            transaction_service.cancel_transaction(session, transaction.id, "too late")

    def test_process_pending_transaction(self, session, pending_transaction):
        processed = transaction_service.process_transaction(session, pending_transaction.id)
        assert processed.status == TransactionStatus.completed

        with pytest.raises(InvalidOperationError):
            transaction_service.process_transaction(session, pending_transaction.id)

    def test_lookup_by_reference_id(self, session, pending_transaction):
        found = transaction_service.get_transaction_by_reference_id(session, "TXNPENDING01")
        assert found.id == pending_transaction.id
        assert transaction_service.transaction_exists(session, "TXNPENDING01")
        assert not transaction_service.transaction_exists(session, "TXNMISSING")

        with pytest.raises(TransactionNotFoundError):
            transaction_service.get_transaction_by_reference_id(session, "TXNMISSING")

    def test_get_missing_transaction(self, session):
        with pytest.raises(TransactionNotFoundError):
            transaction_service.get_transaction(session, 12345)


def test_transaction_direction_helpers():
    def make(kind):
        return Transaction(transaction_id="TXNX", account_id=1, transaction_type=kind, amount=Decimal("1"))

    assert make(TransactionType.deposit).is_credit()
    assert not make(TransactionType.deposit).is_debit()
    assert make(TransactionType.withdrawal).is_debit()
    assert make(TransactionType.payment).is_debit()
    assert make(TransactionType.transfer).is_transfer()
