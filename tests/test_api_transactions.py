"""
API tests for the transactions endpoints.
"""

from decimal import Decimal

import pytest

from bank_management.models.enums import TransactionStatus, TransactionType
from bank_management.models.transaction import Transaction


@pytest.fixture
def funded_account(client):
    r = client.post("/api/accounts/", json={
        "ownerName": "John Doe", "email": "john@example.com", "initialBalance": 1000,
    })
    assert r.status_code == 201
    return r.json()["data"]


@pytest.fixture
def pending(session, funded_account):
    transaction = Transaction(
        transaction_id="TXNPENDING01",
        account_id=funded_account["id"],
        transaction_type=TransactionType.deposit,
        amount=Decimal("25"),
        description="Cheque deposit",
        status=TransactionStatus.pending,
    )
    session.add(transaction)
    session.commit()
    session.refresh(transaction)
    return transaction


class TestLookup:
    def test_get_by_id_and_transaction_id(self, client, funded_account):
        r = client.post(f"/api/accounts/{funded_account['id']}/deposit", json={"amount": 10})
        txn = r.json()["data"]

        r = client.get(f"/api/transactions/{txn['id']}")
        assert r.status_code == 200
        assert r.json()["data"]["transactionId"] == txn["transactionId"]

        r = client.get(f"/api/transactions/by-transaction-id/{txn['transactionId']}")
        assert r.status_code == 200
        assert r.json()["data"]["id"] == txn["id"]

    def test_missing_transaction(self, client):
        r = client.get("/api/transactions/4242")
        assert r.status_code == 404
        assert r.json()["message"] == "Transaction not found"


class TestListing:
    def test_account_transactions_paged_and_filtered(self, client, funded_account):
        account_id = funded_account["id"]
        client.post(f"/api/accounts/{account_id}/deposit", json={"amount": 10})
        client.post(f"/api/accounts/{account_id}/withdraw", json={"amount": 20})

        r = client.get(f"/api/transactions/accounts/{account_id}")
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["totalCount"] == 3
        assert data["pageSize"] == 20
        assert data["items"][0]["transactionType"] == "Withdrawal"

        r = client.get(f"/api/transactions/accounts/{account_id}", params={"transactionType": "Deposit"})
        assert r.json()["data"]["totalCount"] == 2

        r = client.get(f"/api/transactions/accounts/{account_id}", params={"minAmount": 15, "maxAmount": 100})
        assert [t["amount"] for t in r.json()["data"]["items"]] == [20.0]

    def test_account_transactions_for_missing_account(self, client):
        r = client.get("/api/transactions/accounts/999")
        assert r.status_code == 404

    def test_recent(self, client, funded_account):
        for _ in range(3):
            client.post(f"/api/accounts/{funded_account['id']}/deposit", json={"amount": 1})

        r = client.get("/api/transactions/recent", params={"count": 2})
        assert r.status_code == 200
        assert len(r.json()["data"]) == 2

    def test_pending(self, client, pending):
        r = client.get("/api/transactions/pending")
        assert r.status_code == 200
        assert [t["transactionId"] for t in r.json()["data"]] == ["TXNPENDING01"]

    def test_statistics(self, client, funded_account):
        r = client.get("/api/transactions/statistics")
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["totalTransactions"] == 1
        assert data["totalAmount"] == 1000.0
        assert data["transactionTypeCount"] == {"Deposit": 1}
        assert len(data["dailyTransactions"]) == 1

    def test_statistics_with_dates(self, client, funded_account):
        r = client.get("/api/transactions/statistics", params={
            "startDate": "2000-01-01T00:00:00", "endDate": "2000-12-31T00:00:00",
        })
        assert r.status_code == 200
        assert r.json()["data"]["totalTransactions"] == 0


class TestPendingActions:
    def test_cancel(self, client, pending):
        r = client.post(f"/api/transactions/{pending.id}/cancel", json={"reason": "Bounced"})
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["status"] == "Cancelled"
        assert data["description"] == "Cheque deposit - Cancelled: Bounced"

        r = client.post(f"/api/transactions/{pending.id}/cancel", json={"reason": "Again"})
        assert r.status_code == 400

    def test_cancel_requires_reason(self, client, pending):
        r = client.post(f"/api/transactions/{pending.id}/cancel", json={})
        assert r.status_code == 400

    def test_process(self, client, pending):
        r = client.post(f"/api/transactions/{pending.id}/process")
        assert r.status_code == 200
        assert r.json()["data"]["status"] == "Completed"


class TestFeeQuote:
    @pytest.mark.parametrize("kind, amount, fee", [
        ("Withdrawal", 100, 5.0),
        ("transfer", 20000, 20.0),
        ("Deposit", 100, 0.0),
        ("Payment", 100, 0.0),
    ])
    def test_calculate_fee(self, client, kind, amount, fee):
        r = client.get("/api/transactions/calculate-fee", params={"transactionType": kind, "amount": amount})
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["fee"] == fee
        assert data["transactionType"] == kind

    def test_calculate_fee_rejects_non_positive_amount(self, client):
        r = client.get("/api/transactions/calculate-fee", params={"transactionType": "Withdrawal", "amount": 0})
        assert r.status_code == 400
