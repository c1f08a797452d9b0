from enum import Enum


class AccountType(str, Enum):
    savings = "Savings"
    checking = "Checking"
    business = "Business"


class AccountStatus(str, Enum):
    active = "Active"
    suspended = "Suspended"
    closed = "Closed"


class TransactionType(str, Enum):
    deposit = "Deposit"
    withdrawal = "Withdrawal"
    transfer = "Transfer"
    payment = "Payment"


class TransactionStatus(str, Enum):
    pending = "Pending"
    completed = "Completed"
    failed = "Failed"
    cancelled = "Cancelled"


class CardType(str, Enum):
    debit = "Debit"
    credit = "Credit"
    prepaid = "Prepaid"


class CardStatus(str, Enum):
    active = "Active"
    blocked = "Blocked"
    expired = "Expired"
    cancelled = "Cancelled"


class LoanType(str, Enum):
    personal = "Personal"
    home = "Home"
    car = "Car"
    business = "Business"


class LoanStatus(str, Enum):
    active = "Active"
    paid = "Paid"
    defaulted = "Defaulted"
    cancelled = "Cancelled"


class LoanPaymentStatus(str, Enum):
    completed = "Completed"
    failed = "Failed"
    pending = "Pending"


class AuditAction(str, Enum):
    created = "Created"
    updated = "Updated"
    suspended = "Suspended"
    activated = "Activated"
    closed = "Closed"
    deleted = "Deleted"
