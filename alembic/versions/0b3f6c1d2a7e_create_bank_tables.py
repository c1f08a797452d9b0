"""create bank tables

Revision ID: 0b3f6c1d2a7e
Revises:
Create Date: 2026-10-19 10:12:41.518302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0b3f6c1d2a7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

account_type = sa.Enum('savings', 'checking', 'business', name='accounttype')
account_status = sa.Enum('active', 'suspended', 'closed', name='accountstatus')
transaction_type = sa.Enum('deposit', 'withdrawal', 'transfer', 'payment', name='transactiontype')
transaction_status = sa.Enum('pending', 'completed', 'failed', 'cancelled', name='transactionstatus')
card_type = sa.Enum('debit', 'credit', 'prepaid', name='cardtype')
card_status = sa.Enum('active', 'blocked', 'expired', 'cancelled', name='cardstatus')
loan_type = sa.Enum('personal', 'home', 'car', 'business', name='loantype')
loan_status = sa.Enum('active', 'paid', 'defaulted', 'cancelled', name='loanstatus')
loan_payment_status = sa.Enum('completed', 'failed', 'pending', name='loanpaymentstatus')
audit_action = sa.Enum('created', 'updated', 'suspended', 'activated', 'closed', 'deleted', name='auditaction')


def upgrade() -> None:
    """Upgrade schema: accounts, transactions, cards, loans, audit events and admins."""
    op.create_table(
        'account',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('account_number', sa.String(length=20), nullable=False),
        sa.Column('owner_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('phone_number', sa.String(length=20), nullable=True),
        sa.Column('balance', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('account_type', account_type, nullable=False),
        sa.Column('status', account_status, nullable=False),
        sa.Column('notes', sa.String(length=500), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_account_account_number', 'account', ['account_number'], unique=True)
    op.create_index('ix_account_email', 'account', ['email'], unique=True)

    op.create_table(
        'transaction',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('transaction_id', sa.String(length=50), nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('account.id'), nullable=False),
        sa.Column('transaction_type', transaction_type, nullable=False),
        sa.Column('amount', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('balance_after', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('reference', sa.String(length=100), nullable=True),
        sa.Column('recipient_account', sa.String(length=20), nullable=True),
        sa.Column('recipient_name', sa.String(length=100), nullable=True),
        sa.Column('status', transaction_status, nullable=False),
        sa.Column('fee', sa.Numeric(precision=18, scale=2), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_transaction_transaction_id', 'transaction', ['transaction_id'], unique=True)
    op.create_index('ix_transaction_account_id', 'transaction', ['account_id'])
    op.create_index('ix_transaction_timestamp', 'transaction', ['timestamp'])

    op.create_table(
        'card',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('account.id'), nullable=False),
        sa.Column('card_number', sa.String(length=19), nullable=False, unique=True),
        sa.Column('card_holder_name', sa.String(length=100), nullable=False),
        sa.Column('card_type', card_type, nullable=False),
        sa.Column('expiry_date', sa.String(length=7), nullable=False),
        sa.Column('cvv', sa.String(length=3), nullable=False),
        sa.Column('credit_limit', sa.Numeric(precision=18, scale=2), nullable=True),
        sa.Column('available_credit', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('status', card_status, nullable=False),
        sa.Column('is_blocked', sa.Boolean(), nullable=False),
        sa.Column('issued_date', sa.DateTime(), nullable=False),
        sa.Column('blocked_date', sa.DateTime(), nullable=True),
        sa.Column('block_reason', sa.String(length=255), nullable=True),
    )
    op.create_index('ix_card_account_id', 'card', ['account_id'])

    op.create_table(
        'loan',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('loan_number', sa.String(length=50), nullable=False, unique=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('account.id'), nullable=False),
        sa.Column('loan_type', loan_type, nullable=False),
        sa.Column('principal_amount', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('outstanding_amount', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('interest_rate', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('term_in_months', sa.Integer(), nullable=False),
        sa.Column('monthly_payment', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('status', loan_status, nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('next_payment_date', sa.DateTime(), nullable=True),
        sa.Column('purpose', sa.String(length=500), nullable=True),
        sa.Column('notes', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_loan_account_id', 'loan', ['account_id'])

    op.create_table(
        'loan_payment',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('loan_id', sa.Integer(), sa.ForeignKey('loan.id'), nullable=False),
        sa.Column('amount', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('principal_amount', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('interest_amount', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('status', loan_payment_status, nullable=False),
        sa.Column('payment_date', sa.DateTime(), nullable=False),
        sa.Column('due_date', sa.DateTime(), nullable=False),
        sa.Column('notes', sa.String(length=255), nullable=True),
    )
    op.create_index('ix_loan_payment_loan_id', 'loan_payment', ['loan_id'])

    # no FK: audit events outlive deleted accounts
    op.create_table(
        'account_audit_event',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('action', audit_action, nullable=False),
        sa.Column('actor', sa.String(length=100), nullable=False),
        sa.Column('reason', sa.String(length=500), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_account_audit_event_account_id', 'account_audit_event', ['account_id'])
    op.create_index('ix_account_audit_event_timestamp', 'account_audit_event', ['timestamp'])

    op.create_table(
        'admin_user',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_admin_user_username', 'admin_user', ['username'], unique=True)


def downgrade() -> None:
    """Downgrade schema: drop every table and enum type."""
    op.drop_table('admin_user')
    op.drop_table('account_audit_event')
    op.drop_table('loan_payment')
    op.drop_table('loan')
    op.drop_table('card')
    op.drop_table('transaction')
    op.drop_table('account')

    bind = op.get_bind()
    for enum_type in (
        audit_action, loan_payment_status, loan_status, loan_type, card_status,
        card_type, transaction_status, transaction_type, account_status, account_type,
    ):
        enum_type.drop(bind, checkfirst=True)
