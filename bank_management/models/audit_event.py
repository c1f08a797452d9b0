from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from bank_management.models.enums import AuditAction
from bank_management.utils.dates import utcnow


class AccountAuditEvent(SQLModel, table=True):
    """Append-only record of administrative actions on an account.

    ``account_id`` has no foreign key; events remain after the account is deleted.
    """

    __tablename__ = "account_audit_event"

    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: int = Field(index=True)
    action: AuditAction
    actor: str = Field(max_length=100)
    reason: Optional[str] = Field(default=None, max_length=500)
    timestamp: datetime = Field(default_factory=utcnow, index=True)
