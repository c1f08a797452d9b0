from calendar import monthrange
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

from bank_management.models.enums import CardStatus, CardType
from bank_management.utils.dates import utcnow

if TYPE_CHECKING:
    from bank_management.models.account import Account


class Card(SQLModel, table=True):
    __tablename__ = "card"

    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: int = Field(foreign_key="account.id", index=True)
    card_number: str = Field(max_length=19, unique=True)
    card_holder_name: str = Field(max_length=100)
    card_type: CardType = Field(default=CardType.debit)
    expiry_date: str = Field(max_length=7)  # MM/YYYY
    cvv: str = Field(max_length=3)
    credit_limit: Optional[Decimal] = Field(default=None, max_digits=18, decimal_places=2)
    available_credit: Decimal = Field(default=Decimal("0.00"), max_digits=18, decimal_places=2)
    status: CardStatus = Field(default=CardStatus.active)
    is_blocked: bool = Field(default=False)
    issued_date: datetime = Field(default_factory=utcnow)
    blocked_date: Optional[datetime] = None
    block_reason: Optional[str] = Field(default=None, max_length=255)

    account: Optional["Account"] = Relationship(back_populates="cards")

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """A card is valid through the last day of its expiry month."""
        now = now or utcnow()
        try:
            month_str, year_str = self.expiry_date.split("/")
            month, year = int(month_str), int(year_str)
            last_day = monthrange(year, month)[1]
        except ValueError:
            return True
        return now.date() > datetime(year, month, last_day).date()

    def can_use(self, now: Optional[datetime] = None) -> bool:
        return self.status == CardStatus.active and not self.is_blocked and not self.is_expired(now)
