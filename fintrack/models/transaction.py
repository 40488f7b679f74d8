import uuid
from datetime import datetime, date
from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Index
from sqlmodel import SQLModel, Field

from ..domain.models import Direction
from ..domain.money import Money
from .base import utcnow


class Transaction(SQLModel, table=True):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_transactions_amount_positive"),
        # Matches the paging order (txn_date desc, created_at desc, id desc)
        Index("ix_transactions_user_order", "user_id", "txn_date", "created_at", "id"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    category_id: uuid.UUID = Field(foreign_key="categories.id", index=True)

    direction: Direction
    amount_cents: int = Field(sa_type=BigInteger)
    txn_date: date
    description: Optional[str] = Field(default=None, max_length=255)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    @property
    def amount(self) -> Money:
        return Money.from_cents(self.amount_cents)
