"""Scheduled transaction schemas."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from contudo.schemas.common import (
    Category,
    Money,
    TransactionType,
    coerce_category,
    coerce_date,
    require_amount,
    require_description,
)


class RepeatRule(str, Enum):
    """How often a scheduled transaction recurs."""

    ONCE = "once"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ScheduledTransaction(BaseModel):
    """A template for a future, possibly repeating, transaction."""

    id: int = Field(..., ge=1)
    description: str
    amount: Money
    type: TransactionType
    category: Category = Category.OUTROS
    scheduled_date: date
    repeat: RepeatRule = RepeatRule.ONCE
    created_at: datetime | None = None

    @field_validator("description")
    @classmethod
    def non_blank(cls, value: str) -> str:
        return require_description(value)

    @field_validator("amount")
    @classmethod
    def non_zero(cls, value: Decimal) -> Decimal:
        return require_amount(value)

    @field_validator("category", mode="before")
    @classmethod
    def fallback_category(cls, value: Any) -> Any:
        return coerce_category(value)

    @field_validator("scheduled_date", mode="before")
    @classmethod
    def date_only(cls, value: Any) -> Any:
        return coerce_date(value)


class ScheduledTransactionCreate(BaseModel):
    """Request body for scheduling a transaction."""

    description: str = ""
    amount: Decimal | None = None
    type: str | None = None
    category: str | None = None
    scheduled_date: date | None = None
    repeat: str = RepeatRule.ONCE.value
