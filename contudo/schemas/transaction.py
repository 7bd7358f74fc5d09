"""Transaction schemas."""

import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contudo.schemas.common import (
    Category,
    Money,
    TransactionType,
    coerce_category,
    coerce_date,
    require_amount,
    require_description,
)


class Transaction(BaseModel):
    """A recorded income or expense."""

    id: int = Field(..., ge=1)
    description: str
    amount: Money
    type: TransactionType
    category: Category = Category.OUTROS
    date: dt.date
    due_date: dt.date | None = None
    is_fixed: bool = False
    is_paid: bool = False
    is_overdue: bool = False
    paid_at: dt.datetime | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

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

    @field_validator("date", "due_date", mode="before")
    @classmethod
    def date_only(cls, value: Any) -> Any:
        return coerce_date(value)


class TransactionCreate(BaseModel):
    """Request body for creating a transaction.

    Required fields are checked by the ledger service so that API, CLI and
    scheduled callers share one set of messages.
    """

    description: str = ""
    amount: Decimal | None = None
    type: str | None = None
    category: str | None = None
    date: dt.date | None = None
    due_date: dt.date | None = None
    is_fixed: bool | None = None


class TransactionUpdate(BaseModel):
    """Partial update; only the listed fields may be changed."""

    model_config = ConfigDict(extra="forbid")

    description: str | None = None
    amount: Decimal | None = None
    type: str | None = None
    category: str | None = None
    date: dt.date | None = None
    due_date: dt.date | None = None
    is_fixed: bool | None = None
    is_paid: bool | None = None


class TransactionFilter(BaseModel):
    """List filter; every provided criterion must match."""

    search: str | None = None
    type: TransactionType | None = None
    category: Category | None = None


class Totals(BaseModel):
    """Income, expense magnitude and balance."""

    income: Money = Decimal("0")
    expense: Money = Decimal("0")
    balance: Money = Decimal("0")


class MonthTotals(Totals):
    """Totals for one calendar month."""

    month: int


class CategoryTotal(BaseModel):
    """Expense magnitude for one category."""

    category: Category
    label: str
    total: Money
    count: int


class TransactionSummary(BaseModel):
    """Dashboard summary in the public API shape."""

    model_config = ConfigDict(populate_by_name=True)

    receitas: Money = Decimal("0")
    despesas: Money = Decimal("0")
    saldo: Money = Decimal("0")
    total_transactions: int = Field(0, alias="totalTransactions")
    receitas_count: int = Field(0, alias="receitasCount")
    despesas_count: int = Field(0, alias="despesasCount")
