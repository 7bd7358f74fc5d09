"""Shared schema types."""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any

from pydantic import PlainSerializer

# Amounts are Decimals in memory and plain JSON numbers on the wire.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
# Largest accepted magnitude; keeps cent rounding inside the default decimal context.
MAX_AMOUNT = Decimal("1e15")


class TransactionType(str, Enum):
    """Direction of a transaction."""

    RECEITA = "receita"
    DESPESA = "despesa"


class Category(str, Enum):
    """Fixed category set."""

    SALARIO = "salario"
    FREELANCE = "freelance"
    ALIMENTACAO = "alimentacao"
    TRANSPORTE = "transporte"
    MORADIA = "moradia"
    SAUDE = "saude"
    EDUCACAO = "educacao"
    LAZER = "lazer"
    OUTROS = "outros"


CATEGORY_LABELS = {
    Category.SALARIO: "Salário",
    Category.FREELANCE: "Freelance",
    Category.ALIMENTACAO: "Alimentação",
    Category.TRANSPORTE: "Transporte",
    Category.MORADIA: "Moradia",
    Category.SAUDE: "Saúde",
    Category.EDUCACAO: "Educação",
    Category.LAZER: "Lazer",
    Category.OUTROS: "Outros",
}


def category_label(value: Any) -> str:
    """Return the display label for a category, falling back to "Outros"."""
    try:
        return CATEGORY_LABELS[Category(value)]
    except ValueError:
        return CATEGORY_LABELS[Category.OUTROS]


def coerce_category(value: Any) -> Any:
    """Map unknown stored categories to ``outros``."""
    if value is None:
        return Category.OUTROS
    try:
        return Category(value)
    except ValueError:
        return Category.OUTROS


def coerce_date(value: Any) -> Any:
    """Accept full ISO timestamps where a calendar date is expected."""
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    return value


def require_description(value: str) -> str:
    """Reject blank descriptions on stored records."""
    text = value.strip()
    if not text:
        raise ValueError("description must not be blank")
    return text


def require_amount(value: Decimal) -> Decimal:
    """Reject zero, non-finite or oversized amounts on stored records."""
    if not value.is_finite() or value == 0:
        raise ValueError("amount must be a non-zero number")
    if abs(value) >= MAX_AMOUNT:
        raise ValueError("amount is too large")
    return value
