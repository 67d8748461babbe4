"""SQLAlchemy models."""

from fintrack.models.base import Base
from fintrack.models.category import Category
from fintrack.models.expense import Expense
from fintrack.models.income import Income
from fintrack.models.installment import Installment

__all__ = [
    "Base",
    "Category",
    "Income",
    "Expense",
    "Installment",
]
