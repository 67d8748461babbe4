"""Analytics schemas."""

from decimal import Decimal

from pydantic import BaseModel

from fintrack.schemas.expense import Expense
from fintrack.schemas.income import Income
from fintrack.schemas.installment import Installment


class MonthlyTotals(BaseModel):
    month: str  # "2026-01", "2026-02", etc.
    income: Decimal
    expense: Decimal
    balance: Decimal


class MonthSnapshot(BaseModel):
    month: str
    incomes: list[Income]
    expenses: list[Expense]
    installments: list[Installment]


class CategoryTotal(BaseModel):
    name: str
    value: Decimal
    color: str


class TrendPoint(BaseModel):
    month: str
    income: Decimal
    expense: Decimal


class MonthsResponse(BaseModel):
    data: list[str]
    current: str
