"""Expense schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ExpenseCreate(BaseModel):
    date: date
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    category: str  # category name, not id
    description: str = ""
    is_installment: bool = False
    installment_id: int | None = None


class Expense(ExpenseCreate):
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}
