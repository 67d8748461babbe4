"""Installment schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from fintrack.schemas.expense import Expense

StatusLabel = Literal["Completed", "Overdue", "InProgress"]


class InstallmentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    total_amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    installments: int = Field(gt=0)
    start_date: date
    category: str = Field(min_length=1)


class Installment(InstallmentCreate):
    id: int
    monthly_amount: Decimal
    paid_installments: int = 0
    created_at: datetime

    model_config = {"from_attributes": True}


class InstallmentCreated(BaseModel):
    installment: Installment
    expenses: list[Expense]


class InstallmentStatus(Installment):
    """An installment plus its payment progress as of a reference day."""

    paid_count: int
    remaining: int
    remaining_amount: Decimal
    total_paid: Decimal
    next_payment_date: date | None = None
    status_label: StatusLabel
