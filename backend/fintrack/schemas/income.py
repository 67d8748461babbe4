"""Income schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class IncomeCreate(BaseModel):
    date: date
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    description: str = ""


class Income(IncomeCreate):
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}
