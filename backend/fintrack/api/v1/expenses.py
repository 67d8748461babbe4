"""Expense API routes."""

from fastapi import APIRouter, Depends

from fintrack.api.deps import get_finance_service
from fintrack.core.months import parse_month_key
from fintrack.schemas.expense import Expense, ExpenseCreate
from fintrack.services.finance_service import FinanceService
from fintrack.services.monthly_aggregation import expenses_in_month

router = APIRouter()


@router.get("", response_model=list[Expense])
async def list_expenses(
    month: str | None = None,
    service: FinanceService = Depends(get_finance_service),
):
    """List expenses, newest first, optionally restricted to one month (YYYY-MM)."""
    expenses = await service.list_expenses()
    if month:
        parse_month_key(month)
        return expenses_in_month(expenses, month)
    return expenses


@router.post("", response_model=Expense, status_code=201)
async def create_expense(
    data: ExpenseCreate,
    service: FinanceService = Depends(get_finance_service),
):
    """Record an expense.

    The category is referenced by name; an unknown name is stored as
    uncategorized.
    """
    return await service.add_expense(data)


@router.delete("/{expense_id}", status_code=204)
async def delete_expense(
    expense_id: int,
    service: FinanceService = Depends(get_finance_service),
):
    """Delete an expense (generated installment payments included)."""
    await service.delete_expense(expense_id)
