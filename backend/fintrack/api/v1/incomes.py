"""Income API routes."""

from fastapi import APIRouter, Depends

from fintrack.api.deps import get_finance_service
from fintrack.core.months import parse_month_key
from fintrack.schemas.income import Income, IncomeCreate
from fintrack.services.finance_service import FinanceService
from fintrack.services.monthly_aggregation import incomes_in_month

router = APIRouter()


@router.get("", response_model=list[Income])
async def list_incomes(
    month: str | None = None,
    service: FinanceService = Depends(get_finance_service),
):
    """List incomes, newest first, optionally restricted to one month (YYYY-MM)."""
    incomes = await service.list_incomes()
    if month:
        parse_month_key(month)
        return incomes_in_month(incomes, month)
    return incomes


@router.post("", response_model=Income, status_code=201)
async def create_income(
    data: IncomeCreate,
    service: FinanceService = Depends(get_finance_service),
):
    return await service.add_income(data)


@router.delete("/{income_id}", status_code=204)
async def delete_income(
    income_id: int,
    service: FinanceService = Depends(get_finance_service),
):
    await service.delete_income(income_id)
