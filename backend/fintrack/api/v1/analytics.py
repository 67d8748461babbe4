"""Analytics API routes — monthly totals, snapshots, category breakdown, trend."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from fintrack.api.deps import get_finance_service, get_today
from fintrack.config import settings
from fintrack.core.months import current_month_key
from fintrack.schemas.analytics import (
    CategoryTotal,
    MonthlyTotals,
    MonthSnapshot,
    MonthsResponse,
    TrendPoint,
)
from fintrack.services.analytics_service import category_totals, monthly_trend
from fintrack.services.finance_service import FinanceService
from fintrack.services.monthly_aggregation import (
    available_months,
    snapshot_for_month,
    totals_for_month,
)

router = APIRouter()


@router.get("/months", response_model=MonthsResponse)
async def months(
    today: date = Depends(get_today),
    service: FinanceService = Depends(get_finance_service),
):
    """Months holding any record, plus the current month."""
    state = await service.load_state()
    return MonthsResponse(data=available_months(state, today), current=current_month_key(today))


@router.get("/totals", response_model=MonthlyTotals)
async def totals(
    month: str | None = None,
    today: date = Depends(get_today),
    service: FinanceService = Depends(get_finance_service),
):
    """Income, expense and balance of a month (defaults to the current month)."""
    state = await service.load_state()
    return totals_for_month(state, month or current_month_key(today))


@router.get("/snapshot", response_model=MonthSnapshot)
async def snapshot(
    month: str | None = None,
    today: date = Depends(get_today),
    service: FinanceService = Depends(get_finance_service),
):
    """Incomes, expenses and installments (by start month) of a month."""
    state = await service.load_state()
    return snapshot_for_month(state, month or current_month_key(today))


@router.get("/by-category", response_model=list[CategoryTotal])
async def by_category(
    month: str | None = None,
    today: date = Depends(get_today),
    service: FinanceService = Depends(get_finance_service),
):
    """Expense totals per category for a month, in category order."""
    state = await service.load_state()
    return category_totals(state.expenses, state.categories, month or current_month_key(today))


@router.get("/trend", response_model=list[TrendPoint])
async def trend(
    month: str | None = None,
    window: int = Query(settings.trend_window, ge=1, le=36),
    today: date = Depends(get_today),
    service: FinanceService = Depends(get_finance_service),
):
    """Monthly income/expense totals for the months up to ``month``."""
    state = await service.load_state()
    return monthly_trend(state, month or current_month_key(today), today, window=window)
