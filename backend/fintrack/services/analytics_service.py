"""Analytics service — category breakdown and monthly trend."""

from datetime import date
from decimal import Decimal

from fintrack.core.months import parse_month_key
from fintrack.schemas.analytics import CategoryTotal, TrendPoint
from fintrack.schemas.category import Category
from fintrack.schemas.expense import Expense
from fintrack.services.monthly_aggregation import (
    FinanceState,
    available_months,
    expenses_in_month,
    totals_for_month,
)


def category_totals(
    expenses: list[Expense], categories: list[Category], month: str
) -> list[CategoryTotal]:
    """Expense totals per category for one month.

    Expenses match a category by exact (case-sensitive) name. Categories
    with nothing spent are dropped; the rest keep the order of
    ``categories``. Expenses whose category no longer exists are not shown.
    """
    parse_month_key(month)
    month_expenses = expenses_in_month(expenses, month)

    entries = []
    for category in categories:
        total = sum(
            (e.amount for e in month_expenses if e.category == category.name),
            Decimal("0"),
        )
        if total == 0:
            continue
        entries.append(CategoryTotal(name=category.name, value=total, color=category.color))
    return entries


def trend_months(state: FinanceState, selected_month: str, today: date, window: int = 6) -> list[str]:
    """The ``window`` known months ending at ``selected_month``."""
    parse_month_key(selected_month)
    months = sorted(set(available_months(state, today)) | {selected_month})
    if len(months) <= window:
        return months

    end = months.index(selected_month) + 1
    return months[max(0, end - window):end]


def monthly_trend(
    state: FinanceState, selected_month: str, today: date, window: int = 6
) -> list[TrendPoint]:
    """Income and expense totals for the months leading up to ``selected_month``."""
    points = []
    for month in trend_months(state, selected_month, today, window):
        totals = totals_for_month(state, month)
        points.append(TrendPoint(month=month, income=totals.income, expense=totals.expense))
    return points
