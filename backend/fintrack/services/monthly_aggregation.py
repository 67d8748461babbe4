"""Monthly aggregation over an in-memory snapshot of a user's records.

All functions here are pure and synchronous; loading the records is the
finance service's job.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from fintrack.core.months import current_month_key, month_key, parse_month_key
from fintrack.schemas.analytics import MonthlyTotals, MonthSnapshot
from fintrack.schemas.category import Category
from fintrack.schemas.expense import Expense
from fintrack.schemas.income import Income
from fintrack.schemas.installment import Installment


@dataclass(frozen=True)
class FinanceState:
    """Every record of one user, as fetched from the gateway."""

    categories: list[Category] = field(default_factory=list)
    incomes: list[Income] = field(default_factory=list)
    expenses: list[Expense] = field(default_factory=list)
    installments: list[Installment] = field(default_factory=list)


def incomes_in_month(incomes: list[Income], month: str) -> list[Income]:
    return [i for i in incomes if month_key(i.date) == month]


def expenses_in_month(expenses: list[Expense], month: str) -> list[Expense]:
    return [e for e in expenses if month_key(e.date) == month]


def installments_in_month(installments: list[Installment], month: str) -> list[Installment]:
    """Installments that *start* in ``month``."""
    return [i for i in installments if month_key(i.start_date) == month]


def totals_for_month(state: FinanceState, month: str) -> MonthlyTotals:
    parse_month_key(month)
    income = sum((i.amount for i in incomes_in_month(state.incomes, month)), Decimal("0"))
    expense = sum((e.amount for e in expenses_in_month(state.expenses, month)), Decimal("0"))
    return MonthlyTotals(month=month, income=income, expense=expense, balance=income - expense)


def balance_for_month(state: FinanceState, month: str) -> Decimal:
    return totals_for_month(state, month).balance


def available_months(state: FinanceState, today: date) -> list[str]:
    """Sorted month keys holding any record, always including the current month."""
    months = {current_month_key(today)}
    months.update(month_key(i.date) for i in state.incomes)
    months.update(month_key(e.date) for e in state.expenses)
    months.update(month_key(i.start_date) for i in state.installments)
    return sorted(months)


def snapshot_for_month(state: FinanceState, month: str) -> MonthSnapshot:
    parse_month_key(month)
    return MonthSnapshot(
        month=month,
        incomes=incomes_in_month(state.incomes, month),
        expenses=expenses_in_month(state.expenses, month),
        installments=installments_in_month(state.installments, month),
    )
