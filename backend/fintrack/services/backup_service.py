"""Backup service — export a user's records to a JSON document and import it back.

Two document shapes are accepted on import:

- versioned: ``{version, categories, monthlyData: {"YYYY-MM": {incomes,
  expenses, installments}}}``
- legacy flat: ``{incomes, expenses, categories, installments}``, migrated
  by filing each record under the month of its date (or start date).
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog
from pydantic import ValidationError

from fintrack.config import settings
from fintrack.core.exceptions import InvalidArgumentError
from fintrack.core.months import current_month_key, month_key, month_key_of
from fintrack.schemas.backup import (
    BackupCategory,
    BackupExpense,
    BackupIncome,
    BackupInstallment,
    BackupMonth,
    FinanceData,
    ImportSummary,
)
from fintrack.schemas.category import CategoryCreate
from fintrack.schemas.expense import ExpenseCreate
from fintrack.schemas.income import IncomeCreate
from fintrack.schemas.installment import InstallmentCreate
from fintrack.services.gateway import FinanceGateway
from fintrack.services.installment_engine import monthly_amount, round2
from fintrack.services.monthly_aggregation import FinanceState

logger = structlog.get_logger()

DEFAULT_CATEGORIES = [
    BackupCategory(id="1", name="Groceries", color="#10B981", icon="🛒"),
    BackupCategory(id="2", name="Food delivery", color="#EF4444", icon="🍔"),
    BackupCategory(id="3", name="Transport", color="#3B82F6", icon="🚗"),
    BackupCategory(id="4", name="Health", color="#EC4899", icon="💊"),
    BackupCategory(id="5", name="Education", color="#8B5CF6", icon="📚"),
]


def merge_categories(saved: list[BackupCategory] | None) -> list[BackupCategory]:
    """Saved categories followed by the defaults whose name is not taken."""
    if not saved:
        return list(DEFAULT_CATEGORIES)

    existing_names = {c.name for c in saved}
    return saved + [c for c in DEFAULT_CATEGORIES if c.name not in existing_names]


def export_data(state: FinanceState, today: date) -> FinanceData:
    monthly_data: dict[str, BackupMonth] = {}

    def bucket(month: str) -> BackupMonth:
        return monthly_data.setdefault(month, BackupMonth())

    for income in state.incomes:
        bucket(month_key(income.date)).incomes.append(
            BackupIncome.model_validate(income.model_dump())
        )
    for expense in state.expenses:
        bucket(month_key(expense.date)).expenses.append(
            BackupExpense.model_validate(expense.model_dump())
        )
    for installment in state.installments:
        bucket(month_key(installment.start_date)).installments.append(
            BackupInstallment.model_validate(installment.model_dump())
        )

    if not monthly_data:
        monthly_data[current_month_key(today)] = BackupMonth()

    return FinanceData(
        version=settings.export_version,
        categories=[BackupCategory.model_validate(c.model_dump()) for c in state.categories],
        monthly_data=dict(sorted(monthly_data.items())),
    )


def _list_field(container: dict, key: str) -> list:
    value = container.get(key)
    return value if isinstance(value, list) else []


def _is_versioned(raw: dict) -> bool:
    version = raw.get("version")
    return (
        isinstance(version, int)
        and not isinstance(version, bool)
        and isinstance(raw.get("monthlyData"), dict)
    )


def _migrate_legacy(raw: dict, today: date) -> dict[str, BackupMonth]:
    monthly_data: dict[str, BackupMonth] = {}

    def bucket(record: dict, *date_fields: str) -> BackupMonth:
        value = next((record.get(f) for f in date_fields if record.get(f)), None)
        return monthly_data.setdefault(month_key_of(value, today), BackupMonth())

    for record in _list_field(raw, "incomes"):
        bucket(record, "date").incomes.append(BackupIncome.model_validate(record))
    for record in _list_field(raw, "expenses"):
        bucket(record, "date").expenses.append(BackupExpense.model_validate(record))
    for record in _list_field(raw, "installments"):
        bucket(record, "startDate", "start_date", "date").installments.append(
            BackupInstallment.model_validate(record)
        )
    return monthly_data


def normalize_finance_data(raw: Any, today: date) -> FinanceData:
    """Turn any accepted backup document into the current versioned shape."""
    if not isinstance(raw, dict):
        return FinanceData(
            version=settings.export_version,
            categories=list(DEFAULT_CATEGORIES),
            monthly_data={current_month_key(today): BackupMonth()},
        )

    try:
        if _is_versioned(raw):
            monthly_data = {}
            for key, snapshot in raw["monthlyData"].items():
                snapshot = snapshot if isinstance(snapshot, dict) else {}
                monthly_data[month_key_of(key, today)] = BackupMonth(
                    incomes=[BackupIncome.model_validate(r) for r in _list_field(snapshot, "incomes")],
                    expenses=[BackupExpense.model_validate(r) for r in _list_field(snapshot, "expenses")],
                    installments=[
                        BackupInstallment.model_validate(r)
                        for r in _list_field(snapshot, "installments")
                    ],
                )
        else:
            monthly_data = _migrate_legacy(raw, today)
        categories = [BackupCategory.model_validate(c) for c in _list_field(raw, "categories")]
    except (ValidationError, AttributeError) as e:
        raise InvalidArgumentError(f"Invalid backup document: {e}") from e

    if not monthly_data:
        monthly_data[current_month_key(today)] = BackupMonth()

    return FinanceData(
        version=settings.export_version,
        categories=merge_categories(categories),
        monthly_data=dict(sorted(monthly_data.items())),
    )


@dataclass
class _ImportPlan:
    """Every record of a backup document, validated and ready to write."""

    categories: list[CategoryCreate] = field(default_factory=list)
    incomes: list[IncomeCreate] = field(default_factory=list)
    # (id in the document, definition, monthly amount)
    installments: list[tuple[str | None, InstallmentCreate, Decimal]] = field(default_factory=list)
    # (installment id in the document, expense without its installment link)
    expenses: list[tuple[str | None, ExpenseCreate]] = field(default_factory=list)


def _plan_import(data: FinanceData) -> _ImportPlan:
    plan = _ImportPlan()
    months = list(data.monthly_data.values())
    try:
        for category in data.categories:
            plan.categories.append(
                CategoryCreate(name=category.name, color=category.color, icon=category.icon)
            )
        for month in months:
            for income in month.incomes:
                plan.incomes.append(
                    IncomeCreate(date=income.date, amount=round2(income.amount), description=income.description)
                )
            for record in month.installments:
                definition = InstallmentCreate(
                    name=record.name,
                    total_amount=round2(record.total_amount),
                    installments=record.installments,
                    start_date=record.start_date,
                    category=record.category or settings.uncategorized_label,
                )
                amount = record.monthly_amount
                if amount is None:
                    amount = monthly_amount(definition.total_amount, definition.installments)
                record_id = str(record.id) if record.id is not None else None
                plan.installments.append((record_id, definition, round2(amount)))
            for record in month.expenses:
                expense = ExpenseCreate(
                    date=record.date,
                    amount=round2(record.amount),
                    category=record.category or settings.uncategorized_label,
                    description=record.description,
                    is_installment=record.is_installment,
                )
                link = str(record.installment_id) if record.installment_id is not None else None
                plan.expenses.append((link, expense))
    except (ValidationError, InvalidOperation) as e:
        raise InvalidArgumentError(f"Invalid backup document: {e}") from e
    return plan


async def import_data(gateway: FinanceGateway, data: FinanceData) -> ImportSummary:
    """Persist a normalized backup document for the gateway's user.

    The whole document is validated before the first write. Categories
    whose name already exists are skipped. Installment expenses are
    re-linked to the newly created installments; an expense whose
    installment is not in the document is imported as a plain expense.
    """
    plan = _plan_import(data)

    existing_names = {c.name for c in await gateway.load_categories()}
    categories = 0
    for category in plan.categories:
        if category.name in existing_names:
            continue
        await gateway.insert_category(category)
        existing_names.add(category.name)
        categories += 1

    for income in plan.incomes:
        await gateway.insert_income(income)

    installment_ids: dict[str, int] = {}
    for record_id, definition, amount in plan.installments:
        created = await gateway.insert_installment(definition, amount)
        if record_id is not None:
            installment_ids[record_id] = created.id

    for link, expense in plan.expenses:
        installment_id = installment_ids.get(link) if link is not None else None
        if installment_id is None:
            expense = expense.model_copy(update={"is_installment": False})
        else:
            expense = expense.model_copy(update={"installment_id": installment_id, "is_installment": True})
        await gateway.insert_expense(expense)

    summary = ImportSummary(
        categories=categories,
        incomes=len(plan.incomes),
        expenses=len(plan.expenses),
        installments=len(plan.installments),
    )
    logger.info("Backup imported", **summary.model_dump())
    return summary
