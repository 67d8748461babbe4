"""Finance service — reads and writes a user's records through the gateway.

Reads fail soft: a collection that cannot be loaded is logged and replaced
by an empty list. Writes fail loud: every gateway error reaches the caller.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from fintrack.core.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    PartialBatchFailureError,
)
from fintrack.schemas.category import Category, CategoryCreate
from fintrack.schemas.expense import Expense, ExpenseCreate
from fintrack.schemas.income import Income, IncomeCreate
from fintrack.schemas.installment import Installment, InstallmentCreate, InstallmentCreated
from fintrack.services.gateway import FinanceGateway
from fintrack.services.installment_engine import (
    expand_installment,
    monthly_amount,
    validate_definition,
)
from fintrack.services.monthly_aggregation import FinanceState

logger = structlog.get_logger()

T = TypeVar("T")


class FinanceService:
    def __init__(self, gateway: FinanceGateway):
        self.gateway = gateway

    # ── Reads ─────────────────────────────────────────
    async def load_state(self) -> FinanceState:
        """Fetch every collection concurrently."""
        categories, incomes, expenses, installments = await asyncio.gather(
            self._load_soft("categories", self.gateway.load_categories),
            self._load_soft("incomes", self.gateway.load_incomes),
            self._load_soft("expenses", self.gateway.load_expenses),
            self._load_soft("installments", self.gateway.load_installments),
        )
        return FinanceState(
            categories=categories,
            incomes=incomes,
            expenses=expenses,
            installments=installments,
        )

    async def list_categories(self) -> list[Category]:
        return await self._load_soft("categories", self.gateway.load_categories)

    async def list_incomes(self) -> list[Income]:
        return await self._load_soft("incomes", self.gateway.load_incomes)

    async def list_expenses(self) -> list[Expense]:
        return await self._load_soft("expenses", self.gateway.load_expenses)

    async def list_installments(self) -> list[Installment]:
        return await self._load_soft("installments", self.gateway.load_installments)

    async def _load_soft(self, collection: str, loader: Callable[[], Awaitable[list[T]]]) -> list[T]:
        try:
            return await loader()
        except Exception as e:
            logger.warning("Failed to load collection, using empty list", collection=collection, error=str(e))
            return []

    # ── Writes ────────────────────────────────────────
    async def add_income(self, data: IncomeCreate) -> Income:
        return await self.gateway.insert_income(data)

    async def add_expense(self, data: ExpenseCreate) -> Expense:
        return await self.gateway.insert_expense(data)

    async def add_category(self, data: CategoryCreate) -> Category:
        """Create a category; names are unique per user."""
        existing = await self.gateway.load_categories()
        if any(c.name == data.name for c in existing):
            raise AlreadyExistsError(f"Category '{data.name}'")
        return await self.gateway.insert_category(data)

    async def delete_income(self, income_id: int) -> None:
        await self.gateway.delete_income(income_id)

    async def delete_expense(self, expense_id: int) -> None:
        await self.gateway.delete_expense(expense_id)

    async def delete_category(self, category_id: int) -> None:
        await self.gateway.delete_category(category_id)

    async def reset_data(self) -> None:
        await self.gateway.delete_all()
        logger.info("User data reset")

    # ── Installments ──────────────────────────────────
    async def create_installment(self, data: InstallmentCreate) -> InstallmentCreated:
        """Create an installment and its monthly expenses.

        The parent is written first; the children are then written
        concurrently. If any child fails, PartialBatchFailureError names the
        parent so the caller can discard or complete it.
        """
        validate_definition(data)
        installment = await self.gateway.insert_installment(
            data, monthly_amount(data.total_amount, data.installments)
        )
        drafts = expand_installment(data, installment.id)
        expenses = await self._insert_children(installment, drafts)

        logger.info(
            "Installment created",
            installment_id=installment.id,
            installments=installment.installments,
            monthly_amount=str(installment.monthly_amount),
        )
        return InstallmentCreated(installment=installment, expenses=expenses)

    async def complete_installment(self, installment_id: int) -> InstallmentCreated:
        """Write the generated expenses an earlier partial batch left out.

        Existing children are matched on their "(k/N)" description, so
        retrying never duplicates a written payment.
        """
        installment = await self._get_installment(installment_id)
        expenses = await self.gateway.load_expenses()
        written = {e.description for e in expenses if e.installment_id == installment_id}

        definition = InstallmentCreate(
            name=installment.name,
            total_amount=installment.total_amount,
            installments=installment.installments,
            start_date=installment.start_date,
            category=installment.category,
        )
        missing = [
            draft for draft in expand_installment(definition, installment_id)
            if draft.description not in written
        ]
        created = await self._insert_children(installment, missing)
        logger.info("Installment completed", installment_id=installment_id, created=len(created))

        children = [e for e in expenses if e.installment_id == installment_id] + created
        return InstallmentCreated(
            installment=installment,
            expenses=sorted(children, key=lambda e: e.date),
        )

    async def discard_installment(self, installment_id: int) -> None:
        """Delete an installment together with the expenses it generated."""
        installment = await self._get_installment(installment_id)
        expenses = await self.gateway.load_expenses()
        children = [e for e in expenses if e.installment_id == installment.id]

        for expense in children:
            await self.gateway.delete_expense(expense.id)
        await self.gateway.delete_installment(installment.id)
        logger.info("Installment discarded", installment_id=installment_id, expenses=len(children))

    async def _insert_children(
        self, installment: Installment, drafts: list[ExpenseCreate]
    ) -> list[Expense]:
        results = await asyncio.gather(
            *(self.gateway.insert_expense(draft) for draft in drafts),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(
                "Installment partially created",
                installment_id=installment.id,
                created=len(results) - len(failures),
                failed=len(failures),
                error=str(failures[0]),
            )
            raise PartialBatchFailureError(
                installment_id=installment.id,
                created=len(results) - len(failures),
                failed=len(failures),
            ) from failures[0]
        return list(results)

    async def _get_installment(self, installment_id: int) -> Installment:
        installments = await self.gateway.load_installments()
        for installment in installments:
            if installment.id == installment_id:
                return installment
        raise NotFoundError("Installment")

