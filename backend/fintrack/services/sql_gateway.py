"""SQLAlchemy implementation of the persistence gateway."""

from contextlib import asynccontextmanager
from decimal import Decimal

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from fintrack import models
from fintrack.config import settings
from fintrack.core.exceptions import AlreadyExistsError, NotFoundError, TransportFailureError
from fintrack.schemas.category import Category, CategoryCreate
from fintrack.schemas.expense import Expense, ExpenseCreate
from fintrack.schemas.income import Income, IncomeCreate
from fintrack.schemas.installment import Installment, InstallmentCreate
from fintrack.services.gateway import FinanceGateway

logger = structlog.get_logger()


class SqlFinanceGateway(FinanceGateway):
    """One short transaction per operation, so operations may run concurrently."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], user_id: str):
        self.session_factory = session_factory
        self.user_id = user_id

    @asynccontextmanager
    async def _transaction(self, operation: str):
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield session
        except (SQLAlchemyError, OSError) as e:
            logger.error("Store operation failed", operation=operation, user_id=self.user_id, error=str(e))
            raise TransportFailureError(operation) from e

    # ── Reads ─────────────────────────────────────────
    async def load_categories(self) -> list[Category]:
        async with self._transaction("Load categories") as session:
            result = await session.execute(
                select(models.Category)
                .where(models.Category.user_id == self.user_id)
                .order_by(models.Category.name)
            )
            return [Category.model_validate(c) for c in result.scalars().all()]

    async def load_incomes(self) -> list[Income]:
        async with self._transaction("Load incomes") as session:
            result = await session.execute(
                select(models.Income)
                .where(models.Income.user_id == self.user_id)
                .order_by(models.Income.date.desc(), models.Income.id.desc())
            )
            return [Income.model_validate(i) for i in result.scalars().all()]

    async def load_expenses(self) -> list[Expense]:
        async with self._transaction("Load expenses") as session:
            result = await session.execute(
                select(models.Expense)
                .options(selectinload(models.Expense.category))
                .where(models.Expense.user_id == self.user_id)
                .order_by(models.Expense.date.desc(), models.Expense.id.desc())
            )
            return [
                _expense_schema(e, e.category.name if e.category else None)
                for e in result.scalars().all()
            ]

    async def load_installments(self) -> list[Installment]:
        async with self._transaction("Load installments") as session:
            result = await session.execute(
                select(models.Installment)
                .options(selectinload(models.Installment.category))
                .where(models.Installment.user_id == self.user_id)
                .order_by(models.Installment.start_date.desc(), models.Installment.id.desc())
            )
            return [
                _installment_schema(i, i.category.name if i.category else None)
                for i in result.scalars().all()
            ]

    # ── Writes ────────────────────────────────────────
    async def insert_income(self, data: IncomeCreate) -> Income:
        async with self._transaction("Insert income") as session:
            income = models.Income(user_id=self.user_id, **data.model_dump())
            session.add(income)
            await session.flush()
            await session.refresh(income)
            return Income.model_validate(income)

    async def insert_expense(self, data: ExpenseCreate) -> Expense:
        async with self._transaction("Insert expense") as session:
            category_id = await self._category_id(session, data.category)
            expense = models.Expense(
                user_id=self.user_id,
                date=data.date,
                amount=data.amount,
                description=data.description,
                category_id=category_id,
                is_installment=data.is_installment,
                installment_id=data.installment_id,
            )
            session.add(expense)
            await session.flush()
            await session.refresh(expense)
            return _expense_schema(expense, data.category if category_id else None)

    async def insert_category(self, data: CategoryCreate) -> Category:
        async with self._transaction("Insert category") as session:
            category = models.Category(
                user_id=self.user_id,
                name=data.name,
                color=data.color,
                icon=data.icon or settings.default_category_icon,
            )
            session.add(category)
            try:
                await session.flush()
            except IntegrityError as e:
                raise AlreadyExistsError(f"Category '{data.name}'") from e
            await session.refresh(category)
            return Category.model_validate(category)

    async def insert_installment(
        self, data: InstallmentCreate, monthly_amount: Decimal
    ) -> Installment:
        async with self._transaction("Insert installment") as session:
            category_id = await self._category_id(session, data.category)
            installment = models.Installment(
                user_id=self.user_id,
                name=data.name,
                total_amount=data.total_amount,
                installments=data.installments,
                monthly_amount=monthly_amount,
                paid_installments=0,
                start_date=data.start_date,
                category_id=category_id,
            )
            session.add(installment)
            await session.flush()
            await session.refresh(installment)
            return _installment_schema(installment, data.category if category_id else None)

    async def delete_income(self, income_id: int) -> None:
        await self._delete(models.Income, income_id, "Income")

    async def delete_expense(self, expense_id: int) -> None:
        await self._delete(models.Expense, expense_id, "Expense")

    async def delete_category(self, category_id: int) -> None:
        async with self._transaction("Delete category") as session:
            # Detach references explicitly; not every backend enforces ON DELETE SET NULL
            for model in (models.Expense, models.Installment):
                await session.execute(
                    update(model)
                    .where(model.user_id == self.user_id, model.category_id == category_id)
                    .values(category_id=None)
                )
            result = await session.execute(
                delete(models.Category).where(
                    models.Category.id == category_id,
                    models.Category.user_id == self.user_id,
                )
            )
            if result.rowcount == 0:
                raise NotFoundError("Category")

    async def delete_installment(self, installment_id: int) -> None:
        async with self._transaction("Delete installment") as session:
            await session.execute(
                update(models.Expense)
                .where(
                    models.Expense.user_id == self.user_id,
                    models.Expense.installment_id == installment_id,
                )
                .values(installment_id=None)
            )
            result = await session.execute(
                delete(models.Installment).where(
                    models.Installment.id == installment_id,
                    models.Installment.user_id == self.user_id,
                )
            )
            if result.rowcount == 0:
                raise NotFoundError("Installment")

    async def delete_all(self) -> None:
        async with self._transaction("Reset data") as session:
            for model in (models.Expense, models.Installment, models.Income, models.Category):
                await session.execute(delete(model).where(model.user_id == self.user_id))

    async def _delete(self, model, record_id: int, resource: str) -> None:
        async with self._transaction(f"Delete {resource.lower()}") as session:
            result = await session.execute(
                delete(model).where(model.id == record_id, model.user_id == self.user_id)
            )
            if result.rowcount == 0:
                raise NotFoundError(resource)

    async def _category_id(self, session: AsyncSession, name: str) -> int | None:
        """Resolve a category name to its id (None when no such category)."""
        result = await session.execute(
            select(models.Category.id)
            .where(models.Category.user_id == self.user_id, models.Category.name == name)
            .order_by(models.Category.id)
            .limit(1)
        )
        return result.scalar_one_or_none()


def _expense_schema(expense: models.Expense, category_name: str | None) -> Expense:
    return Expense(
        id=expense.id,
        date=expense.date,
        amount=expense.amount,
        category=category_name or settings.uncategorized_label,
        description=expense.description,
        is_installment=expense.is_installment,
        installment_id=expense.installment_id,
        created_at=expense.created_at,
    )


def _installment_schema(installment: models.Installment, category_name: str | None) -> Installment:
    return Installment(
        id=installment.id,
        name=installment.name,
        total_amount=installment.total_amount,
        installments=installment.installments,
        monthly_amount=installment.monthly_amount,
        paid_installments=installment.paid_installments,
        start_date=installment.start_date,
        category=category_name or settings.uncategorized_label,
        created_at=installment.created_at,
    )
