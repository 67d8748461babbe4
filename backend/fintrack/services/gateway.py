"""Persistence gateway contract.

The finance core reads and writes through this interface only. Every
gateway instance is bound to one user; implementations assign ids and
creation timestamps, resolve category names, and wrap store errors into
``TransportFailureError``. Deletes of unknown ids raise ``NotFoundError``.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from fintrack.schemas.category import Category, CategoryCreate
from fintrack.schemas.expense import Expense, ExpenseCreate
from fintrack.schemas.income import Income, IncomeCreate
from fintrack.schemas.installment import Installment, InstallmentCreate


class FinanceGateway(ABC):
    # ── Reads ─────────────────────────────────────────
    @abstractmethod
    async def load_categories(self) -> list[Category]: ...

    @abstractmethod
    async def load_incomes(self) -> list[Income]: ...

    @abstractmethod
    async def load_expenses(self) -> list[Expense]:
        """Expenses with their category resolved to a name."""

    @abstractmethod
    async def load_installments(self) -> list[Installment]: ...

    # ── Writes ────────────────────────────────────────
    @abstractmethod
    async def insert_income(self, data: IncomeCreate) -> Income: ...

    @abstractmethod
    async def insert_expense(self, data: ExpenseCreate) -> Expense: ...

    @abstractmethod
    async def insert_category(self, data: CategoryCreate) -> Category: ...

    @abstractmethod
    async def insert_installment(
        self, data: InstallmentCreate, monthly_amount: Decimal
    ) -> Installment: ...

    @abstractmethod
    async def delete_income(self, income_id: int) -> None: ...

    @abstractmethod
    async def delete_expense(self, expense_id: int) -> None: ...

    @abstractmethod
    async def delete_category(self, category_id: int) -> None:
        """Delete a category; expenses referencing it become uncategorized."""

    @abstractmethod
    async def delete_installment(self, installment_id: int) -> None:
        """Delete an installment row only; its generated expenses are kept."""

    @abstractmethod
    async def delete_all(self) -> None:
        """Remove every record owned by the user."""
