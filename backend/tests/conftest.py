"""Shared test fixtures."""

from decimal import Decimal

import pytest
from factories import CREATED_AT
from httpx import ASGITransport, AsyncClient

from fintrack.api.deps import get_current_user_id, get_gateway
from fintrack.core.exceptions import NotFoundError, TransportFailureError
from fintrack.main import app
from fintrack.schemas.category import Category, CategoryCreate
from fintrack.schemas.expense import Expense, ExpenseCreate
from fintrack.schemas.income import Income, IncomeCreate
from fintrack.schemas.installment import Installment, InstallmentCreate
from fintrack.services.gateway import FinanceGateway


class InMemoryGateway(FinanceGateway):
    """Gateway over plain lists, with switches to simulate store failures."""

    def __init__(self):
        self.categories: list[Category] = []
        self.incomes: list[Income] = []
        self.expenses: list[Expense] = []
        self.installments: list[Installment] = []
        self.failing_reads: set[str] = set()
        self.fail_installment_insert = False
        # 1-based positions of insert_expense calls that should fail
        self.failing_expense_inserts: set[int] = set()
        self.expense_insert_calls = 0
        self._next_id = 1

    def _id(self) -> int:
        next_id = self._next_id
        self._next_id += 1
        return next_id

    def _read(self, collection: str) -> list:
        if collection in self.failing_reads:
            raise TransportFailureError(f"Load {collection}")
        return list(getattr(self, collection))

    async def load_categories(self) -> list[Category]:
        return self._read("categories")

    async def load_incomes(self) -> list[Income]:
        return self._read("incomes")

    async def load_expenses(self) -> list[Expense]:
        return self._read("expenses")

    async def load_installments(self) -> list[Installment]:
        return self._read("installments")

    async def insert_income(self, data: IncomeCreate) -> Income:
        income = Income(id=self._id(), created_at=CREATED_AT, **data.model_dump())
        self.incomes.append(income)
        return income

    async def insert_expense(self, data: ExpenseCreate) -> Expense:
        self.expense_insert_calls += 1
        if self.expense_insert_calls in self.failing_expense_inserts:
            raise TransportFailureError("Insert expense")
        values = data.model_dump()
        if not any(c.name == data.category for c in self.categories):
            values["category"] = "Uncategorized"
        expense = Expense(id=self._id(), created_at=CREATED_AT, **values)
        self.expenses.append(expense)
        return expense

    async def insert_category(self, data: CategoryCreate) -> Category:
        category = Category(id=self._id(), **data.model_dump())
        self.categories.append(category)
        return category

    async def insert_installment(self, data: InstallmentCreate, monthly_amount: Decimal) -> Installment:
        if self.fail_installment_insert:
            raise TransportFailureError("Insert installment")
        installment = Installment(
            id=self._id(),
            monthly_amount=monthly_amount,
            paid_installments=0,
            created_at=CREATED_AT,
            **data.model_dump(),
        )
        self.installments.append(installment)
        return installment

    def _remove(self, collection: str, record_id: int, resource: str) -> None:
        records = getattr(self, collection)
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            raise NotFoundError(resource)
        setattr(self, collection, remaining)

    async def delete_income(self, income_id: int) -> None:
        self._remove("incomes", income_id, "Income")

    async def delete_expense(self, expense_id: int) -> None:
        self._remove("expenses", expense_id, "Expense")

    async def delete_category(self, category_id: int) -> None:
        category = next((c for c in self.categories if c.id == category_id), None)
        self._remove("categories", category_id, "Category")
        self.expenses = [
            e.model_copy(update={"category": "Uncategorized"}) if e.category == category.name else e
            for e in self.expenses
        ]

    async def delete_installment(self, installment_id: int) -> None:
        self._remove("installments", installment_id, "Installment")

    async def delete_all(self) -> None:
        self.categories, self.incomes, self.expenses, self.installments = [], [], [], []


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
async def client(gateway):
    """Async test client for the FastAPI app, backed by the in-memory gateway."""
    app.dependency_overrides[get_current_user_id] = lambda: "user-1"
    app.dependency_overrides[get_gateway] = lambda: gateway
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()

