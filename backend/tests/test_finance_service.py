"""Finance service tests: fail-soft reads and the installment saga."""

from datetime import date
from decimal import Decimal

import pytest

from fintrack.core.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    PartialBatchFailureError,
    TransportFailureError,
)
from fintrack.schemas.category import CategoryCreate
from fintrack.schemas.expense import ExpenseCreate
from fintrack.schemas.installment import InstallmentCreate
from fintrack.services.finance_service import FinanceService


@pytest.fixture
def service(gateway):
    return FinanceService(gateway)


def laptop(count: int = 12) -> InstallmentCreate:
    return InstallmentCreate(
        name="Laptop",
        total_amount=Decimal("1200"),
        installments=count,
        start_date=date(2024, 1, 15),
        category="Electronics",
    )


@pytest.mark.asyncio
async def test_load_state_replaces_failed_collection(service, gateway):
    await gateway.insert_category(CategoryCreate(name="Groceries"))
    await gateway.insert_expense(ExpenseCreate(date=date(2024, 1, 1), amount=Decimal("5"), category="Groceries"))
    gateway.failing_reads.add("expenses")

    state = await service.load_state()

    assert state.expenses == []
    assert [c.name for c in state.categories] == ["Groceries"]


@pytest.mark.asyncio
async def test_list_fails_soft(service, gateway):
    gateway.failing_reads.add("incomes")

    assert await service.list_incomes() == []


@pytest.mark.asyncio
async def test_writes_fail_loud(service, gateway):
    gateway.failing_expense_inserts.add(1)

    with pytest.raises(TransportFailureError):
        await service.add_expense(ExpenseCreate(date=date(2024, 1, 1), amount=Decimal("5"), category="X"))


@pytest.mark.asyncio
async def test_category_names_are_unique(service):
    await service.add_category(CategoryCreate(name="Travel"))

    with pytest.raises(AlreadyExistsError):
        await service.add_category(CategoryCreate(name="Travel"))


@pytest.mark.asyncio
async def test_unknown_expense_category_is_uncategorized(service):
    expense = await service.add_expense(
        ExpenseCreate(date=date(2024, 1, 1), amount=Decimal("5"), category="Missing")
    )

    assert expense.category == "Uncategorized"


@pytest.mark.asyncio
async def test_create_installment(service, gateway):
    await gateway.insert_category(CategoryCreate(name="Electronics"))

    created = await service.create_installment(laptop())

    assert created.installment.monthly_amount == Decimal("100.00")
    assert len(created.expenses) == 12
    assert len(gateway.installments) == 1
    assert {e.installment_id for e in gateway.expenses} == {created.installment.id}
    assert sorted(e.description for e in created.expenses)[0] == "Laptop (1/12)"


@pytest.mark.asyncio
async def test_parent_failure_writes_no_children(service, gateway):
    gateway.fail_installment_insert = True

    with pytest.raises(TransportFailureError):
        await service.create_installment(laptop())

    assert gateway.expenses == []
    assert gateway.expense_insert_calls == 0


@pytest.mark.asyncio
async def test_partial_batch_failure_names_the_parent(service, gateway):
    gateway.failing_expense_inserts.update({4, 9})

    with pytest.raises(PartialBatchFailureError) as exc_info:
        await service.create_installment(laptop())

    error = exc_info.value
    assert error.installment_id == gateway.installments[0].id
    assert (error.created, error.failed) == (10, 2)
    assert error.status_code == 502
    assert len(gateway.expenses) == 10


@pytest.mark.asyncio
async def test_complete_installment_fills_gaps(service, gateway):
    gateway.failing_expense_inserts.update({4, 9})
    with pytest.raises(PartialBatchFailureError) as exc_info:
        await service.create_installment(laptop())

    completed = await service.complete_installment(exc_info.value.installment_id)

    assert len(completed.expenses) == 12
    assert len(gateway.expenses) == 12
    assert sorted(e.description for e in gateway.expenses) == sorted(
        f"Laptop ({i}/12)" for i in range(1, 13)
    )
    assert [e.date for e in completed.expenses] == sorted(e.date for e in completed.expenses)


@pytest.mark.asyncio
async def test_complete_is_a_no_op_when_nothing_is_missing(service, gateway):
    created = await service.create_installment(laptop(count=3))

    completed = await service.complete_installment(created.installment.id)

    assert len(completed.expenses) == 3
    assert len(gateway.expenses) == 3


@pytest.mark.asyncio
async def test_discard_installment_removes_children(service, gateway):
    other = await service.add_expense(
        ExpenseCreate(date=date(2024, 1, 1), amount=Decimal("5"), category="Groceries")
    )
    gateway.failing_expense_inserts.add(3)
    with pytest.raises(PartialBatchFailureError) as exc_info:
        await service.create_installment(laptop(count=6))

    await service.discard_installment(exc_info.value.installment_id)

    assert gateway.installments == []
    assert [e.id for e in gateway.expenses] == [other.id]


@pytest.mark.asyncio
async def test_discard_unknown_installment(service):
    with pytest.raises(NotFoundError):
        await service.discard_installment(999)


@pytest.mark.asyncio
async def test_reset_data(service, gateway):
    await service.create_installment(laptop(count=2))

    await service.reset_data()

    state = await service.load_state()
    assert (state.expenses, state.installments) == ([], [])
