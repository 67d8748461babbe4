"""Installment expansion and payment status.

An installment purchase of ``total_amount`` split into N payments becomes
N monthly expenses of ``round2(total_amount / N)``. The sum of the generated
amounts may drift from the total by up to N * 0.005; that drift is kept,
not redistributed onto the last payment.

Payment status is never stored: an expense dated strictly before the
reference day counts as paid.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from fintrack.core.exceptions import InvalidArgumentError
from fintrack.core.months import add_months
from fintrack.schemas.expense import Expense, ExpenseCreate
from fintrack.schemas.installment import Installment, InstallmentCreate, InstallmentStatus

STATUS_COMPLETED = "Completed"
STATUS_OVERDUE = "Overdue"
STATUS_IN_PROGRESS = "InProgress"

CENTS = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_definition(definition: InstallmentCreate) -> None:
    """Reject definitions the engine cannot expand."""
    count = definition.installments
    if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
        raise InvalidArgumentError(f"Installment count must be a positive integer, got {count!r}")
    if definition.total_amount is None or Decimal(definition.total_amount) <= 0:
        raise InvalidArgumentError("Installment total amount must be positive")
    if not definition.category:
        raise InvalidArgumentError("Installment category is required")
    if not definition.start_date:
        raise InvalidArgumentError("Installment start date is required")


def monthly_amount(total_amount: Decimal, count: int) -> Decimal:
    return round2(Decimal(total_amount) / count)


def payment_description(name: str, index: int, count: int) -> str:
    """Label of the ``index``-th (0-based) payment, e.g. "Laptop (3/12)"."""
    return f"{name} ({index + 1}/{count})"


def payment_dates(start_date: date, count: int) -> list[date]:
    """One date per month from ``start_date``, keeping its day when it exists.

    Each date is computed from the start date (not chained from the
    previous one), so a start on the 31st returns to the 31st after a
    clamped February.
    """
    return [add_months(start_date, index) for index in range(count)]


def expand_installment(definition: InstallmentCreate, installment_id: int) -> list[ExpenseCreate]:
    """Generate the per-month expenses of an installment purchase."""
    validate_definition(definition)
    count = definition.installments
    amount = monthly_amount(definition.total_amount, count)

    return [
        ExpenseCreate(
            date=payment_date,
            amount=amount,
            category=definition.category,
            description=payment_description(definition.name, index, count),
            is_installment=True,
            installment_id=installment_id,
        )
        for index, payment_date in enumerate(payment_dates(definition.start_date, count))
    ]


def related_expenses(installment: Installment, expenses: list[Expense]) -> list[Expense]:
    """Expenses generated by ``installment``, oldest first."""
    return sorted(
        (e for e in expenses if e.installment_id == installment.id),
        key=lambda e: e.date,
    )


def installment_status(
    installment: Installment, related: list[Expense], today: date
) -> InstallmentStatus:
    """Payment progress of an installment as of ``today``.

    ``related`` must already be restricted to the installment's expenses.
    """
    related = sorted(related, key=lambda e: e.date)
    paid = [e for e in related if e.date < today]
    next_payment = next((e for e in related if e.date >= today), None)

    remaining = max(installment.installments - len(paid), 0)
    next_payment_date = next_payment.date if next_payment else None

    if remaining == 0:
        status_label = STATUS_COMPLETED
    elif next_payment_date is not None and next_payment_date < today:
        status_label = STATUS_OVERDUE
    else:
        status_label = STATUS_IN_PROGRESS

    return InstallmentStatus(
        **installment.model_dump(),
        paid_count=len(paid),
        remaining=remaining,
        remaining_amount=round2(remaining * Decimal(installment.monthly_amount)),
        total_paid=sum((e.amount for e in paid), Decimal("0")),
        next_payment_date=next_payment_date,
        status_label=status_label,
    )


def _by_next_payment(status: InstallmentStatus) -> tuple[bool, date]:
    # Entries without a next payment sort last
    return (status.next_payment_date is None, status.next_payment_date or date.max)


def installments_overview(
    installments: list[Installment], expenses: list[Expense], today: date
) -> list[InstallmentStatus]:
    """Status of every installment, soonest next payment first."""
    statuses = [
        installment_status(i, related_expenses(i, expenses), today) for i in installments
    ]
    return sorted(statuses, key=_by_next_payment)


def upcoming_installments(
    installments: list[Installment], expenses: list[Expense], today: date, limit: int = 5
) -> list[InstallmentStatus]:
    """Installments still being paid, soonest next payment first.

    An installment whose generated expenses were all deleted is treated as
    resolved and left out.
    """
    statuses = []
    for installment in installments:
        related = related_expenses(installment, expenses)
        if not related:
            continue
        status = installment_status(installment, related, today)
        if status.remaining <= 0:
            continue
        statuses.append(status)
    return sorted(statuses, key=_by_next_payment)[:limit]
