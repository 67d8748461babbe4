"""Expense model."""

import datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fintrack.models.base import Base, TimestampMixin


class Expense(Base, TimestampMixin):
    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    # Weak reference: deleting the category leaves the expense uncategorized
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    is_installment: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # No cascade: generated expenses outlive their installment
    installment_id: Mapped[int | None] = mapped_column(
        ForeignKey("installments.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Relationships
    category = relationship("Category", lazy="select")

    __table_args__ = (
        Index("idx_expenses_user_date", "user_id", "date"),
    )
