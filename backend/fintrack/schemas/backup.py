"""Backup (export/import) document schemas.

Field names are camelCase on the wire to stay compatible with files
exported by the browser version of the tracker. Record ids are whatever
the exporting store used (strings or integers); they are only used to
re-link installment expenses on import.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

RecordId = str | int


class BackupRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BackupCategory(BackupRecord):
    id: RecordId | None = None
    name: str = Field(min_length=1)
    color: str = Field(default="#6B7280", pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: str | None = None


class BackupIncome(BackupRecord):
    id: RecordId | None = None
    date: date
    amount: Decimal = Field(ge=0)
    description: str = ""
    created_at: datetime | None = None


class BackupExpense(BackupRecord):
    id: RecordId | None = None
    date: date
    amount: Decimal = Field(ge=0)
    category: str = ""
    description: str = ""
    is_installment: bool = False
    installment_id: RecordId | None = None
    created_at: datetime | None = None


class BackupInstallment(BackupRecord):
    id: RecordId | None = None
    name: str
    total_amount: Decimal = Field(gt=0)
    installments: int = Field(gt=0)
    start_date: date
    category: str = ""
    monthly_amount: Decimal | None = None
    paid_installments: int = 0
    created_at: datetime | None = None


class BackupMonth(BackupRecord):
    incomes: list[BackupIncome] = Field(default_factory=list)
    expenses: list[BackupExpense] = Field(default_factory=list)
    installments: list[BackupInstallment] = Field(default_factory=list)


class FinanceData(BackupRecord):
    version: int
    categories: list[BackupCategory]
    monthly_data: dict[str, BackupMonth]


class ImportSummary(BaseModel):
    categories: int
    incomes: int
    expenses: int
    installments: int
