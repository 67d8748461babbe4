"""Backup API routes — export, import and reset of the user's data."""

from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends

from fintrack.api.deps import get_finance_service, get_gateway, get_today
from fintrack.schemas.backup import FinanceData, ImportSummary
from fintrack.services import backup_service
from fintrack.services.finance_service import FinanceService
from fintrack.services.gateway import FinanceGateway

router = APIRouter()


@router.get("/export", response_model=FinanceData)
async def export_backup(
    today: date = Depends(get_today),
    service: FinanceService = Depends(get_finance_service),
):
    """Export every record as a versioned document partitioned by month."""
    state = await service.load_state()
    return backup_service.export_data(state, today)


@router.post("/import", response_model=ImportSummary)
async def import_backup(
    document: Any = Body(...),
    today: date = Depends(get_today),
    gateway: FinanceGateway = Depends(get_gateway),
):
    """Import a versioned or legacy (flat) backup document."""
    data = backup_service.normalize_finance_data(document, today)
    return await backup_service.import_data(gateway, data)


@router.post("/reset", status_code=204)
async def reset(
    service: FinanceService = Depends(get_finance_service),
):
    """Delete every record of the current user."""
    await service.reset_data()
