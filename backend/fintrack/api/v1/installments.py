"""Installment API routes."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from fintrack.api.deps import get_finance_service, get_today
from fintrack.config import settings
from fintrack.schemas.installment import (
    Installment,
    InstallmentCreate,
    InstallmentCreated,
    InstallmentStatus,
)
from fintrack.services.finance_service import FinanceService
from fintrack.services.installment_engine import installments_overview, upcoming_installments

router = APIRouter()


@router.get("", response_model=list[Installment])
async def list_installments(
    service: FinanceService = Depends(get_finance_service),
):
    return await service.list_installments()


@router.post("", response_model=InstallmentCreated, status_code=201)
async def create_installment(
    data: InstallmentCreate,
    service: FinanceService = Depends(get_finance_service),
):
    """Create an installment purchase and one expense per monthly payment.

    Returns 502 with the installment id when only part of the payments
    could be written; use the discard or complete routes to reconcile.
    """
    return await service.create_installment(data)


@router.get("/status", response_model=list[InstallmentStatus])
async def installments_status(
    today: date = Depends(get_today),
    service: FinanceService = Depends(get_finance_service),
):
    """Progress of every installment, soonest next payment first."""
    state = await service.load_state()
    return installments_overview(state.installments, state.expenses, today)


@router.get("/upcoming", response_model=list[InstallmentStatus])
async def installments_upcoming(
    today: date = Depends(get_today),
    limit: int = Query(settings.upcoming_limit, ge=1, le=100),
    service: FinanceService = Depends(get_finance_service),
):
    """Installments with payments left, soonest next payment first."""
    state = await service.load_state()
    return upcoming_installments(state.installments, state.expenses, today, limit=limit)


@router.post("/{installment_id}/complete", response_model=InstallmentCreated)
async def complete_installment(
    installment_id: int,
    service: FinanceService = Depends(get_finance_service),
):
    """Write the payments a partially created installment is missing."""
    return await service.complete_installment(installment_id)


@router.delete("/{installment_id}", status_code=204)
async def discard_installment(
    installment_id: int,
    service: FinanceService = Depends(get_finance_service),
):
    """Delete an installment and every expense it generated."""
    await service.discard_installment(installment_id)
