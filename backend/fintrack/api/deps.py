"""Shared API dependencies."""

from datetime import date

from fastapi import Depends, Query

from fintrack.core.database import async_session_factory
from fintrack.core.security import get_current_user_id
from fintrack.services.finance_service import FinanceService
from fintrack.services.gateway import FinanceGateway
from fintrack.services.sql_gateway import SqlFinanceGateway


def get_gateway(user_id: str = Depends(get_current_user_id)) -> FinanceGateway:
    return SqlFinanceGateway(async_session_factory, user_id)


def get_finance_service(gateway: FinanceGateway = Depends(get_gateway)) -> FinanceService:
    return FinanceService(gateway)


def get_today(
    today: date | None = Query(None, description="Reference day (defaults to the server's date)"),
) -> date:
    """The clock is read here, once per request, and passed down explicitly."""
    return today or date.today()


__all__ = ["get_current_user_id", "get_gateway", "get_finance_service", "get_today"]
