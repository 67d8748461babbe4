"""Category API routes."""

from fastapi import APIRouter, Depends

from fintrack.api.deps import get_finance_service
from fintrack.schemas.category import Category, CategoryCreate
from fintrack.services.finance_service import FinanceService

router = APIRouter()


@router.get("", response_model=list[Category])
async def list_categories(
    service: FinanceService = Depends(get_finance_service),
):
    """List the user's categories, by name."""
    return await service.list_categories()


@router.post("", response_model=Category, status_code=201)
async def create_category(
    data: CategoryCreate,
    service: FinanceService = Depends(get_finance_service),
):
    """Create a category (409 if the name is already used)."""
    return await service.add_category(data)


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: int,
    service: FinanceService = Depends(get_finance_service),
):
    """Delete a category. Its expenses are kept and become uncategorized."""
    await service.delete_category(category_id)
