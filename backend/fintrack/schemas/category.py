"""Category schemas."""

from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    color: str = Field(default="#6B7280", pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: str | None = None


class Category(CategoryCreate):
    id: int

    model_config = {"from_attributes": True}
