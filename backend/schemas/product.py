# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional, List, Literal

from models.product import Category


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Schema for creating a new product (admin form)
class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: Category
    available_quantity: int = Field(0, ge=0)
    image_urls: List[str] = Field(default_factory=list, max_length=3)
    cover_image_index: int = Field(0, ge=0)


# Schema for partial product updates; only the fields sent are changed
class ProductEditRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[Category] = None
    available_quantity: Optional[int] = Field(None, ge=0)
    image_urls: Optional[List[str]] = Field(None, max_length=3)
    cover_image_index: Optional[int] = Field(None, ge=0)


# Full product representation
class ProductOut(ORMBase):
    id: int
    name: str
    category: Category
    category_label: str
    available_quantity: int
    image_urls: List[str] = []
    cover_image_index: int = 0
    cover_image_url: Optional[str] = None
    stock_level: Literal["low", "medium", "high"]
    created_at: Optional[datetime] = None


class CategoryOption(BaseModel):
    value: Category
    label: str
