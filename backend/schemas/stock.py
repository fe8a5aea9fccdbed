# backend/schemas/stock.py
from pydantic import BaseModel, Field
from typing import Optional, List

from models.product import Category
from schemas.product import ProductOut
from schemas.withdrawal import WithdrawalOut


# Manual stock increase (admin)
class StockAdd(BaseModel):
    quantity: int = Field(..., gt=0)


# Manual stock correction (admin); logged as a manual adjustment
class StockRemove(BaseModel):
    quantity: int = Field(..., gt=0)
    reason: Optional[str] = None


class StockChange(BaseModel):
    previous_stock: int
    new_stock: int


class StockRemoval(StockChange):
    adjustment: WithdrawalOut


# Pre-flight availability check for quantity pickers
class ValidateRequest(BaseModel):
    product_id: int
    quantity: int


class ValidateResponse(BaseModel):
    valid: bool
    available_stock: Optional[int] = None
    message: Optional[str] = None


# Restock by name, creating the product when it is new
class MaterialsCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: Category
    quantity: int = Field(..., gt=0)
    image_url: Optional[str] = None


class MaterialsResult(StockChange):
    product: ProductOut
    created: bool
    dropped_images: List[str] = []
