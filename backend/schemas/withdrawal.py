# backend/schemas/withdrawal.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional

from models.withdrawal import WithdrawalKind


# Who took the material and where it goes; shared by every cart line
class WithdrawalMeta(BaseModel):
    destination: str = Field(..., min_length=1)
    supervisor: str = Field(..., min_length=1)
    photo_url: Optional[str] = None
    signature_url: Optional[str] = None


class WithdrawalCreate(WithdrawalMeta):
    product_id: int
    quantity: int = Field(..., gt=0)


class CartLine(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)


class CartCheckout(WithdrawalMeta):
    items: List[CartLine] = Field(..., min_length=1)


class WithdrawalOut(BaseModel):
    id: int
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    product_category: Optional[str] = None
    quantity: int
    destination: str
    supervisor: str
    photo_url: Optional[str] = None
    signature_url: Optional[str] = None
    kind: WithdrawalKind
    reason: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Result of a committed withdrawal with the stock before and after
class WithdrawalResult(BaseModel):
    withdrawal: WithdrawalOut
    previous_stock: int
    new_stock: int


class CheckoutResult(BaseModel):
    items: List[WithdrawalResult]
