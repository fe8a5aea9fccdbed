# schemas/dashboard.py
from typing import List, Dict
from pydantic import BaseModel

from schemas.product import ProductOut
from schemas.withdrawal import WithdrawalOut


class CategoryStats(BaseModel):
    category: str
    label: str
    total: int
    available: int


class DashboardStats(BaseModel):
    total_products: int
    total_withdrawals_today: int
    total_withdrawals_month: int
    low_stock_products: int
    products_by_category: List[CategoryStats]
    recent_withdrawals: List[WithdrawalOut]
    low_stock_items: List[ProductOut]


class QuickStats(BaseModel):
    total_products: int
    withdrawals_today: int
    withdrawals_month: int
    low_stock_count: int


class CategoryInsight(BaseModel):
    category: str
    label: str
    total_products: int
    total_quantity: int
    percentage: int


class CategoryMovement(BaseModel):
    count: int
    quantity: int


class TopProduct(BaseModel):
    name: str
    quantity: int


class MovementStats(BaseModel):
    total_withdrawals: int
    total_items: int
    by_category: Dict[str, CategoryMovement]
    top_products: List[TopProduct]


# Low stock report
class LowStockPage(BaseModel):
    items: List[ProductOut]
    total: int
    threshold: int
