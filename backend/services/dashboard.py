# backend/services/dashboard.py
from collections import defaultdict
from datetime import datetime
from typing import Optional, Dict, Any, List

from sqlalchemy.orm import Session

from config import settings
from models.product import Category, CATEGORY_LABELS
from models.withdrawal import WithdrawalKind
from services.products import ProductStore
from services.withdrawals import WithdrawalStore, DateLike

TOP_PRODUCTS_LIMIT = 10


def _value(category) -> str:
    return category.value if isinstance(category, Category) else str(category)


def _label(category) -> str:
    try:
        return CATEGORY_LABELS[Category(category)]
    except ValueError:
        return str(category)


def _sum_quantity(rows) -> int:
    return sum(w.quantity for w in rows)


class DashboardService:
    """Derived numbers for the admin panel. Holds no state of its own."""

    def __init__(self, db: Session):
        self.products = ProductStore(db)
        self.withdrawals = WithdrawalStore(db)

    def get_dashboard_stats(self, now: Optional[datetime] = None,
                            threshold: Optional[int] = None) -> Dict[str, Any]:
        threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold

        total_products = self.products.count()
        low_stock = self.products.list_below_threshold(threshold)
        today = self.withdrawals.list_for_today(now)
        month = self.withdrawals.list_for_current_month(now)
        recent = self.withdrawals.list_most_recent(settings.RECENT_WITHDRAWALS_LIMIT)

        by_category = [
            {
                "category": _value(row["category"]),
                "label": _label(row["category"]),
                "total": row["count"],
                "available": row["total_quantity"],
            }
            for row in self.products.group_by_category()
        ]

        return {
            "total_products": total_products,
            # Item counts are summed quantities, not row counts
            "total_withdrawals_today": _sum_quantity(today),
            "total_withdrawals_month": _sum_quantity(month),
            "low_stock_products": len(low_stock),
            "products_by_category": by_category,
            "recent_withdrawals": recent,
            "low_stock_items": low_stock,
        }

    def get_quick_stats(self, now: Optional[datetime] = None) -> Dict[str, int]:
        return {
            "total_products": self.products.count(),
            "withdrawals_today": _sum_quantity(self.withdrawals.list_for_today(now)),
            "withdrawals_month": _sum_quantity(self.withdrawals.list_for_current_month(now)),
            "low_stock_count": len(self.products.list_below_threshold(settings.LOW_STOCK_THRESHOLD)),
        }

    def get_category_insights(self) -> List[Dict[str, Any]]:
        rows = self.products.group_by_category()
        total = sum(r["total_quantity"] for r in rows)
        return [
            {
                "category": _value(r["category"]),
                "label": _label(r["category"]),
                "total_products": r["count"],
                "total_quantity": r["total_quantity"],
                "percentage": round(r["total_quantity"] / total * 100) if total > 0 else 0,
            }
            for r in rows
        ]

    def get_movement_stats(self, date_from: DateLike = None, date_to: DateLike = None) -> Dict[str, Any]:
        """Withdrawal totals for a period, per category and per product."""
        rows = self.withdrawals.list(
            date_from=date_from, date_to=date_to, kind=WithdrawalKind.WITHDRAWAL.value
        )

        by_category = defaultdict(lambda: {"count": 0, "quantity": 0})
        by_product = defaultdict(int)
        for w in rows:
            cat = by_category[w.product_category or "unknown"]
            cat["count"] += 1
            cat["quantity"] += w.quantity
            by_product[w.product_name or "Unknown product"] += w.quantity

        top = sorted(by_product.items(), key=lambda kv: (-kv[1], kv[0]))[:TOP_PRODUCTS_LIMIT]

        return {
            "total_withdrawals": len(rows),
            "total_items": _sum_quantity(rows),
            "by_category": dict(by_category),
            "top_products": [{"name": name, "quantity": qty} for name, qty in top],
        }
