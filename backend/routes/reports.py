# routes/reports.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.admin import Admin
from services.products import ProductStore
from utils.tokenJWT import get_current_admin
from schemas.dashboard import LowStockPage

router = APIRouter(prefix="/reports", tags=["Reports"])


# -----------------------------
# Low stock
# -----------------------------
@router.get("/low-stock", response_model=LowStockPage)
def report_low_stock(
    threshold: int = Query(settings.LOW_STOCK_THRESHOLD, ge=0, description="Stock threshold (<=)"),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    items = ProductStore(db).list_below_threshold(threshold)
    return {"items": items, "total": len(items), "threshold": threshold}
