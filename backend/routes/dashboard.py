# backend/routes/dashboard.py
from typing import Optional, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.admin import Admin
from services.dashboard import DashboardService
from utils.tokenJWT import get_current_admin
import schemas.dashboard as dashboard_schemas

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


# === Full admin dashboard ===
@router.get("", response_model=dashboard_schemas.DashboardStats)
def get_dashboard(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return DashboardService(db).get_dashboard_stats()


# === Headline numbers only ===
@router.get("/quick", response_model=dashboard_schemas.QuickStats)
def get_quick_stats(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return DashboardService(db).get_quick_stats()


# === Share of stock per category ===
@router.get("/categories", response_model=List[dashboard_schemas.CategoryInsight])
def get_category_insights(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return DashboardService(db).get_category_insights()


# === Withdrawals in a period ===
@router.get("/movements", response_model=dashboard_schemas.MovementStats)
def get_movement_stats(
    date_from: Optional[str] = Query(None, description="ISO date/datetime, inclusive"),
    date_to: Optional[str] = Query(None, description="ISO date/datetime, inclusive"),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return DashboardService(db).get_movement_stats(date_from, date_to)
