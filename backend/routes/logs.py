# backend/routes/logs.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.admin import Admin
from schemas.log import LogPage
from utils.audit import list_logs
from utils.tokenJWT import get_current_admin

router = APIRouter(prefix="/logs", tags=["Logs"])


# Audit trail browser for the admin panel
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Action contains"),
    resource: Optional[str] = Query(None, description="Resource contains"),
    status: Optional[str] = Query(None, pattern="^(SUCCESS|FAIL|success|fail)$"),
    admin_id: Optional[int] = Query(None, description="Acting administrator"),
    date_from: Optional[str] = Query(None, description="From (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="To (YYYY-MM-DD), whole day included"),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    total, items = list_logs(
        db, action=action, resource=resource, status=status, admin_id=admin_id,
        date_from=date_from, date_to=date_to,
        offset=(page - 1) * page_size, limit=page_size,
    )
    return {"items": items, "total": total, "page": page, "page_size": page_size}
