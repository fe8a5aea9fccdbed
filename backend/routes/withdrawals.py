# backend/routes/withdrawals.py
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from models.admin import Admin
from services.stock import StockService
from services.withdrawals import WithdrawalStore
from utils.tokenJWT import get_current_admin
from utils.audit import log_event, client_ip
import schemas.withdrawal as withdrawal_schemas

router = APIRouter(prefix="/withdrawals", tags=["Withdrawals"])


# Single product withdrawal from the kiosk
@router.post("", response_model=withdrawal_schemas.WithdrawalResult, status_code=201)
def create_withdrawal(
    payload: withdrawal_schemas.WithdrawalCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    meta = payload.model_dump(exclude={"product_id", "quantity"})
    result = StockService(db).process_withdrawal(payload.product_id, payload.quantity, meta)

    log_event(
        db, admin_id=None, action="WITHDRAWAL", resource="withdrawals", status="SUCCESS",
        ip=client_ip(request),
        meta={"id": result["withdrawal"].id, "product_id": payload.product_id, "qty": payload.quantity},
    )
    db.refresh(result["withdrawal"])
    return result


# Cart checkout: every line is withdrawn or none is
@router.post("/batch", response_model=withdrawal_schemas.CheckoutResult, status_code=201)
def checkout_cart(
    payload: withdrawal_schemas.CartCheckout,
    request: Request,
    db: Session = Depends(get_db),
):
    meta = payload.model_dump(exclude={"items"})
    items = [line.model_dump() for line in payload.items]
    results = StockService(db).process_multiple_withdrawals(items, meta)

    log_event(
        db, admin_id=None, action="WITHDRAWAL_BATCH", resource="withdrawals", status="SUCCESS",
        ip=client_ip(request),
        meta={"ids": [r["withdrawal"].id for r in results], "lines": len(results)},
    )
    for r in results:
        db.refresh(r["withdrawal"])
    return {"items": results}


# History with filters (admin)
@router.get("", response_model=List[withdrawal_schemas.WithdrawalOut])
def list_withdrawals(
    search: Optional[str] = Query(None, description="Supervisor or destination contains"),
    date_from: Optional[str] = Query(None, description="ISO date/datetime, inclusive"),
    date_to: Optional[str] = Query(None, description="ISO date/datetime, inclusive"),
    supervisor: Optional[str] = Query(None),
    destination: Optional[str] = Query(None),
    kind: Optional[str] = Query(None, pattern="^(WITHDRAWAL|MANUAL_ADJUSTMENT)$"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return WithdrawalStore(db).list(
        search=search, date_from=date_from, date_to=date_to,
        supervisor=supervisor, destination=destination, kind=kind, limit=limit,
    )


@router.get("/{withdrawal_id}", response_model=withdrawal_schemas.WithdrawalOut)
def get_withdrawal(
    withdrawal_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    withdrawal = WithdrawalStore(db).get(withdrawal_id)
    if not withdrawal:
        raise HTTPException(status_code=404, detail="Withdrawal not found")
    return withdrawal
