# backend/routes/stock.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from models.admin import Admin
from services.stock import StockService
from utils.tokenJWT import get_current_admin
from utils.audit import log_event, client_ip
from utils.storage import delete_upload
import schemas.stock as stock_schemas

router = APIRouter(prefix="/stock", tags=["Stock"])


# Read-only availability check used before confirming quantities
@router.post("/validate", response_model=stock_schemas.ValidateResponse)
def validate_withdrawal(payload: stock_schemas.ValidateRequest, db: Session = Depends(get_db)):
    return StockService(db).validate_withdrawal(payload.product_id, payload.quantity)


# Add materials: restock an existing product by name or register a new one
@router.post("/materials", response_model=stock_schemas.MaterialsResult)
def add_materials(
    payload: stock_schemas.MaterialsCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    result = StockService(db).add_materials(
        payload.name, payload.category.value, payload.quantity, payload.image_url
    )
    log_event(
        db, admin_id=None, action="MATERIALS_CREATE" if result["created"] else "MATERIALS_RESTOCK",
        resource="stock", status="SUCCESS", ip=client_ip(request),
        meta={"product_id": result["product"].id, "qty": payload.quantity},
    )
    # Images that no longer fit on the product are removed from storage, best effort
    for url in result["dropped_images"]:
        delete_upload(url)
    db.refresh(result["product"])
    return result


@router.post("/{product_id}/add", response_model=stock_schemas.StockChange)
def add_stock(
    product_id: int,
    payload: stock_schemas.StockAdd,
    request: Request,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    result = StockService(db).add_stock(product_id, payload.quantity)
    log_event(
        db, admin_id=current_admin.id, action="STOCK_ADD", resource="stock", status="SUCCESS",
        ip=client_ip(request), meta={"product_id": product_id, "qty": payload.quantity},
    )
    return result


@router.post("/{product_id}/remove", response_model=stock_schemas.StockRemoval)
def remove_stock(
    product_id: int,
    payload: stock_schemas.StockRemove,
    request: Request,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    result = StockService(db).remove_stock(product_id, payload.quantity, payload.reason)
    log_event(
        db, admin_id=current_admin.id, action="STOCK_ADJUSTMENT", resource="stock", status="SUCCESS",
        ip=client_ip(request),
        meta={"product_id": product_id, "qty": payload.quantity, "id": result["adjustment"].id},
    )
    db.refresh(result["adjustment"])
    return result
