# backend/routes/products.py
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_admin
from utils.audit import log_event, client_ip
from utils.storage import delete_upload
from models.admin import Admin
from models.product import Category, CATEGORY_LABELS
from services.products import ProductStore
import schemas.product as product_schemas


router = APIRouter(tags=["Products"])


# =========================
# PRODUCT LIST (catalog)
# =========================
@router.get("/products", response_model=List[product_schemas.ProductOut])
def list_products(
    search: Optional[str] = Query(None, description="Name contains"),
    category: Optional[str] = Query(None, description="Category or 'all'"),
    sort_by: str = Query("name", pattern="^(name|available_quantity|created_at)$"),
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
):
    return ProductStore(db).list(search=search, category=category, sort_by=sort_by, sort_order=sort_order)


@router.get("/products/categories", response_model=List[product_schemas.CategoryOption])
def list_categories():
    return [{"value": c, "label": CATEGORY_LABELS[c]} for c in Category]


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/products/{product_id}", response_model=product_schemas.ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = ProductStore(db).get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# =========================
# CREATE PRODUCT (admin)
# =========================
@router.post("/products", response_model=product_schemas.ProductOut, status_code=201)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    product = ProductStore(db).create(payload.model_dump())

    log_event(
        db, admin_id=current_admin.id, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "name": product.name},
    )
    db.refresh(product)
    return product


# =========================
# PARTIAL EDIT (admin)
# =========================
@router.patch("/products/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    store = ProductStore(db)
    changes = payload.model_dump(exclude_unset=True)

    existing = store.get(product_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Product not found")
    old_images = list(existing.image_urls)

    product = store.update(product_id, changes)

    # Images dropped by the edit are removed from storage, best effort
    if "image_urls" in changes:
        for url in old_images:
            if url not in product.image_urls:
                delete_upload(url)

    log_event(
        db, admin_id=current_admin.id, action="PRODUCT_EDIT", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product_id, "fields": sorted(changes)},
    )
    db.refresh(product)
    return product


# =========================
# DELETE (admin)
# =========================
@router.delete("/products/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    # Withdrawal history keeps its copy of the product name and category
    ProductStore(db).delete(product_id)
    log_event(
        db, admin_id=current_admin.id, action="PRODUCT_DELETE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product_id},
    )
