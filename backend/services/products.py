# backend/services/products.py
from typing import Optional, List, Dict, Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.product import Product, Category, MAX_IMAGES
from services.errors import NotFound, ValidationFailure, store_errors

# Columns a product listing can be ordered by
SORTABLE = {
    "name": Product.name,
    "available_quantity": Product.available_quantity,
    "created_at": Product.created_at,
}

EDITABLE_FIELDS = {"name", "category", "available_quantity", "image_urls", "cover_image_index"}
NOT_NULL_FIELDS = ("name", "category", "available_quantity", "cover_image_index")


def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
    """Trim the name and check image/cover consistency."""
    out = dict(data)
    if "name" in out:
        name = (out["name"] or "").strip()
        if not name:
            raise ValidationFailure("Product name is required")
        out["name"] = name
    for field in NOT_NULL_FIELDS:
        if field in out and out[field] is None:
            raise ValidationFailure(f"Field '{field}' cannot be empty")
    if "available_quantity" in out and out["available_quantity"] < 0:
        raise ValidationFailure("Available quantity must be >= 0")
    if "category" in out:
        try:
            out["category"] = Category(out["category"])
        except ValueError:
            raise ValidationFailure(f"Unknown category: {out['category']}")
    if "cover_image_index" in out and out["cover_image_index"] < 0:
        raise ValidationFailure("Cover image index must be >= 0")
    if "image_urls" in out:
        urls = [u for u in (out["image_urls"] or []) if u]
        if len(urls) > MAX_IMAGES:
            raise ValidationFailure(f"A product can have at most {MAX_IMAGES} images")
        out["image_urls"] = urls
    return out


class ProductStore:
    """Reads and writes rows of the produtos table.

    Write methods commit by default. The stock engine passes ``commit=False``
    to group several writes into one transaction and commits itself.
    """

    def __init__(self, db: Session):
        self.db = db

    def list(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: str = "name",
        sort_order: str = "asc",
    ) -> List[Product]:
        if category and category != "all":
            try:
                category = Category(category)
            except ValueError:
                raise ValidationFailure(f"Unknown category: {category}")
        else:
            category = None

        with store_errors(self.db, "list products"):
            query = self.db.query(Product)
            if search:
                query = query.filter(Product.name.ilike(f"%{search}%"))
            if category:
                query = query.filter(Product.category == category)

            col = SORTABLE.get(sort_by, Product.name)
            query = query.order_by(col.desc() if sort_order == "desc" else col.asc(), Product.id.asc())
            return query.all()

    def get(self, product_id: int) -> Optional[Product]:
        with store_errors(self.db, "fetch product"):
            return self.db.query(Product).filter(Product.id == product_id).first()

    def get_by_name(self, name: str) -> Optional[Product]:
        name = (name or "").strip().lower()
        if not name:
            return None
        with store_errors(self.db, "fetch product by name"):
            return (
                self.db.query(Product)
                .filter(func.lower(Product.name) == name)
                .order_by(Product.id.asc())
                .first()
            )

    def create(self, data: Dict[str, Any], commit: bool = True) -> Product:
        for required in ("name", "category"):
            if not data.get(required):
                raise ValidationFailure(f"Field '{required}' is required")
        data = _normalize(data)
        images = data.pop("image_urls", [])
        cover = data.pop("cover_image_index", 0) or 0
        product = Product(**data)
        product.image_urls = images
        product.cover_image_index = cover if cover < len(images) else 0

        with store_errors(self.db, "create product"):
            self.db.add(product)
            self.db.flush()
            if commit:
                self.db.commit()
                self.db.refresh(product)
        return product

    def update(self, product_id: int, changes: Dict[str, Any], commit: bool = True) -> Product:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationFailure(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        changes = _normalize(changes)

        product = self.get(product_id)
        if not product:
            raise NotFound("Product", product_id)

        with store_errors(self.db, "update product"):
            for key, value in changes.items():
                setattr(product, key, value)
            # Cover falls back to the first image when it points past the list
            if product.cover_image_index and product.cover_image_index >= len(product.image_urls):
                product.cover_image_index = 0
            self.db.flush()
            if commit:
                self.db.commit()
                self.db.refresh(product)
        return product

    def delete(self, product_id: int) -> None:
        product = self.get(product_id)
        if not product:
            raise NotFound("Product", product_id)
        with store_errors(self.db, "delete product"):
            self.db.delete(product)
            self.db.commit()

    def list_below_threshold(self, threshold: int = 10) -> List[Product]:
        with store_errors(self.db, "list low stock products"):
            return (
                self.db.query(Product)
                .filter(Product.available_quantity <= threshold)
                .order_by(Product.available_quantity.asc(), Product.name.asc())
                .all()
            )

    def group_by_category(self) -> List[Dict[str, Any]]:
        with store_errors(self.db, "group products by category"):
            rows = (
                self.db.query(
                    Product.category.label("category"),
                    func.count(Product.id).label("count"),
                    func.coalesce(func.sum(Product.available_quantity), 0).label("total_quantity"),
                )
                .group_by(Product.category)
                .order_by(Product.category)
                .all()
            )
        return [
            {"category": r.category, "count": int(r.count), "total_quantity": int(r.total_quantity)}
            for r in rows
        ]

    def count(self) -> int:
        with store_errors(self.db, "count products"):
            return self.db.query(func.count(Product.id)).scalar() or 0

    # ---- atomic quantity changes ----

    def increment(self, product_id: int, quantity: int) -> Optional[int]:
        """Add to the stored quantity in one UPDATE; returns the new value or None if absent."""
        with store_errors(self.db, "increment stock"):
            matched = (
                self.db.query(Product)
                .filter(Product.id == product_id)
                .update(
                    {Product.available_quantity: Product.available_quantity + quantity},
                    synchronize_session="fetch",
                )
            )
            if not matched:
                return None
            return self.current_quantity(product_id)

    def decrement_if_available(self, product_id: int, quantity: int) -> Optional[int]:
        """Subtract only while enough stock is left.

        The availability guard is part of the UPDATE's WHERE clause, so two
        concurrent callers cannot both consume the same units. Returns the new
        quantity, or None when no row matched.
        """
        with store_errors(self.db, "decrement stock"):
            matched = (
                self.db.query(Product)
                .filter(Product.id == product_id, Product.available_quantity >= quantity)
                .update(
                    {Product.available_quantity: Product.available_quantity - quantity},
                    synchronize_session="fetch",
                )
            )
            if not matched:
                return None
            return self.current_quantity(product_id)

    def current_quantity(self, product_id: int) -> Optional[int]:
        return (
            self.db.query(Product.available_quantity)
            .filter(Product.id == product_id)
            .scalar()
        )
