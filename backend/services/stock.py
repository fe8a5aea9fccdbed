# backend/services/stock.py
"""Stock operations: withdrawals, cart checkout, restocking and corrections.

Every public operation runs as one database transaction. Quantity changes are
single conditional UPDATE statements (see ``ProductStore.decrement_if_available``),
so the read used for validation is never trusted for the write: if another
request consumed the stock in between, the guarded UPDATE matches no row and
the whole transaction is rolled back.
"""
import logging
from collections import OrderedDict
from typing import Optional, List, Dict, Any

from sqlalchemy.orm import Session

from models.product import Product, MAX_IMAGES
from models.withdrawal import (
    WithdrawalKind, MANUAL_ADJUSTMENT_DESTINATION, MANUAL_ADJUSTMENT_SUPERVISOR,
)
from services.errors import NotFound, InsufficientStock, ValidationFailure, StockError
from services.products import ProductStore
from services.withdrawals import WithdrawalStore

logger = logging.getLogger(__name__)


def _check_quantity(quantity) -> int:
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise ValidationFailure("Quantity must be a positive integer")
    return quantity


def _check_meta(meta: Dict[str, Any]) -> Dict[str, Any]:
    destination = (meta.get("destination") or "").strip()
    supervisor = (meta.get("supervisor") or "").strip()
    if not destination:
        raise ValidationFailure("Destination is required")
    if not supervisor:
        raise ValidationFailure("Supervisor is required")
    return {
        "destination": destination,
        "supervisor": supervisor,
        "photo_url": meta.get("photo_url") or None,
        "signature_url": meta.get("signature_url") or None,
    }


class StockService:
    def __init__(self, db: Session):
        self.db = db
        self.products = ProductStore(db)
        self.withdrawals = WithdrawalStore(db)

    # ===== helpers =====

    def _require_product(self, product_id: int) -> Product:
        product = self.products.get(product_id)
        if not product:
            raise NotFound("Product", product_id)
        return product

    def _withdraw(self, product: Product, quantity: int, meta: Dict[str, Any]) -> Dict[str, Any]:
        """Insert the withdrawal row and take the units, without committing."""
        previous = product.available_quantity
        if quantity > previous:
            raise InsufficientStock(product.id, previous, quantity, product.name)

        withdrawal = self.withdrawals.create(
            {
                "product_id": product.id,
                "product_name": product.name,
                "product_category": product.category.value,
                "quantity": quantity,
                "kind": WithdrawalKind.WITHDRAWAL,
                **meta,
            },
            commit=False,
        )

        new_stock = self.products.decrement_if_available(product.id, quantity)
        if new_stock is None:
            # Someone else took the stock after our read
            current = self.products.current_quantity(product.id)
            raise InsufficientStock(product.id, current or 0, quantity, product.name)

        return {"withdrawal": withdrawal, "previous_stock": new_stock + quantity, "new_stock": new_stock}

    def _run(self, action: str, fn):
        """Run fn inside a transaction: commit on success, roll back on any error."""
        try:
            result = fn()
            self.db.commit()
            return result
        except StockError as e:
            self.db.rollback()
            logger.warning("%s failed: %s", action, e.message)
            raise
        except Exception:
            self.db.rollback()
            logger.exception("%s failed unexpectedly", action)
            raise

    # ===== single withdrawal =====

    def process_withdrawal(self, product_id: int, quantity: int, meta: Dict[str, Any]) -> Dict[str, Any]:
        quantity = _check_quantity(quantity)
        meta = _check_meta(meta)

        def work():
            product = self._require_product(product_id)
            return self._withdraw(product, quantity, meta)

        result = self._run("Withdrawal", work)
        self.db.refresh(result["withdrawal"])
        logger.info(
            "Withdrawal %s: product %s, %s -> %s",
            result["withdrawal"].id, product_id, result["previous_stock"], result["new_stock"],
        )
        return result

    # ===== cart checkout =====

    def process_multiple_withdrawals(self, items: List[Dict[str, Any]], meta: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Withdraw every cart line or none of them.

        All lines are validated before anything is written (repeated products
        are checked against their summed quantity). Execution then shares a
        single transaction, so a failure on a later line undoes earlier ones.
        """
        if not items:
            raise ValidationFailure("Cart is empty")
        meta = _check_meta(meta)
        lines = [(item["product_id"], _check_quantity(item["quantity"])) for item in items]

        totals = OrderedDict()
        for product_id, quantity in lines:
            totals[product_id] = totals.get(product_id, 0) + quantity

        def work():
            for product_id, wanted in totals.items():
                product = self._require_product(product_id)
                if wanted > product.available_quantity:
                    raise InsufficientStock(product.id, product.available_quantity, wanted, product.name)

            results = []
            for product_id, quantity in lines:
                product = self._require_product(product_id)
                results.append(self._withdraw(product, quantity, meta))
            return results

        results = self._run("Cart checkout", work)
        for r in results:
            self.db.refresh(r["withdrawal"])
        logger.info("Cart checkout committed %d line(s) for %s", len(results), meta["destination"])
        return results

    # ===== manual stock changes =====

    def add_stock(self, product_id: int, quantity: int) -> Dict[str, int]:
        quantity = _check_quantity(quantity)

        def work():
            self._require_product(product_id)
            new_stock = self.products.increment(product_id, quantity)
            if new_stock is None:
                raise NotFound("Product", product_id)
            return {"previous_stock": new_stock - quantity, "new_stock": new_stock}

        result = self._run("Add stock", work)
        logger.info("Stock added to product %s: %s -> %s", product_id, result["previous_stock"], result["new_stock"])
        return result

    def remove_stock(self, product_id: int, quantity: int, reason: Optional[str] = None) -> Dict[str, Any]:
        quantity = _check_quantity(quantity)

        def work():
            product = self._require_product(product_id)
            if quantity > product.available_quantity:
                raise InsufficientStock(product.id, product.available_quantity, quantity, product.name)

            new_stock = self.products.decrement_if_available(product.id, quantity)
            if new_stock is None:
                current = self.products.current_quantity(product.id)
                raise InsufficientStock(product.id, current or 0, quantity, product.name)

            adjustment = self.withdrawals.create(
                {
                    "product_id": product.id,
                    "product_name": product.name,
                    "product_category": product.category.value,
                    "quantity": quantity,
                    "destination": MANUAL_ADJUSTMENT_DESTINATION,
                    "supervisor": MANUAL_ADJUSTMENT_SUPERVISOR,
                    "kind": WithdrawalKind.MANUAL_ADJUSTMENT,
                    "reason": (reason or "").strip() or None,
                },
                commit=False,
            )
            return {"adjustment": adjustment, "previous_stock": new_stock + quantity, "new_stock": new_stock}

        result = self._run("Remove stock", work)
        logger.info("Stock removed from product %s: %s -> %s", product_id, result["previous_stock"], result["new_stock"])
        return result

    # ===== pre-flight =====

    def validate_withdrawal(self, product_id: int, quantity: int) -> Dict[str, Any]:
        """Read-only availability check used by quantity pickers."""
        product = self.products.get(product_id)
        if not product:
            return {"valid": False, "available_stock": None, "message": "Product not found"}
        if quantity <= 0:
            return {"valid": False, "available_stock": product.available_quantity,
                    "message": "Quantity must be a positive integer"}
        if quantity > product.available_quantity:
            return {
                "valid": False,
                "available_stock": product.available_quantity,
                "message": f"Insufficient stock. Available: {product.available_quantity}",
            }
        return {"valid": True, "available_stock": product.available_quantity, "message": None}

    # ===== add materials (search or create) =====

    def add_materials(self, name: str, category: str, quantity: int, image_url: Optional[str] = None) -> Dict[str, Any]:
        """Restock a material by name, creating the product if it does not exist yet.

        Images pushed past the three-image limit are listed in ``dropped_images``
        so the caller can remove them from storage once the change is committed.
        """
        quantity = _check_quantity(quantity)
        name = (name or "").strip()
        if not name:
            raise ValidationFailure("Product name is required")

        def work():
            existing = self.products.get_by_name(name)
            if existing:
                dropped = []
                if image_url:
                    # New picture becomes the cover, older ones shift right and the oldest may fall off
                    wanted = [image_url] + [u for u in existing.image_urls if u != image_url]
                    existing.image_urls = wanted
                    existing.cover_image_index = 0
                    dropped = wanted[MAX_IMAGES:]
                new_stock = self.products.increment(existing.id, quantity)
                return {
                    "product": existing, "created": False, "dropped_images": dropped,
                    "previous_stock": new_stock - quantity, "new_stock": new_stock,
                }

            product = self.products.create(
                {
                    "name": name,
                    "category": category,
                    "available_quantity": quantity,
                    "image_urls": [image_url] if image_url else [],
                },
                commit=False,
            )
            return {
                "product": product, "created": True, "dropped_images": [],
                "previous_stock": 0, "new_stock": quantity,
            }

        result = self._run("Add materials", work)
        self.db.refresh(result["product"])
        logger.info(
            "Materials %s for '%s': %s -> %s",
            "created" if result["created"] else "restocked", name, result["previous_stock"], result["new_stock"],
        )
        return result
