# backend/services/errors.py
"""Domain errors raised by the accessors and the stock engine.

The HTTP layer maps each class to a status code; services never raise
HTTPException themselves.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class StockError(Exception):
    """Base class for every domain error."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFound(StockError):
    """Referenced product or withdrawal does not exist."""

    def __init__(self, resource: str, resource_id):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} {resource_id} not found")


class InsufficientStock(StockError):
    """Requested quantity exceeds the available quantity."""

    def __init__(self, product_id, available: int, requested: int, product_name: str = None):
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        label = f"'{product_name}'" if product_name else f"product {product_id}"
        super().__init__(
            f"Insufficient stock for {label}: available {available}, requested {requested}"
        )


class StoreFailure(StockError):
    """The database rejected a read or a write."""


class ValidationFailure(StockError):
    """A required field is missing or invalid."""


@contextmanager
def store_errors(db: Session, action: str):
    """Roll back and re-raise any database error as StoreFailure."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Store failure while trying to %s", action)
        raise StoreFailure(f"Failed to {action}") from e
