"""
Quantity adjustment for reorder products.

A product row only exists while its quantity is at least 1. Every change is a
single UPDATE using column arithmetic so two requests against the same
product never overwrite each other's read. Reaching zero deletes the product
and pulls it out of every list that references it.
"""
from typing import Optional

from loguru import logger
from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from .errors import InvalidAdjustmentError, NotFoundError
from .models import ReorderProduct, list_products

INCREASE = "increase"
DECREASE = "decrease"
SET = "set"
ADJUSTMENT_KINDS = (INCREASE, DECREASE, SET)

UPDATED = "updated"
DELETED = "deleted"


def remove_product(db: Session, product: ReorderProduct) -> None:
    """Delete a product and its membership in every list, in one transaction."""
    product_id = product.id
    db.execute(delete(list_products).where(list_products.c.product_id == product_id))
    db.delete(product)
    db.commit()
    logger.info("product {} removed from all lists and deleted", product_id)


def _update_quantity(db: Session, product: ReorderProduct, value, *criteria) -> bool:
    stmt = (
        update(ReorderProduct)
        .where(ReorderProduct.id == product.id, *criteria)
        .values(reorder_quantity=value)
        .execution_options(synchronize_session=False)
    )
    matched = db.execute(stmt).rowcount > 0
    db.commit()
    if matched:
        db.refresh(product)
    return matched


def adjust_quantity(db: Session, product: ReorderProduct, kind: str, quantity: Optional[int] = None) -> str:
    """Apply an increase/decrease/set adjustment; returns "updated" or "deleted"."""
    if kind == INCREASE:
        if not _update_quantity(db, product, ReorderProduct.reorder_quantity + 1):
            raise NotFoundError("product")
        action = UPDATED
    elif kind == DECREASE:
        # a product sitting at 1 does not match and falls through to deletion
        if _update_quantity(db, product, ReorderProduct.reorder_quantity - 1, ReorderProduct.reorder_quantity > 1):
            action = UPDATED
        else:
            remove_product(db, product)
            action = DELETED
    elif kind == SET:
        # JSON has one number type; 3.0 is the integer 3
        if isinstance(quantity, float) and quantity.is_integer():
            quantity = int(quantity)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise InvalidAdjustmentError("quantity must be a non-negative integer when type is 'set'")
        if quantity == 0:
            remove_product(db, product)
            action = DELETED
        elif _update_quantity(db, product, quantity):
            action = UPDATED
        else:
            raise NotFoundError("product")
    else:
        raise InvalidAdjustmentError(f"invalid quantity adjustment {kind!r}, expected one of {', '.join(ADJUSTMENT_KINDS)}")

    if action == UPDATED:
        logger.info("product {} {} -> quantity {}", product.id, kind, product.reorder_quantity)
    return action
