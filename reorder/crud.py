from typing import List, Optional

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models
from .auth import TokenPair, TokenService, verify_password
from .errors import (
    DuplicateConstraintError,
    DuplicateEmailError,
    DuplicateNameError,
    UnauthorizedError,
    UserNotFoundError,
    ValidationError,
)
from .quantity import INCREASE, adjust_quantity, remove_product
from .utils import require_label, require_sku

# -------------------- Users / credentials --------------------


def get_user(db: Session, user_id: str) -> Optional[models.User]:
    return db.get(models.User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.scalars(select(models.User).where(models.User.email == email)).first()


def create_user(db: Session, email: str, password: str) -> models.User:
    if get_user_by_email(db, email):
        raise DuplicateEmailError()
    user = models.User(email=email, password=password)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # lost a race with a concurrent sign-up for the same email
        db.rollback()
        raise DuplicateEmailError() from e
    db.refresh(user)
    logger.info("user {} signed up", user.id)
    return user


def update_user(db: Session, user: models.User, email: str | None = None, password: str | None = None) -> models.User:
    if email is not None and email != user.email:
        if get_user_by_email(db, email):
            raise DuplicateEmailError()
        user.email = email
    if password is not None:
        user.password = password
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateEmailError() from e
    db.refresh(user)
    return user


def authenticate(db: Session, email: str, password: str) -> models.User:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("failed sign-in for {}", email)
        raise UnauthorizedError()
    logger.info("user {} signed in", user.id)
    return user


def refresh_tokens(db: Session, tokens: TokenService, refresh_token: str) -> TokenPair:
    user_id = tokens.verify_refresh(refresh_token)
    user = get_user(db, user_id)
    if not user:
        raise UserNotFoundError()
    return tokens.issue(user.id)


# -------------------- Reorder lists --------------------


def list_lists(db: Session, user_id: str) -> List[models.ReorderList]:
    stmt = (
        select(models.ReorderList)
        .where(models.ReorderList.user_id == user_id)
        .order_by(models.ReorderList.created_at, models.ReorderList.id)
    )
    return list(db.scalars(stmt).all())


def get_list(db: Session, list_id: str, user_id: str | None = None) -> Optional[models.ReorderList]:
    reorder_list = db.get(models.ReorderList, list_id)
    if reorder_list is None or (user_id is not None and reorder_list.user_id != user_id):
        return None
    return reorder_list


def _name_taken(db: Session, user_id: str, name: str) -> bool:
    stmt = select(models.ReorderList.id).where(
        models.ReorderList.user_id == user_id, models.ReorderList.name == name
    )
    return db.scalars(stmt).first() is not None


def _commit_list(db: Session, reorder_list: models.ReorderList, name: str) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateNameError(name) from e
    db.refresh(reorder_list)


def create_list(db: Session, user_id: str, name: str) -> models.ReorderList:
    name = require_label(name, "name")
    if _name_taken(db, user_id, name):
        raise DuplicateNameError(name)
    reorder_list = models.ReorderList(user_id=user_id, name=name)
    db.add(reorder_list)
    _commit_list(db, reorder_list, name)
    logger.info("list {} created for user {}", reorder_list.id, user_id)
    return reorder_list


def rename_list(db: Session, reorder_list: models.ReorderList, name: str) -> models.ReorderList:
    name = require_label(name, "name")
    if name == reorder_list.name:
        return reorder_list
    if _name_taken(db, reorder_list.user_id, name):
        raise DuplicateNameError(name)
    reorder_list.name = name
    _commit_list(db, reorder_list, name)
    logger.info("list {} renamed", reorder_list.id)
    return reorder_list


def delete_list(db: Session, reorder_list: models.ReorderList) -> None:
    # member products are kept; their list_id is cleared by the store
    list_id = reorder_list.id
    db.delete(reorder_list)
    db.commit()
    logger.info("list {} deleted", list_id)


def add_or_bump_product(
    db: Session, reorder_list: models.ReorderList, sku: str, name: str, quantity: int
) -> models.ReorderList:
    """Add `sku` to the list, or bump the existing entry by exactly one.

    For a SKU already in the list the supplied name and quantity are ignored.
    """
    sku = require_sku(sku)
    existing = next((p for p in reorder_list.products if p.sku == sku), None)

    if existing is not None:
        adjust_quantity(db, existing, INCREASE)
        logger.info("list {} bumped sku {}", reorder_list.id, sku)
    else:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError("quantity must be a positive integer")
        product = models.ReorderProduct(
            sku=sku,
            name=require_label(name, "name"),
            reorder_quantity=quantity,
            list_id=reorder_list.id,
        )
        reorder_list.products.append(product)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise DuplicateConstraintError(f"sku {sku!r} is already in this list") from e
        logger.info("list {} added sku {} x{}", reorder_list.id, sku, quantity)

    reorder_list.updated_at = func.now()
    db.commit()
    db.refresh(reorder_list)
    return reorder_list


# -------------------- Reorder products --------------------


def get_product(db: Session, product_id: str, user_id: str | None = None) -> Optional[models.ReorderProduct]:
    stmt = select(models.ReorderProduct).where(models.ReorderProduct.id == product_id)
    if user_id is not None:
        stmt = stmt.join(models.ReorderList, models.ReorderList.id == models.ReorderProduct.list_id).where(
            models.ReorderList.user_id == user_id
        )
    return db.scalars(stmt).first()


def delete_product(db: Session, product: models.ReorderProduct) -> None:
    remove_product(db, product)
