from typing import List

from fastapi import APIRouter, Depends, FastAPI
from loguru import logger
from sqlalchemy.orm import Session

from . import crud, models, schemas
from .auth import TokenService, get_token_service
from .config import get_settings
from .db import Base, engine, get_db
from .errors import NotFoundError, install_error_handlers
from .gate import require_user
from .log import configure_logging
from .quantity import DELETED, adjust_quantity

# Missing secrets raise ConfigError here, before the app is built
settings = get_settings()
configure_logging(settings.log_level)

# Create tables if not existing. In production, use Alembic.
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Reorder List Service")
install_error_handlers(app)


@app.get("/health")
async def health():
    return {"status": "ok"}


# -------------------- Auth --------------------

auth_router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(pair) -> schemas.TokenPairRead:
    return schemas.TokenPairRead(access_token=pair.access_token, refresh_token=pair.refresh_token)


@auth_router.post("/signup", response_model=schemas.TokenPairRead, status_code=201)
def signup(
    payload: schemas.Credentials,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    user = crud.create_user(db, payload.email, payload.password)
    return _token_response(tokens.issue(user.id))


@auth_router.post("/signin", response_model=schemas.TokenPairRead)
def signin(
    payload: schemas.Credentials,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    user = crud.authenticate(db, payload.email, payload.password)
    return _token_response(tokens.issue(user.id))


@auth_router.post("/refresh", response_model=schemas.TokenPairRead)
def refresh(
    payload: schemas.RefreshRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    return _token_response(crud.refresh_tokens(db, tokens, payload.refresh_token))


# -------------------- Reorder lists and products --------------------

# Every route below sits behind the access gate
reorder_router = APIRouter(prefix="/reorder", tags=["reorder"], dependencies=[Depends(require_user)])


def _owned_list(db: Session, list_id: str, user: models.User) -> models.ReorderList:
    reorder_list = crud.get_list(db, list_id, user_id=user.id)
    if not reorder_list:
        raise NotFoundError("list")
    return reorder_list


def _owned_product(db: Session, product_id: str, user: models.User) -> models.ReorderProduct:
    product = crud.get_product(db, product_id, user_id=user.id)
    if not product:
        raise NotFoundError("product")
    return product


@reorder_router.post("/list", response_model=schemas.ListRead, status_code=201)
def create_list(payload: schemas.ListCreate, db: Session = Depends(get_db), user: models.User = Depends(require_user)):
    return crud.create_list(db, user.id, payload.name)


@reorder_router.get("/list", response_model=List[schemas.ListRead])
def get_lists(db: Session = Depends(get_db), user: models.User = Depends(require_user)):
    return crud.list_lists(db, user.id)


@reorder_router.get("/list/{list_id}", response_model=schemas.ListRead)
def get_list(list_id: str, db: Session = Depends(get_db), user: models.User = Depends(require_user)):
    return _owned_list(db, list_id, user)


@reorder_router.patch("/list/{list_id}", response_model=schemas.ListRead)
def rename_list(
    list_id: str,
    payload: schemas.ListCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(require_user),
):
    return crud.rename_list(db, _owned_list(db, list_id, user), payload.name)


@reorder_router.delete("/list/{list_id}")
def delete_list(list_id: str, db: Session = Depends(get_db), user: models.User = Depends(require_user)):
    crud.delete_list(db, _owned_list(db, list_id, user))
    return {"deleted": list_id}


@reorder_router.post("/product/{list_id}", response_model=schemas.ListRead)
def add_product(
    list_id: str,
    payload: schemas.ProductAdd,
    db: Session = Depends(get_db),
    user: models.User = Depends(require_user),
):
    reorder_list = _owned_list(db, list_id, user)
    return crud.add_or_bump_product(db, reorder_list, payload.sku, payload.name, payload.quantity)


@reorder_router.patch("/product/{product_id}", response_model=schemas.AdjustmentRead)
def adjust_product(
    product_id: str,
    payload: schemas.QuantityAdjustment,
    db: Session = Depends(get_db),
    user: models.User = Depends(require_user),
):
    product = _owned_product(db, product_id, user)
    action = adjust_quantity(db, product, payload.type, payload.quantity)
    if action == DELETED:
        return schemas.AdjustmentRead(action=action)
    return schemas.AdjustmentRead(action=action, product=schemas.ProductRead.model_validate(product))


@reorder_router.delete("/product/{product_id}")
def delete_product(product_id: str, db: Session = Depends(get_db), user: models.User = Depends(require_user)):
    crud.delete_product(db, _owned_product(db, product_id, user))
    return {"deleted": product_id}


app.include_router(auth_router)
app.include_router(reorder_router)

logger.info("reorder service ready")
