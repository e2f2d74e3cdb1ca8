from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Credentials(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class TokenPairRead(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class ListCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class ProductAdd(BaseModel):
    sku: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    quantity: int


class QuantityAdjustment(BaseModel):
    # checked by quantity.adjust_quantity, which reports InvalidAdjustment
    type: str
    quantity: Optional[Union[int, float]] = None


class ProductRead(BaseModel):
    id: str
    sku: str
    name: str
    reorder_quantity: int
    list_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ListRead(BaseModel):
    id: str
    user_id: str
    name: str
    created_at: datetime
    updated_at: datetime
    products: List[ProductRead] = []

    model_config = ConfigDict(from_attributes=True)


class AdjustmentRead(BaseModel):
    action: str
    product: Optional[ProductRead] = None
