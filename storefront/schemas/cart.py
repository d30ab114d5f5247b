from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class AddToCartRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


class CartItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    product_name: str
    image_url: Optional[str] = None
    price: float
    quantity: int


class CartOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None  # None until the first item is added
    user_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[CartItemOut] = []
    total_price: float = 0
    total_items: int = 0
