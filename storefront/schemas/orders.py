from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from storefront.models.orders import OrderStatus


class ShippingAddress(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    street: str = Field(min_length=1, max_length=200)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    zip_code: str = Field(min_length=1, max_length=20)
    country: str = Field(min_length=1, max_length=100)


class CreateOrderRequest(BaseModel):
    shipping_address: ShippingAddress


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    product_name: str
    product_image_url: Optional[str] = None
    price: float
    quantity: int


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    order_date: datetime
    total_price: float
    status: OrderStatus
    shipping_address: ShippingAddress
    items: List[OrderItemOut]
    updated_at: Optional[datetime] = None
