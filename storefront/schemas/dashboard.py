from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import List

from storefront.models.orders import OrderStatus


class RecentOrder(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_email: str
    order_date: datetime
    total_price: float
    status: OrderStatus


class LowStockProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    stock: int
    category_name: str


class DashboardStats(BaseModel):
    total_orders: int
    total_revenue: float
    total_products: int
    total_users: int
    recent_orders: List[RecentOrder]
    low_stock_products: List[LowStockProduct]
