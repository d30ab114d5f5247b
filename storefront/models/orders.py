import enum

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship

from storefront.database import Base
from storefront.utils.clock import utcnow


class OrderStatus(str, enum.Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    order_date = Column(DateTime, default=utcnow, nullable=False)
    total_price = Column(Numeric(18, 2, asdecimal=False), nullable=False)
    status = Column(Enum(OrderStatus, native_enum=False, length=20), default=OrderStatus.PENDING, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    # Shipping address is denormalized onto the order
    shipping_first_name = Column(String(100), nullable=False)
    shipping_last_name = Column(String(100), nullable=False)
    shipping_street = Column(String(200), nullable=False)
    shipping_city = Column(String(100), nullable=False)
    shipping_state = Column(String(100), nullable=False)
    shipping_zip_code = Column(String(20), nullable=False)
    shipping_country = Column(String(100), nullable=False)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItem.id")
    user = relationship("User")

    @property
    def shipping_address(self) -> dict:
        return {
            "first_name": self.shipping_first_name,
            "last_name": self.shipping_last_name,
            "street": self.shipping_street,
            "city": self.shipping_city,
            "state": self.shipping_state,
            "zip_code": self.shipping_zip_code,
            "country": self.shipping_country,
        }

    @property
    def customer_email(self) -> str:
        return self.user.email if self.user else ""

    def __repr__(self):
        return f"<Order {self.id} {self.status.value}>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    product_name = Column(String(200), nullable=False)
    product_image_url = Column(String(500), nullable=True)
    price = Column(Numeric(18, 2, asdecimal=False), nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")
