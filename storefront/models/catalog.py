from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from storefront.database import Base
from storefront.utils.clock import utcnow


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)

    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category {self.name}>"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    price = Column(Numeric(18, 2, asdecimal=False), nullable=False)
    stock = Column(Integer, default=0, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    image_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    category = relationship("Category", back_populates="products")

    @property
    def category_name(self) -> str:
        return self.category.name if self.category else ""

    def __repr__(self):
        return f"<Product {self.name} stock={self.stock}>"
