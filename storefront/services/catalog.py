from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from storefront.models.cart import CartItem
from storefront.models.catalog import Category, Product
from storefront.models.orders import OrderItem
from storefront.schemas.catalog import CategoryIn, ProductIn
from storefront.exceptions import NotFoundError, ValidationError
from storefront.utils.logger import get_logger

logger = get_logger("catalog")


# Categories

def list_categories(db: Session) -> List[Category]:
    return db.query(Category).order_by(Category.id).all()


def get_category(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def _ensure_unique_name(db: Session, name: str, exclude_id: int = None) -> None:
    query = db.query(Category).filter(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first():
        raise ValidationError("Category with this name already exists")


def create_category(db: Session, data: CategoryIn) -> Category:
    _ensure_unique_name(db, data.name)
    category = Category(name=data.name, description=data.description)
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info(f"Category created: {category.name}")
    return category


def update_category(db: Session, category_id: int, data: CategoryIn) -> Category:
    category = get_category(db, category_id)
    _ensure_unique_name(db, data.name, exclude_id=category_id)
    category.name = data.name
    category.description = data.description
    db.commit()
    db.refresh(category)
    logger.info(f"Category updated: {category.id}")
    return category


def delete_category(db: Session, category_id: int) -> None:
    category = get_category(db, category_id)
    if db.query(Product).filter(Product.category_id == category_id).first():
        raise ValidationError("Cannot delete category with existing products")
    db.delete(category)
    db.commit()
    logger.info(f"Category deleted: {category_id}")


# Products

def _products(db: Session):
    return db.query(Product).options(joinedload(Product.category))


def list_products(db: Session) -> List[Product]:
    return _products(db).order_by(Product.id).all()


def list_products_by_category(db: Session, category_id: int) -> List[Product]:
    get_category(db, category_id)
    return _products(db).filter(Product.category_id == category_id).order_by(Product.id).all()


def get_product(db: Session, product_id: int) -> Product:
    product = _products(db).filter(Product.id == product_id).first()
    if product is None:
        raise NotFoundError("Product not found")
    return product


def _check_category(db: Session, category_id: int) -> None:
    if db.get(Category, category_id) is None:
        raise ValidationError("Invalid category ID")


def create_product(db: Session, data: ProductIn) -> Product:
    _check_category(db, data.category_id)
    product = Product(**data.model_dump())
    db.add(product)
    db.commit()
    logger.info(f"Product created: {product.name}")
    return get_product(db, product.id)


def update_product(db: Session, product_id: int, data: ProductIn) -> Product:
    product = get_product(db, product_id)
    _check_category(db, data.category_id)
    for field, value in data.model_dump().items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    logger.info(f"Product updated: {product.id}")
    return product


def delete_product(db: Session, product_id: int) -> None:
    """Delete a product, dropping it from carts. Past orders keep their snapshot."""
    product = get_product(db, product_id)
    db.query(CartItem).filter(CartItem.product_id == product_id).delete(synchronize_session=False)
    db.query(OrderItem).filter(OrderItem.product_id == product_id).update(
        {OrderItem.product_id: None}, synchronize_session=False)
    db.delete(product)
    db.commit()
    logger.info(f"Product deleted: {product_id}")
