from typing import Optional

from sqlalchemy.orm import Session, joinedload

from storefront.models.cart import Cart, CartItem
from storefront.models.catalog import Product
from storefront.models.users import User
from storefront.schemas.cart import CartOut
from storefront.exceptions import AuthorizationError, NotFoundError, ValidationError
from storefront.utils.clock import utcnow
from storefront.utils.logger import get_logger

logger = get_logger("cart")


def get_cart(db: Session, user_id: int) -> Optional[Cart]:
    return (
        db.query(Cart)
        .options(joinedload(Cart.items).joinedload(CartItem.product))
        .filter(Cart.user_id == user_id)
        .first()
    )


def cart_view(db: Session, user: User, now=utcnow) -> CartOut:
    """Current cart, or an empty one when the user has never added anything."""
    cart = get_cart(db, user.id)
    if cart is None:
        return CartOut(user_id=user.id, created_at=now())
    return CartOut.model_validate(cart)


def _check_stock(product: Product, quantity: int) -> None:
    if product.stock < quantity:
        raise ValidationError(f"Only {product.stock} items available in stock",
                              details={"product_id": product.id, "available": product.stock})


def add_item(db: Session, user: User, product_id: int, quantity: int, now=utcnow) -> Cart:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    _check_stock(product, quantity)

    cart = get_cart(db, user.id)
    if cart is None:
        cart = Cart(user_id=user.id, created_at=now())
        db.add(cart)
        db.flush()

    existing = next((item for item in cart.items if item.product_id == product_id), None)
    if existing is not None:
        _check_stock(product, existing.quantity + quantity)
        existing.quantity += quantity
    else:
        cart.items.append(CartItem(product_id=product_id, quantity=quantity, price=product.price))

    cart.updated_at = now()
    db.commit()
    logger.info(f"Added product {product_id} x{quantity} to cart of user {user.id}")
    db.expire_all()
    return get_cart(db, user.id)


def _owned_item(db: Session, user: User, item_id: int) -> CartItem:
    item = db.get(CartItem, item_id)
    if item is None:
        raise NotFoundError("Cart item not found")
    if item.cart.user_id != user.id:
        raise AuthorizationError("You are not authorized to modify this cart item")
    return item


def update_item(db: Session, user: User, item_id: int, quantity: int, now=utcnow) -> Cart:
    item = _owned_item(db, user, item_id)
    product = db.get(Product, item.product_id)
    if product is None:
        raise NotFoundError("Product not found")
    _check_stock(product, quantity)

    item.quantity = quantity
    item.cart.updated_at = now()
    db.commit()
    db.expire_all()
    return get_cart(db, user.id)


def remove_item(db: Session, user: User, item_id: int, now=utcnow) -> Cart:
    item = _owned_item(db, user, item_id)
    cart = item.cart
    cart.items.remove(item)
    cart.updated_at = now()
    db.commit()
    logger.info(f"Removed cart item {item_id} for user {user.id}")
    db.expire_all()
    return get_cart(db, user.id)


def clear_cart(db: Session, user_id: int, now=utcnow) -> bool:
    """Empty the cart. Returns False when there is no cart or it is already empty."""
    cart = get_cart(db, user_id)
    if cart is None or not cart.items:
        return False
    cart.items.clear()
    cart.updated_at = now()
    db.commit()
    logger.info(f"Cart cleared for user {user_id}")
    return True
