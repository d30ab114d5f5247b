from typing import List, Optional

from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import SQLAlchemyError

from storefront.models.catalog import Product
from storefront.models.orders import Order, OrderItem, OrderStatus
from storefront.models.users import User, Role
from storefront.schemas.orders import ShippingAddress
from storefront.services import cart as cart_service
from storefront.exceptions import AuthorizationError, NotFoundError, ValidationError, handle_database_error
from storefront.utils.clock import utcnow
from storefront.utils.logger import get_logger

logger = get_logger("orders")


def _orders(db: Session):
    return db.query(Order).options(joinedload(Order.items))


def list_user_orders(db: Session, user_id: int) -> List[Order]:
    return _orders(db).filter(Order.user_id == user_id).order_by(Order.order_date.desc(), Order.id.desc()).all()


def list_all_orders(db: Session, status: Optional[OrderStatus] = None) -> List[Order]:
    query = _orders(db)
    if status is not None:
        query = query.filter(Order.status == status)
    return query.order_by(Order.order_date.desc(), Order.id.desc()).all()


def get_order(db: Session, order_id: int) -> Order:
    order = _orders(db).filter(Order.id == order_id).first()
    if order is None:
        raise NotFoundError("Order not found")
    return order


def get_order_for(db: Session, user: User, order_id: int) -> Order:
    """Order visible to ``user``: their own, or any order for admins."""
    order = get_order(db, order_id)
    if order.user_id != user.id and user.role != Role.ADMIN:
        raise AuthorizationError("You are not authorized to view this order")
    return order


def create_order(db: Session, user: User, address: ShippingAddress, now=utcnow) -> Order:
    """
    Turn the user's cart into an order

    Prices are the ones captured when items entered the cart. Stock is
    decremented and the cart emptied in the same commit.

    Raises:
        ValidationError: Empty cart, vanished product or insufficient stock
    """
    cart = cart_service.get_cart(db, user.id)
    if cart is None or not cart.items:
        raise ValidationError("Cart is empty")

    products = {}
    for item in cart.items:
        product = db.get(Product, item.product_id)
        if product is None:
            raise ValidationError(f"Product {item.product_id} not found")
        if product.stock < item.quantity:
            raise ValidationError(f"Insufficient stock for {product.name}. Available: {product.stock}",
                                  details={"product_id": product.id, "available": product.stock})
        products[item.product_id] = product

    order = Order(
        user_id=user.id,
        order_date=now(),
        status=OrderStatus.PENDING,
        shipping_first_name=address.first_name,
        shipping_last_name=address.last_name,
        shipping_street=address.street,
        shipping_city=address.city,
        shipping_state=address.state,
        shipping_zip_code=address.zip_code,
        shipping_country=address.country,
    )

    total = 0.0
    for item in cart.items:
        product = products[item.product_id]
        order.items.append(OrderItem(
            product_id=product.id,
            product_name=product.name,
            product_image_url=product.image_url,
            price=item.price,
            quantity=item.quantity,
        ))
        total += item.price * item.quantity
        product.stock -= item.quantity
    order.total_price = round(total, 2)

    try:
        db.add(order)
        cart.items.clear()
        cart.updated_at = now()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "create order")

    logger.info(f"Order {order.id} created for user {user.id}: total {order.total_price}")
    return get_order(db, order.id)


def update_status(db: Session, order_id: int, status: OrderStatus, now=utcnow) -> Order:
    order = get_order(db, order_id)
    order.status = status
    order.updated_at = now()
    db.commit()
    db.refresh(order)
    logger.info(f"Order {order_id} status changed to {status.value}")
    return order
