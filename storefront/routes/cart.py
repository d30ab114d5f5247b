from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.exceptions import NotFoundError
from storefront.models.users import User
from storefront.schemas.cart import AddToCartRequest, CartOut, UpdateCartItemRequest
from storefront.schemas.message import Message
from storefront.services import cart as cart_service
from storefront.services.auth import get_current_user
from storefront.utils.clock import Clock, get_clock

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: Clock = Depends(get_clock),
):
    return cart_service.cart_view(db, current_user, now)


@router.post("/items", response_model=CartOut)
def add_to_cart(
    data: AddToCartRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: Clock = Depends(get_clock),
):
    return cart_service.add_item(db, current_user, data.product_id, data.quantity, now)


@router.put("/items/{item_id}", response_model=CartOut)
def update_cart_item(
    item_id: int,
    data: UpdateCartItemRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: Clock = Depends(get_clock),
):
    return cart_service.update_item(db, current_user, item_id, data.quantity, now)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_cart_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: Clock = Depends(get_clock),
):
    return cart_service.remove_item(db, current_user, item_id, now)


@router.delete("", response_model=Message)
def clear_cart(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: Clock = Depends(get_clock),
):
    if cart_service.get_cart(db, current_user.id) is None:
        raise NotFoundError("Cart not found")
    cart_service.clear_cart(db, current_user.id, now)
    return {"message": "Cart cleared successfully"}
