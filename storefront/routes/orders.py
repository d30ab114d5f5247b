from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.orders import OrderStatus
from storefront.models.users import Role, User
from storefront.schemas.orders import CreateOrderRequest, OrderOut, UpdateOrderStatusRequest
from storefront.services import orders as order_service
from storefront.services.auth import get_current_user, require_roles
from storefront.utils.clock import Clock, get_clock

router = APIRouter(prefix="/api/orders", tags=["orders"])

admin_only = require_roles(Role.ADMIN)


@router.get("", response_model=List[OrderOut])
def list_my_orders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return order_service.list_user_orders(db, current_user.id)


@router.get("/admin", response_model=List[OrderOut], dependencies=[Depends(admin_only)])
def list_all_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    return order_service.list_all_orders(db, status_filter)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return order_service.get_order_for(db, current_user, order_id)


@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(
    data: CreateOrderRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    now: Clock = Depends(get_clock),
):
    return order_service.create_order(db, current_user, data.shipping_address, now)


@router.put("/{order_id}/status", response_model=OrderOut, dependencies=[Depends(admin_only)])
def update_order_status(
    order_id: int,
    data: UpdateOrderStatusRequest,
    db: Session = Depends(get_db),
    now: Clock = Depends(get_clock),
):
    return order_service.update_status(db, order_id, data.status, now)
