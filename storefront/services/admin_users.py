from typing import List

from sqlalchemy.orm import Session

from storefront.models.cart import Cart
from storefront.models.orders import Order
from storefront.models.users import User
from storefront.repositories.otp import OTPRepository
from storefront.repositories.users import UserDirectory
from storefront.schemas.users import AdminUserUpdate
from storefront.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.utils.logger import get_logger

logger = get_logger("admin_users")


def list_users(db: Session) -> List[User]:
    return UserDirectory(db).list()


def get_user(db: Session, user_id: int) -> User:
    user = UserDirectory(db).get(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def update_user(db: Session, user_id: int, data: AdminUserUpdate) -> User:
    directory = UserDirectory(db)
    user = get_user(db, user_id)
    changes = data.model_dump(exclude_unset=True)
    if "display_name" in changes and changes["display_name"] is None:
        raise ValidationError("Display name cannot be empty")

    role = changes.pop("role", None)
    if role is not None:
        directory.assign_role(user, role)

    for field, value in changes.items():
        # Only the phone number may be cleared
        if value is None and field != "phone_number":
            continue
        setattr(user, field, value)

    logger.info(f"User {user.email} updated by admin: {sorted(data.model_dump(exclude_unset=True))}")
    return directory.update(user)


def delete_user(db: Session, acting_admin: User, user_id: int) -> None:
    """
    Remove an account together with its cart and OTP history

    Raises:
        ConflictError: Deleting yourself, or an account that has orders
    """
    user = get_user(db, user_id)
    if user.id == acting_admin.id:
        raise ConflictError("You cannot delete your own account")
    if db.query(Order).filter(Order.user_id == user.id).first():
        raise ConflictError("Cannot delete a user with existing orders")

    email = user.email
    cart = db.query(Cart).filter(Cart.user_id == user.id).first()
    if cart is not None:
        db.delete(cart)
    OTPRepository(db).delete_for_email(email)
    UserDirectory(db).delete(user)
    logger.info(f"User {email} deleted by {acting_admin.email}")
