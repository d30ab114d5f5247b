from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Role, User
from storefront.schemas.message import Message
from storefront.schemas.users import AdminUserUpdate, UserOut
from storefront.services import admin_users
from storefront.services.auth import require_roles

router = APIRouter(prefix="/api/admin/users", tags=["admin"])

admin_only = require_roles(Role.ADMIN)


@router.get("", response_model=List[UserOut], dependencies=[Depends(admin_only)])
def list_users(db: Session = Depends(get_db)):
    return admin_users.list_users(db)


@router.get("/{user_id}", response_model=UserOut, dependencies=[Depends(admin_only)])
def get_user(user_id: int, db: Session = Depends(get_db)):
    return admin_users.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserOut, dependencies=[Depends(admin_only)])
def update_user(user_id: int, data: AdminUserUpdate, db: Session = Depends(get_db)):
    return admin_users.update_user(db, user_id, data)


@router.delete("/{user_id}", response_model=Message)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(admin_only),
):
    admin_users.delete_user(db, current_admin, user_id)
    return {"message": "User deleted successfully"}
