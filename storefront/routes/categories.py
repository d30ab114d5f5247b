from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Role
from storefront.schemas.catalog import CategoryIn, CategoryOut
from storefront.schemas.message import Message
from storefront.services import catalog
from storefront.services.auth import require_roles

router = APIRouter(prefix="/api/categories", tags=["categories"])

admin_only = require_roles(Role.ADMIN)


@router.get("", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return catalog.list_categories(db)


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return catalog.get_category(db, category_id)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(admin_only)])
def create_category(data: CategoryIn, db: Session = Depends(get_db)):
    return catalog.create_category(db, data)


@router.put("/{category_id}", response_model=CategoryOut, dependencies=[Depends(admin_only)])
def update_category(category_id: int, data: CategoryIn, db: Session = Depends(get_db)):
    return catalog.update_category(db, category_id, data)


@router.delete("/{category_id}", response_model=Message, dependencies=[Depends(admin_only)])
def delete_category(category_id: int, db: Session = Depends(get_db)):
    catalog.delete_category(db, category_id)
    return {"message": "Category deleted successfully"}
