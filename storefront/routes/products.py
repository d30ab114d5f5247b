from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Role
from storefront.schemas.catalog import ProductIn, ProductOut
from storefront.schemas.message import Message
from storefront.services import catalog
from storefront.services.auth import require_roles

router = APIRouter(prefix="/api/products", tags=["products"])

# Sellers manage the catalog alongside admins
catalog_managers = require_roles(Role.ADMIN, Role.SELLER)


@router.get("", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    return catalog.list_products(db)


@router.get("/category/{category_id}", response_model=List[ProductOut])
def list_products_by_category(category_id: int, db: Session = Depends(get_db)):
    return catalog.list_products_by_category(db, category_id)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return catalog.get_product(db, product_id)


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(catalog_managers)])
def create_product(data: ProductIn, db: Session = Depends(get_db)):
    return catalog.create_product(db, data)


@router.put("/{product_id}", response_model=ProductOut, dependencies=[Depends(catalog_managers)])
def update_product(product_id: int, data: ProductIn, db: Session = Depends(get_db)):
    return catalog.update_product(db, product_id, data)


@router.delete("/{product_id}", response_model=Message, dependencies=[Depends(catalog_managers)])
def delete_product(product_id: int, db: Session = Depends(get_db)):
    catalog.delete_product(db, product_id)
    return {"message": "Product deleted successfully"}
