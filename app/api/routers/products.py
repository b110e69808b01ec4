# app/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import ProductNotFound
from app.domain.schemas import ProductCreate, ProductUpdate, ProductOut
from app.repos.product_repo import ProductRepo
from app.services.product_service import ProductService

router = APIRouter(tags=["products"])


def get_service(db: Session):
    return ProductService(ProductRepo(db))


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return get_service(db).create_product(payload)


@router.get("/", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    return get_service(db).list_products()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_product(product_id)
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.update_product(product_id, payload)
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{product_id}", response_model=ProductOut)
def remove_product(product_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.remove_product(product_id)
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
