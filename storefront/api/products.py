from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select
from storefront.api.deps import get_db
from storefront.db.models import Product
from storefront.schemas import ProductRead

router = APIRouter()

@router.get('', response_model=List[ProductRead])
def list_products(db: Session = Depends(get_db), q: Optional[str] = None, category: Optional[str] = None, limit: int = 50, offset: int = 0):
    stmt = select(Product).where(Product.active.is_(True))
    if q:
        stmt = stmt.where(Product.name.ilike(f"%{q.lower()}%"))
    if category: stmt = stmt.where(Product.category == category)
    stmt = stmt.order_by(Product.id).offset(offset).limit(limit)
    return db.execute(stmt).scalars().all()

@router.get('/{product_id}', response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    if product_id < 1: raise HTTPException(status_code=400, detail='Invalid product ID')
    obj = db.get(Product, product_id)
    if not obj: raise HTTPException(status_code=404, detail='Product not found')
    return obj
