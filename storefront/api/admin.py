import logging
from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from storefront.api.deps import get_db
from storefront.core.auth import require_admin
from storefront.core.errors import OrderNotFound
from storefront.db.models import Product, OrderStatus
from storefront.schemas import ProductCreate, ProductUpdate, ProductRead, OrderRead, OrderStatusUpdate, AdminStats
from storefront.services import orders as order_service

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])

# --- Products ---

@router.get('/products', response_model=List[ProductRead])
def list_all_products(q: Optional[str] = None, category: Optional[str] = None, limit: int = 100, offset: int = 0, db: Session = Depends(get_db)):
    # includes inactive products
    stmt = select(Product)
    if q:
        stmt = stmt.where(Product.name.ilike(f"%{q.lower()}%"))
    if category: stmt = stmt.where(Product.category == category)
    stmt = stmt.order_by(Product.created_at.desc(), Product.id.desc()).offset(offset).limit(limit)
    return db.execute(stmt).scalars().all()

@router.get('/products/{product_id}', response_model=ProductRead)
def get_any_product(product_id: int, db: Session = Depends(get_db)):
    obj = db.get(Product, product_id)
    if not obj: raise HTTPException(status_code=404, detail='Product not found')
    return obj

@router.post('/products', response_model=ProductRead, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    if db.query(Product).filter(Product.slug == payload.slug).first():
        raise HTTPException(status_code=409, detail='Slug already exists')
    obj = Product(**payload.model_dump())
    db.add(obj); db.commit(); db.refresh(obj)
    return obj

@router.patch('/products/{product_id}', response_model=ProductRead)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    obj = db.get(Product, product_id)
    if not obj: raise HTTPException(status_code=404, detail='Product not found')
    changes = payload.model_dump(exclude_unset=True)
    for k, v in changes.items(): setattr(obj, k, v)
    db.add(obj); db.commit(); db.refresh(obj)
    if 'price' in changes or 'active' in changes:
        logger.info("Product %s updated: price=%s active=%s", obj.id, obj.price, obj.active)
    return obj

# --- Orders ---

@router.get('/orders', response_model=List[OrderRead])
def list_orders(status: Optional[OrderStatus] = None, limit: int = 100, offset: int = 0, db: Session = Depends(get_db)):
    return order_service.list_orders(db, status=status, limit=limit, offset=offset)

@router.get('/orders/{order_id}', response_model=OrderRead)
def get_order(order_id: int, db: Session = Depends(get_db)):
    try:
        return order_service.get_order(db, order_id)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail='Order not found')

@router.put('/orders', response_model=OrderRead)
def update_order_status(payload: OrderStatusUpdate, db: Session = Depends(get_db)):
    try:
        return order_service.set_order_status(db, payload.id, payload.status)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail='Order not found')

# --- Dashboard ---

@router.get('/stats', response_model=AdminStats)
def stats(db: Session = Depends(get_db)):
    return order_service.dashboard_stats(db)
