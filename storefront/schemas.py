from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List
from storefront.db.models import OrderStatus

# --- Catalog ---

class ProductBase(BaseModel):
    slug: str
    name: str
    category: str
    description: str = ''
    long_description: str = ''
    price: Decimal = Field(ge=0, decimal_places=2)
    original_price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    badge: Optional[str] = None
    image_url: Optional[str] = None
    active: bool = True
NON_NULLABLE_PRODUCT_FIELDS = ('name', 'category', 'description', 'long_description', 'price', 'active')

class ProductCreate(ProductBase): pass
class ProductUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    long_description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    original_price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    badge: Optional[str] = None
    image_url: Optional[str] = None
    active: Optional[bool] = None

    @model_validator(mode='before')
    @classmethod
    def reject_null_required(cls, data):
        # these columns are NOT NULL; omit a field to leave it unchanged
        if isinstance(data, dict):
            nulled = [k for k in NON_NULLABLE_PRODUCT_FIELDS if k in data and data[k] is None]
            if nulled:
                raise ValueError(f"{', '.join(nulled)} cannot be null")
        return data
class ProductRead(ProductBase):
    id: int
    price: float
    original_price: Optional[float] = None
    rating: float = 0
    review_count: int = 0
    model_config = ConfigDict(from_attributes=True)

# --- Cart / checkout ---

class CheckoutItem(BaseModel):
    """One line of the shopper's cart as the browser submits it.

    Only ``id``, ``price`` and ``quantity`` feed the checkout; ``price`` is
    compared against the catalog and never charged.
    """
    id: int
    name: str = ''
    price: Decimal
    quantity: int
    image_url: Optional[str] = Field(default=None, alias='imageUrl')
    model_config = ConfigDict(populate_by_name=True)

class CheckoutRequest(BaseModel):
    items: Optional[List[CheckoutItem]] = None
    email: Optional[str] = None

class CheckoutResponse(BaseModel):
    url: str
    session_id: str = Field(serialization_alias='sessionId')
    order_id: int = Field(serialization_alias='orderId')

class CartQuoteRequest(BaseModel):
    items: Optional[List[CheckoutItem]] = None

class CartQuote(BaseModel):
    subtotal: float
    shipping: float
    total: float

# --- Orders ---

class ProductSummary(BaseModel):
    id: int
    name: str
    image_url: Optional[str] = None
    slug: str
    model_config = ConfigDict(from_attributes=True)

class OrderItemRead(BaseModel):
    id: int
    product_id: int
    quantity: int
    price: float
    product: Optional[ProductSummary] = None
    model_config = ConfigDict(from_attributes=True)

class OrderRead(BaseModel):
    id: int
    stripe_session_id: str
    stripe_payment_id: Optional[str] = None
    email: str
    status: OrderStatus
    subtotal: float
    shipping: float
    total: float
    shipping_address: dict = {}
    billing_name: str
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemRead] = []
    model_config = ConfigDict(from_attributes=True)

class OrderEnvelope(BaseModel):
    order: OrderRead

class OrderStatusUpdate(BaseModel):
    id: int
    status: OrderStatus

class RecentOrder(BaseModel):
    id: int
    email: str
    total: float
    status: str
    item_count: int
    created_at: datetime

class AdminStats(BaseModel):
    total_products: int
    total_orders: int
    total_revenue: float
    monthly_growth: float
    recent_orders: List[RecentOrder] = []
