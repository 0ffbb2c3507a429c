"""Order persistence, lookup and status changes."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from storefront.core.config import settings
from storefront.core.errors import OrderNotFound
from storefront.db.models import Order, OrderItem, OrderStatus, Product
from storefront.services.catalog import ValidatedLine
from storefront.services.pricing import Totals

logger = logging.getLogger(__name__)


def create_pending_order(
    db: Session,
    session_id: str,
    email: str,
    lines: list[ValidatedLine],
    totals: Totals,
) -> Order:
    """Persist a pending order and its items in one commit.

    The items are attached through the relationship so the order row and
    its children are flushed together; a failure rolls both back.
    """
    order = Order(
        stripe_session_id=session_id,
        email=email,
        status=OrderStatus.PENDING.value,
        subtotal=totals.subtotal,
        shipping=totals.shipping,
        total=totals.total,
        shipping_address={},
        billing_name=settings.BILLING_NAME,
        items=[
            OrderItem(product_id=line.product.id, quantity=line.quantity, price=line.unit_price)
            for line in lines
        ],
    )
    try:
        db.add(order); db.commit(); db.refresh(order)
    except Exception:
        db.rollback()
        # the Stripe session already exists and is left without a local order
        logger.exception("Failed to persist order for Stripe session %s", session_id)
        raise
    logger.info("Created pending order %s for session %s (total %s)", order.id, session_id, order.total)
    return order


def _with_items():
    return selectinload(Order.items).selectinload(OrderItem.product)


def get_order(db: Session, order_id: int) -> Order:
    order = db.execute(select(Order).where(Order.id == order_id).options(_with_items())).scalar_one_or_none()
    if order is None:
        raise OrderNotFound()
    return order


def get_order_by_session(db: Session, session_id: str) -> Order:
    order = db.execute(
        select(Order).where(Order.stripe_session_id == session_id).options(_with_items())
    ).scalar_one_or_none()
    if order is None:
        raise OrderNotFound()
    return order


def list_orders(db: Session, status: OrderStatus | None = None, limit: int = 100, offset: int = 0) -> list[Order]:
    stmt = select(Order).options(_with_items()).order_by(Order.created_at.desc(), Order.id.desc())
    if status is not None:
        stmt = stmt.where(Order.status == status.value)
    return list(db.execute(stmt.offset(offset).limit(limit)).scalars().all())


def set_order_status(db: Session, order_id: int, status: OrderStatus) -> Order:
    """Set any status from any status; transitions are not checked."""
    order = db.get(Order, order_id)
    if order is None:
        raise OrderNotFound()
    previous = order.status
    order.status = status.value
    db.add(order); db.commit()
    logger.info("Order %s status %s -> %s", order.id, previous, order.status)
    return get_order(db, order_id)


# --- Stripe reconciliation ---------------------------------------------------

def _field(obj: Mapping[str, Any] | None, key: str) -> Any:
    if obj is None:
        return None
    try:
        return obj[key]
    except (KeyError, TypeError):
        return None


def _shipping_address(session: Mapping[str, Any]) -> dict:
    details = _field(session, "shipping_details") or _field(_field(session, "collected_information"), "shipping_details")
    address = _field(details, "address")
    if not address:
        return {}
    return {
        key: _field(address, key)
        for key in ("line1", "line2", "city", "state", "postal_code", "country")
    }


def mark_session_paid(db: Session, session: Mapping[str, Any]) -> Order | None:
    session_id = _field(session, "id")
    order = db.execute(select(Order).where(Order.stripe_session_id == session_id)).scalar_one_or_none()
    if order is None:
        logger.warning("Order not found for session %s", session_id)
        return None

    intent = _field(session, "payment_intent")
    order.status = OrderStatus.PAID.value
    order.stripe_payment_id = intent if isinstance(intent, str) or intent is None else _field(intent, "id")
    order.email = _field(session, "customer_email") or order.email
    order.shipping_address = _shipping_address(session)
    db.add(order); db.commit()
    logger.info("Order %s marked as paid", order.id)
    return order


def cancel_expired_session(db: Session, session: Mapping[str, Any]) -> Order | None:
    session_id = _field(session, "id")
    order = db.execute(select(Order).where(Order.stripe_session_id == session_id)).scalar_one_or_none()
    if order is None or order.status != OrderStatus.PENDING.value:
        return order
    order.status = OrderStatus.CANCELLED.value
    db.add(order); db.commit()
    logger.info("Order %s cancelled due to expired session", order.id)
    return order


# --- Dashboard -----------------------------------------------------------------

def _month_start(year: int, month: int) -> datetime:
    while month < 1:
        month += 12; year -= 1
    return datetime(year, month, 1, tzinfo=timezone.utc)


def dashboard_stats(db: Session, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    current_month = _month_start(now.year, now.month)
    last_month = _month_start(now.year, now.month - 1)

    total_products = db.scalar(select(func.count(Product.id))) or 0
    total_orders = db.scalar(select(func.count(Order.id))) or 0
    revenue = db.scalar(select(func.sum(Order.total))) or Decimal("0")

    this_month_orders = db.scalar(select(func.count(Order.id)).where(Order.created_at >= current_month)) or 0
    last_month_orders = db.scalar(
        select(func.count(Order.id)).where(Order.created_at >= last_month, Order.created_at < current_month)
    ) or 0
    growth = 0.0 if last_month_orders == 0 else round((this_month_orders - last_month_orders) / last_month_orders * 100, 1)

    recent = db.execute(
        select(Order).options(selectinload(Order.items)).order_by(Order.created_at.desc(), Order.id.desc()).limit(5)
    ).scalars().all()

    return {
        "total_products": total_products,
        "total_orders": total_orders,
        "total_revenue": float(revenue),
        "monthly_growth": growth,
        "recent_orders": [
            {
                "id": o.id,
                "email": o.email,
                "total": float(o.total),
                "status": o.status,
                "item_count": len(o.items),
                "created_at": o.created_at,
            }
            for o in recent
        ],
    }
