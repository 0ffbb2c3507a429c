import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from storefront.api.deps import get_db
from storefront.core.errors import StorefrontError
from storefront.schemas import OrderEnvelope, OrderRead
from storefront.services.orders import get_order_by_session

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/orders/session/{session_id}", response_model=OrderEnvelope)
def order_by_session(session_id: str, db: Session = Depends(get_db)):
    """Order confirmation lookup after the Stripe redirect."""
    try:
        order = get_order_by_session(db, session_id)
    except StorefrontError:
        raise
    except Exception:
        logger.exception("Error fetching order by session %s", session_id)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch order"})
    return OrderEnvelope(order=OrderRead.model_validate(order))
