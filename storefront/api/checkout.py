import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from storefront.api.deps import get_db
from storefront.core.errors import StorefrontError
from storefront.schemas import CheckoutRequest, CheckoutResponse, CartQuoteRequest, CartQuote
from storefront.services.checkout import place_order, quote_cart
from storefront.services.payments import StripeGateway, get_payment_gateway

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/checkout", response_model=CheckoutResponse)
def checkout(payload: CheckoutRequest, db: Session = Depends(get_db), gateway: StripeGateway = Depends(get_payment_gateway)):
    try:
        result = place_order(db, gateway, payload)
    except StorefrontError:
        raise
    except Exception as exc:
        logger.exception("Checkout error")
        return JSONResponse(status_code=500, content={"error": str(exc) or "An error occurred while processing checkout"})
    return CheckoutResponse(url=result.url, session_id=result.session_id, order_id=result.order_id)

@router.post("/cart/quote", response_model=CartQuote)
def cart_quote(payload: CartQuoteRequest, db: Session = Depends(get_db)):
    totals = quote_cart(db, payload.items)
    return CartQuote(subtotal=float(totals.subtotal), shipping=float(totals.shipping), total=float(totals.total))
