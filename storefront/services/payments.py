"""Stripe hosted checkout.

``build_session_params`` describes the purchase; ``StripeGateway`` is the only
code that talks to the Stripe API. Routes receive the gateway through the
``get_payment_gateway`` dependency.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import stripe

from storefront.core.config import settings
from storefront.services.catalog import ValidatedLine
from storefront.services.pricing import Totals, to_minor_units

logger = logging.getLogger(__name__)

DELIVERY_ESTIMATE = {
    "minimum": {"unit": "business_day", "value": 5},
    "maximum": {"unit": "business_day", "value": 10},
}


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str


def build_session_params(lines: list[ValidatedLine], totals: Totals, email: str) -> dict[str, Any]:
    currency = settings.CURRENCY
    return {
        "payment_method_types": ["card"],
        "mode": "payment",
        "customer_email": email,
        "line_items": [
            {
                "price_data": {
                    "currency": currency,
                    "product_data": {
                        "name": line.product.name,
                        "images": [line.image_url] if line.image_url else [],
                        "metadata": {"productId": str(line.product.id)},
                    },
                    "unit_amount": to_minor_units(line.unit_price),
                },
                "quantity": line.quantity,
            }
            for line in lines
        ],
        "shipping_options": [
            {
                "shipping_rate_data": {
                    "type": "fixed_amount",
                    "fixed_amount": {"amount": to_minor_units(totals.shipping), "currency": currency},
                    "display_name": "Free Shipping" if totals.shipping == 0 else "Standard Shipping",
                    "delivery_estimate": DELIVERY_ESTIMATE,
                },
            }
        ],
        # Stripe substitutes {CHECKOUT_SESSION_ID} on redirect
        "success_url": f"{settings.SITE_URL}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{settings.SITE_URL}/cart",
        "billing_address_collection": "required",
        "shipping_address_collection": {"allowed_countries": list(settings.SHIPPING_COUNTRIES)},
    }


class StripeGateway:

    def __init__(self, api_key: str, webhook_secret: str) -> None:
        self._api_key = api_key
        self._webhook_secret = webhook_secret

    def create_checkout_session(self, params: dict[str, Any]) -> CheckoutSession:
        session = stripe.checkout.Session.create(api_key=self._api_key, **params)
        logger.info("Created Stripe checkout session %s", session.id)
        return CheckoutSession(id=session.id, url=session.url)

    def construct_event(self, payload: bytes, signature: str) -> Any:
        """Verify a webhook delivery and return the parsed event.

        Raises ``ValueError`` for an unparsable body and
        ``stripe.SignatureVerificationError`` for a bad signature.
        """
        return stripe.Webhook.construct_event(payload, signature, self._webhook_secret)


def get_payment_gateway() -> StripeGateway:
    return StripeGateway(settings.STRIPE_SECRET_KEY, settings.STRIPE_WEBHOOK_SECRET)
