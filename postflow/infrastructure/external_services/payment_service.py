"""Payment service for processing order payments via Stripe"""

import json
import logging
from typing import Dict

import stripe

from ...core.config import settings

logger = logging.getLogger(__name__)


class PaymentService:

    def __init__(self):
        stripe.api_key = settings.STRIPE_SECRET_KEY
        self.webhook_secret = settings.STRIPE_WEBHOOK_SECRET
        self.currency = settings.STRIPE_CURRENCY

    async def create_checkout_session(self,
                                      order_id: str,
                                      amount_cents: int,
                                      customer_email: str,
                                      description: str) -> Dict:
        """Create a Stripe Checkout session for the amount due on an order"""
        if amount_cents <= 0:
            raise ValueError("Checkout amount must be positive")

        logger.info("Creating Stripe checkout session for order %s (%s cents)", order_id, amount_cents)
        session = stripe.checkout.Session.create(
            payment_method_types=['card'],
            line_items=[{
                'price_data': {
                    'currency': self.currency,
                    'unit_amount': amount_cents,
                    'product_data': {'name': description},
                },
                'quantity': 1,
            }],
            mode='payment',
            success_url=f"{settings.FRONTEND_URL}/orders/{order_id}/payment/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{settings.FRONTEND_URL}/orders/{order_id}/payment/cancel",
            customer_email=customer_email,
            client_reference_id=order_id,
            metadata={'order_id': order_id},
        )

        return {
            "checkout_id": session.id,
            "checkout_url": session.url,
            "amount": amount_cents,
            "currency": self.currency.upper(),
        }

    def verify_webhook(self, payload: bytes, signature: str) -> Dict:
        """Verify the Stripe signature and return the event as a plain dict"""
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise ValueError(f"Invalid webhook signature: {e}")
        return json.loads(payload)
