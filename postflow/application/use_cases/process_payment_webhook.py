"""Stripe webhook handling"""

import logging

from ...domain.enums import OrderStatus
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import OrderId
from ...infrastructure.external_services.payment_service import PaymentService
from .update_order_status import record_order_events

logger = logging.getLogger(__name__)


class ProcessPaymentWebhookUseCase:

    def __init__(self, unit_of_work: IUnitOfWork, payment_service: PaymentService):
        self.unit_of_work = unit_of_work
        self.payment_service = payment_service

    async def execute(self, payload: bytes, signature: str) -> dict:
        event = self.payment_service.verify_webhook(payload, signature)
        event_type = event["type"]
        if event_type != "checkout.session.completed":
            logger.info("Ignoring Stripe event %s", event_type)
            return {"received": True, "handled": False}

        session = event["data"]["object"]
        async with self.unit_of_work:
            order = await self.unit_of_work.orders.get_by_stripe_session_id(session["id"])
            if not order:
                reference = (session.get("metadata") or {}).get("order_id") or session.get("client_reference_id")
                order = await self.unit_of_work.orders.get_by_id(OrderId.parse(reference)) if reference else None
            if not order:
                raise LookupError("Order for checkout session not found")

            if order.paid_at is not None or order.status == OrderStatus.PAID:
                logger.info("Order %s already marked paid", order.id)
                return {"received": True, "handled": False}

            order.mark_as_paid(session.get("payment_intent") or session["id"])
            await self.unit_of_work.orders.update(order)
            await record_order_events(self.unit_of_work, order)
            await self.unit_of_work.commit()

            logger.info("Order %s paid through Stripe session %s", order.id, session["id"])
            return {"received": True, "handled": True, "order_id": str(order.id.value)}
