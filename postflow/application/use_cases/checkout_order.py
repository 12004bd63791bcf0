"""Checkout use case"""

import logging
from uuid import UUID

from ...domain.entities.user import User
from ...domain.enums import OrderStatus
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...infrastructure.external_services.payment_service import PaymentService
from ...application.dtos.order_dtos import CheckoutResponseDTO
from .get_orders import load_order
from .update_order_status import record_order_events

logger = logging.getLogger(__name__)

CHECKOUT_STATUSES = (OrderStatus.CLIENT_APPROVED, OrderStatus.INVOICED)


class CheckoutOrderUseCase:

    def __init__(self, unit_of_work: IUnitOfWork, payment_service: PaymentService):
        self.unit_of_work = unit_of_work
        self.payment_service = payment_service

    async def execute(self, order_id: UUID, user: User) -> CheckoutResponseDTO:
        async with self.unit_of_work:
            order = await load_order(self.unit_of_work, order_id, user)
            if order.status not in CHECKOUT_STATUSES:
                raise ValueError(f"Order cannot be paid in status '{order.status.value}'")

            if order.amount_due == 0:
                reference = "credits" if order.credits_applied else "no_charge"
                order.mark_as_paid(reference, changed_by=user.id)
                await self.unit_of_work.orders.update(order)
                await record_order_events(self.unit_of_work, order)
                await self.unit_of_work.commit()
                logger.info("Order %s settled without a charge (%s)", order.id, reference)
                return CheckoutResponseDTO(order_id=order.id.value, status=order.status.value, amount_due=0)

            customer = user
            if user.is_internal and order.account_id:
                customer = await self.unit_of_work.users.get_by_id(order.account_id) or user

            checkout = await self.payment_service.create_checkout_session(
                order_id=str(order.id.value),
                amount_cents=order.amount_due,
                customer_email=str(customer.email),
                description=f"Guest post order {order.id.value}",
            )

            order.stripe_session_id = checkout["checkout_id"]
            order.change_status(OrderStatus.PAYMENT_PENDING, changed_by=user.id, notes="Checkout started")
            await self.unit_of_work.orders.update(order)
            await record_order_events(self.unit_of_work, order)
            await self.unit_of_work.commit()

            return CheckoutResponseDTO(
                order_id=order.id.value,
                status=order.status.value,
                checkout_url=checkout["checkout_url"],
                session_id=checkout["checkout_id"],
                amount_due=order.amount_due,
            )
