"""Payment routes: Stripe checkout and webhook"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from ...api.dependencies import get_current_user, get_payment_service, get_unit_of_work
from ...api.errors import DOMAIN_ERRORS, http_error, internal_error
from ...application.dtos.order_dtos import CheckoutResponseDTO
from ...application.use_cases.checkout_order import CheckoutOrderUseCase
from ...application.use_cases.process_payment_webhook import ProcessPaymentWebhookUseCase
from ...domain.entities.user import User
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...infrastructure.external_services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/orders/{order_id}/checkout", response_model=CheckoutResponseDTO)
async def checkout_order(
    order_id: UUID,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """Start Stripe checkout for the amount due, or settle with credits alone"""
    try:
        return await CheckoutOrderUseCase(unit_of_work, payment_service).execute(order_id, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Checkout of order %s failed", order_id)
        raise internal_error()


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None, alias="Stripe-Signature"),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    payment_service: PaymentService = Depends(get_payment_service)
):
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing Stripe signature")
    payload = await request.body()
    try:
        return await ProcessPaymentWebhookUseCase(unit_of_work, payment_service).execute(payload, stripe_signature)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Stripe webhook processing failed")
        raise internal_error()
