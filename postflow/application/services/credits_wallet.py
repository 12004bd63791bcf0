"""Prepaid account credits that can be spent on orders"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy import case
from sqlalchemy.orm import Session

from ...core.config import settings
from ...domain.enums import (
    CreditType, CreditTransactionType, OrderStatus, UserType, ACCOUNT_EDITABLE_ORDER_STATUSES,
)
from ...infrastructure.orm.credit_model import AccountCreditModel, CreditTransactionModel
from ...infrastructure.orm.order_model import OrderModel
from ...infrastructure.orm.user_model import UserModel

logger = logging.getLogger(__name__)


class CreditsWalletService:

    def __init__(self, db: Session):
        self.db = db

    def _active_credits(self, account_id: UUID):
        now = datetime.utcnow()
        return self.db.query(AccountCreditModel).filter(
            AccountCreditModel.account_id == account_id,
            AccountCreditModel.is_fully_used.is_(False),
            (AccountCreditModel.expires_at.is_(None)) | (AccountCreditModel.expires_at > now),
        )

    def grant(
        self,
        account_id: UUID,
        amount: int,
        credit_type: CreditType,
        granted_by: Optional[UUID],
        source: Optional[str] = None,
        description: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        minimum_order_amount: Optional[int] = None,
        maximum_usage_amount: Optional[int] = None,
    ) -> AccountCreditModel:
        if amount <= 0:
            raise ValueError("Credit amount must be positive")
        account = self.db.get(UserModel, account_id)
        if not account or account.user_type != UserType.ACCOUNT.value:
            raise LookupError("Account not found")

        previous = self.balance(account_id)["total_balance"]
        credit = AccountCreditModel(
            account_id=account_id,
            amount=amount,
            credit_type=credit_type.value,
            source=source,
            description=description,
            expires_at=expires_at,
            minimum_order_amount=minimum_order_amount,
            maximum_usage_amount=maximum_usage_amount,
            used_amount=0,
            remaining_amount=amount,
            is_fully_used=False,
            granted_by=granted_by,
        )
        self.db.add(credit)
        self.db.flush()
        self.db.add(CreditTransactionModel(
            account_id=account_id,
            credit_id=credit.id,
            transaction_type=CreditTransactionType.GRANT.value,
            amount=amount,
            previous_balance=previous,
            new_balance=previous + amount,
            description=description or f"{credit_type.value} credit granted",
            created_by=granted_by,
        ))
        self.db.commit()
        logger.info("Granted %s cents of %s credit to account %s", amount, credit_type.value, account_id)
        return credit

    def balance(self, account_id: UUID) -> dict:
        credits = self._active_credits(account_id).order_by(AccountCreditModel.created_at).all()
        soon = datetime.utcnow() + timedelta(days=settings.CREDIT_EXPIRING_SOON_DAYS)
        return {
            "total_balance": sum(c.remaining_amount for c in credits),
            "expiring_balance": sum(
                c.remaining_amount for c in credits if c.expires_at and c.expires_at <= soon
            ),
            "credits": credits,
        }

    def apply_to_order(self, account_id: UUID, order_id: UUID, max_amount: Optional[int] = None) -> dict:
        """Spend credits on an unpaid order, soonest-expiring first."""
        order = self.db.get(OrderModel, order_id)
        if not order:
            raise LookupError("Order not found")
        if order.account_id != account_id:
            raise PermissionError("You do not have access to this order")
        if OrderStatus(order.status) not in ACCOUNT_EDITABLE_ORDER_STATUSES:
            raise ValueError(f"Credits cannot be applied to an order in status '{order.status}'")

        amount_due = max(order.total_retail - order.credits_applied, 0)
        remaining = min(max_amount, amount_due) if max_amount is not None else amount_due

        eligible = self._active_credits(account_id).filter(
            (AccountCreditModel.minimum_order_amount.is_(None))
            | (AccountCreditModel.minimum_order_amount <= order.total_retail)
        ).order_by(
            case((AccountCreditModel.expires_at.is_(None), 1), else_=0),
            AccountCreditModel.expires_at,
            AccountCreditModel.created_at,
        ).all()

        applied = []
        for credit in eligible:
            if remaining <= 0:
                break
            available = credit.remaining_amount
            if credit.maximum_usage_amount:
                available = min(credit.maximum_usage_amount, available)
            use = min(remaining, available)
            if use <= 0:
                continue

            previous = credit.remaining_amount
            credit.used_amount += use
            credit.remaining_amount -= use
            credit.is_fully_used = credit.remaining_amount <= 0
            self.db.add(CreditTransactionModel(
                account_id=account_id,
                credit_id=credit.id,
                order_id=order.id,
                transaction_type=CreditTransactionType.USE.value,
                amount=-use,
                previous_balance=previous,
                new_balance=credit.remaining_amount,
                description=f"Applied to order {order.id}",
                created_by=account_id,
            ))
            applied.append({"credit_id": credit.id, "amount_used": use, "credit_type": credit.credit_type})
            remaining -= use

        total = sum(a["amount_used"] for a in applied)
        order.credits_applied += total
        self.db.commit()
        return {
            "credits_applied": total,
            "remaining_order_amount": max(order.total_retail - order.credits_applied, 0),
            "applied_credits": applied,
        }

    def refund_order_credits(self, account_id: UUID, order_id: UUID, reason: str) -> int:
        """Return credits spent on an order back to the credits they came from."""
        already_refunded = self.db.query(CreditTransactionModel).filter(
            CreditTransactionModel.order_id == order_id,
            CreditTransactionModel.transaction_type == CreditTransactionType.REFUND.value,
        ).first()
        if already_refunded:
            return 0

        usages = self.db.query(CreditTransactionModel).filter(
            CreditTransactionModel.account_id == account_id,
            CreditTransactionModel.order_id == order_id,
            CreditTransactionModel.transaction_type == CreditTransactionType.USE.value,
        ).all()
        refunded = 0
        for usage in usages:
            credit = self.db.get(AccountCreditModel, usage.credit_id)
            amount = abs(usage.amount)
            previous = credit.remaining_amount
            credit.used_amount -= amount
            credit.remaining_amount += amount
            credit.is_fully_used = False
            self.db.add(CreditTransactionModel(
                account_id=account_id,
                credit_id=credit.id,
                order_id=order_id,
                transaction_type=CreditTransactionType.REFUND.value,
                amount=amount,
                previous_balance=previous,
                new_balance=credit.remaining_amount,
                description=f"Refunded from order {order_id}: {reason}",
            ))
            refunded += amount
        order = self.db.get(OrderModel, order_id)
        if order and refunded:
            order.credits_applied = max(order.credits_applied - refunded, 0)
        self.db.commit()
        return refunded

    def expire_credits(self) -> dict:
        expired = self.db.query(AccountCreditModel).filter(
            AccountCreditModel.is_fully_used.is_(False),
            AccountCreditModel.expires_at <= datetime.utcnow(),
        ).all()
        total = 0
        for credit in expired:
            total += credit.remaining_amount
            self.db.add(CreditTransactionModel(
                account_id=credit.account_id,
                credit_id=credit.id,
                transaction_type=CreditTransactionType.EXPIRE.value,
                amount=-credit.remaining_amount,
                previous_balance=credit.remaining_amount,
                new_balance=0,
                description="Credit expired",
            ))
            credit.is_fully_used = True
        self.db.commit()
        return {"expired_credits": len(expired), "total_amount_expired": total}

    def transactions(self, account_id: UUID, limit: int = 100) -> List[CreditTransactionModel]:
        return self.db.query(CreditTransactionModel).filter(
            CreditTransactionModel.account_id == account_id
        ).order_by(CreditTransactionModel.created_at.desc()).limit(limit).all()
