"""Account credit ORM Models"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey, Uuid

from ...db.models import Base


class AccountCreditModel(Base):
    __tablename__ = 'account_credits'

    id = Column(Uuid, primary_key=True, default=uuid4)
    account_id = Column(Uuid, ForeignKey('users.id'), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    credit_type = Column(String(20), nullable=False)
    source = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    minimum_order_amount = Column(Integer, nullable=True)
    maximum_usage_amount = Column(Integer, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    used_amount = Column(Integer, default=0, nullable=False)
    remaining_amount = Column(Integer, nullable=False)
    is_fully_used = Column(Boolean, default=False, nullable=False)
    granted_by = Column(Uuid, ForeignKey('users.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class CreditTransactionModel(Base):
    __tablename__ = 'credit_transactions'

    id = Column(Uuid, primary_key=True, default=uuid4)
    account_id = Column(Uuid, ForeignKey('users.id'), nullable=False, index=True)
    credit_id = Column(Uuid, ForeignKey('account_credits.id'), nullable=True)
    order_id = Column(Uuid, ForeignKey('orders.id'), nullable=True)
    transaction_type = Column(String(20), nullable=False)
    amount = Column(Integer, nullable=False)
    previous_balance = Column(Integer, nullable=False)
    new_balance = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
