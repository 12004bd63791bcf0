"""Account credit DTOs"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID

from ...domain.enums import CreditType


class CreditGrantDTO(BaseModel):
    account_id: UUID
    amount: int = Field(..., gt=0)
    credit_type: CreditType
    source: Optional[str] = None
    description: Optional[str] = None
    expires_at: Optional[datetime] = None
    minimum_order_amount: Optional[int] = Field(default=None, ge=0)
    maximum_usage_amount: Optional[int] = Field(default=None, gt=0)


class ApplyCreditsDTO(BaseModel):
    order_id: UUID
    max_amount: Optional[int] = Field(default=None, gt=0)


class CreditDTO(BaseModel):
    id: UUID
    account_id: UUID
    amount: int
    credit_type: str
    source: Optional[str] = None
    description: Optional[str] = None
    minimum_order_amount: Optional[int] = None
    maximum_usage_amount: Optional[int] = None
    expires_at: Optional[datetime] = None
    used_amount: int
    remaining_amount: int
    is_fully_used: bool
    created_at: datetime

    class Config:
        from_attributes = True


class CreditBalanceDTO(BaseModel):
    total_balance: int
    expiring_balance: int
    credits: List[CreditDTO]


class AppliedCreditDTO(BaseModel):
    credit_id: UUID
    amount_used: int
    credit_type: str


class ApplyCreditsResponse(BaseModel):
    credits_applied: int
    remaining_order_amount: int
    applied_credits: List[AppliedCreditDTO]


class CreditTransactionDTO(BaseModel):
    id: UUID
    credit_id: Optional[UUID] = None
    order_id: Optional[UUID] = None
    transaction_type: str
    amount: int
    previous_balance: int
    new_balance: int
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
