"""Shareable order links"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.security import generate_share_token
from ...domain.enums import SharePermission
from ...infrastructure.orm.order_model import OrderShareTokenModel

logger = logging.getLogger(__name__)


class ShareTokenService:

    def __init__(self, db: Session):
        self.db = db

    def generate(self, order_id: UUID, created_by: Optional[UUID],
                 permissions: Optional[List[SharePermission]] = None,
                 expires_in_days: Optional[int] = None) -> OrderShareTokenModel:
        days = expires_in_days or settings.SHARE_TOKEN_EXPIRE_DAYS
        share = OrderShareTokenModel(
            order_id=order_id,
            token=generate_share_token(),
            permissions=[SharePermission(p).value for p in (permissions or [SharePermission.VIEW])],
            expires_at=datetime.utcnow() + timedelta(days=days),
            created_by=created_by,
        )
        self.db.add(share)
        self.db.commit()
        logger.info("Share token created for order %s, expires in %d days", order_id, days)
        return share

    def validate(self, token: str, ip: Optional[str] = None) -> OrderShareTokenModel:
        """Return the active share for ``token`` and record its use"""
        share = self.db.query(OrderShareTokenModel).filter(
            OrderShareTokenModel.token == token,
            OrderShareTokenModel.is_active.is_(True),
        ).first()
        if not share or share.expires_at < datetime.utcnow():
            raise LookupError("Invalid or expired share link")

        share.use_count = (share.use_count or 0) + 1
        share.used_at = datetime.utcnow()
        share.used_by_ip = ip
        self.db.commit()
        return share

    def list_for_order(self, order_id: UUID) -> List[OrderShareTokenModel]:
        return self.db.query(OrderShareTokenModel).filter(
            OrderShareTokenModel.order_id == order_id
        ).order_by(OrderShareTokenModel.created_at.desc()).all()

    def invalidate(self, order_id: UUID, share_id: UUID) -> None:
        share = self.db.get(OrderShareTokenModel, share_id)
        if not share or share.order_id != order_id:
            raise LookupError("Share link not found")
        share.is_active = False
        self.db.commit()

    @staticmethod
    def allows(share: OrderShareTokenModel, permission: SharePermission) -> bool:
        return permission.value in (share.permissions or [])
