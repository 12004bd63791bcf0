"""Staff impersonation of account and publisher users"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.security import create_access_token
from ...domain.enums import ImpersonationStatus, UserRole, UserType, UserStatus
from ...infrastructure.orm.user_model import ImpersonationLogModel, UserModel

logger = logging.getLogger(__name__)

IMPERSONATABLE_TYPES = (UserType.ACCOUNT.value, UserType.PUBLISHER.value)


class ImpersonationService:

    def __init__(self, db: Session):
        self.db = db

    def start(self, admin_id: UUID, target_user_id: UUID, reason: str,
              ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> dict:
        admin = self.db.get(UserModel, admin_id)
        if not admin or admin.user_type != UserType.INTERNAL.value or admin.role != UserRole.ADMIN.value:
            raise PermissionError("Only internal admins can impersonate users")
        if not reason or not reason.strip():
            raise ValueError("A reason is required to impersonate a user")

        active = self.db.query(ImpersonationLogModel).filter(
            ImpersonationLogModel.admin_user_id == admin_id,
            ImpersonationLogModel.status == ImpersonationStatus.ACTIVE.value,
        ).first()
        if active:
            raise ValueError("An impersonation session is already active")

        target = self.db.get(UserModel, target_user_id)
        if not target:
            raise LookupError("Target user not found")
        if target.user_type not in IMPERSONATABLE_TYPES:
            raise ValueError("Only account and publisher users can be impersonated")
        if target.status == UserStatus.SUSPENDED.value:
            raise ValueError("Cannot impersonate a suspended user")

        log = ImpersonationLogModel(
            admin_user_id=admin_id,
            target_user_id=target.id,
            target_user_type=target.user_type,
            reason=reason.strip(),
            status=ImpersonationStatus.ACTIVE.value,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.db.add(log)
        self.db.commit()
        logger.warning("Admin %s started impersonating %s (%s)", admin.email, target.email, reason)

        token = create_access_token(
            str(target.id),
            target.user_type,
            extra_claims={"imp": str(admin_id), "imp_log": str(log.id)},
            expires_minutes=settings.IMPERSONATION_TOKEN_EXPIRE_MINUTES,
        )
        return {"access_token": token, "token_type": "bearer", "session_id": log.id,
                "target_user_id": target.id, "target_user_type": target.user_type}

    def end(self, admin_id: UUID, log_id: UUID) -> dict:
        log = self.db.get(ImpersonationLogModel, log_id)
        if not log or log.admin_user_id != admin_id:
            raise LookupError("Impersonation session not found")
        if log.status != ImpersonationStatus.ACTIVE.value:
            raise ValueError("Impersonation session already ended")

        log.status = ImpersonationStatus.ENDED.value
        log.ended_at = datetime.utcnow()
        self.db.commit()
        logger.info("Impersonation session %s ended", log.id)

        token = create_access_token(str(admin_id), UserType.INTERNAL.value)
        return {"access_token": token, "token_type": "bearer"}

    def logs(self, limit: int = 100) -> List[ImpersonationLogModel]:
        return self.db.query(ImpersonationLogModel).order_by(
            ImpersonationLogModel.started_at.desc()
        ).limit(limit).all()
