"""Account lifecycle events raised by the User aggregate"""

from dataclasses import dataclass
from datetime import datetime

from ..value_objects.entity_ids import UserId


@dataclass(frozen=True)
class UserSuspended:
    """Open impersonation sessions of the user are closed when this is handled."""
    user_id: UserId
    reason: str
    suspended_at: datetime


@dataclass(frozen=True)
class UserReactivated:
    user_id: UserId
    reactivated_at: datetime
