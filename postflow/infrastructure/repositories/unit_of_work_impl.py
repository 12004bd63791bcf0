"""SQLAlchemy session backed unit of work"""

from sqlalchemy.orm import Session

from ...domain.repositories.unit_of_work import IUnitOfWork
from .line_item_repository_impl import LineItemRepositoryImpl
from .order_repository_impl import OrderRepositoryImpl
from .user_repository_impl import UserRepositoryImpl


class UnitOfWorkImpl(IUnitOfWork):
    """All three repositories share one session, so one commit covers them."""

    def __init__(self, session: Session):
        self.session = session
        self.users = UserRepositoryImpl(session)
        self.orders = OrderRepositoryImpl(session)
        self.line_items = LineItemRepositoryImpl(session)

    async def commit(self) -> None:
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self._dirty = False

    async def rollback(self) -> None:
        self.session.rollback()
        self._dirty = False
