"""Transaction boundary around the user, order and line item repositories"""

from abc import ABC, abstractmethod

from .user_repository import IUserRepository
from .order_repository import IOrderRepository
from .line_item_repository import ILineItemRepository


class IUnitOfWork(ABC):
    """Use as ``async with uow:``.

    Leaving the block normally commits whatever was not committed yet;
    leaving it with an exception rolls back and lets the exception through.
    """

    users: IUserRepository
    orders: IOrderRepository
    line_items: ILineItemRepository

    _dirty: bool = False

    async def __aenter__(self) -> "IUnitOfWork":
        self._dirty = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            await self.rollback()
            return
        if self._dirty:
            await self.commit()

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...
