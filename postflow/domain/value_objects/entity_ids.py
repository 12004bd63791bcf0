"""Typed identifiers for the aggregates kept behind repositories"""

from dataclasses import dataclass
from typing import ClassVar, Type, TypeVar
from uuid import UUID, uuid4

IdT = TypeVar("IdT", bound="EntityId")


@dataclass(frozen=True)
class EntityId:
    value: UUID
    label: ClassVar[str] = "Entity"

    def __post_init__(self):
        if not isinstance(self.value, UUID):
            raise ValueError(f"{self.label} ID must be a valid UUID")

    @classmethod
    def generate(cls: Type[IdT]) -> IdT:
        return cls(uuid4())

    @classmethod
    def parse(cls: Type[IdT], raw: str) -> IdT:
        """From a path parameter or token claim; malformed input raises ValueError."""
        return cls(UUID(str(raw)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UserId(EntityId):
    label: ClassVar[str] = "User"


@dataclass(frozen=True)
class OrderId(EntityId):
    label: ClassVar[str] = "Order"


@dataclass(frozen=True)
class LineItemId(EntityId):
    label: ClassVar[str] = "Line item"
