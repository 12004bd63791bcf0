"""Order repository implementation using SQLAlchemy ORM"""

from typing import Optional, List, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...domain.entities.order import Order
from ...domain.events.order_events import OrderStatusChanged
from ...domain.repositories.order_repository import IOrderRepository
from ...domain.value_objects.entity_ids import OrderId, UserId
from ...domain.enums import OrderStatus, LineItemStatus
from ..orm.order_model import OrderModel, OrderStatusHistoryModel, PricingRuleModel
from ..orm.line_item_model import LineItemModel

_COPIED_FIELDS = (
    'includes_client_review', 'rush_delivery', 'client_review_fee', 'rush_fee',
    'subtotal', 'discount_percent', 'discount_amount', 'total_retail', 'total_wholesale',
    'profit', 'credits_applied', 'notes', 'stripe_session_id', 'payment_reference',
    'approved_at', 'invoiced_at', 'paid_at', 'completed_at', 'cancelled_at',
    'created_at', 'updated_at',
)


class OrderRepositoryImpl(IOrderRepository):
    """Repository implementation for Order aggregate"""

    def __init__(self, session: Session):
        self.session = session

    async def get_by_id(self, order_id: OrderId) -> Optional[Order]:
        """Get order by ID"""
        model = self.session.get(OrderModel, order_id.value)
        return self._map_to_entity(model) if model else None

    async def get_by_stripe_session_id(self, session_id: str) -> Optional[Order]:
        model = self.session.query(OrderModel).filter(OrderModel.stripe_session_id == session_id).first()
        return self._map_to_entity(model) if model else None

    async def list(self, status: Optional[OrderStatus] = None, account_id: Optional[UserId] = None,
                   page: int = 1, limit: int = 20) -> Tuple[List[Order], int]:
        query = self.session.query(OrderModel)
        if status:
            query = query.filter(OrderModel.status == status.value)
        if account_id:
            query = query.filter(OrderModel.account_id == account_id.value)
        total = query.count()
        models = query.order_by(OrderModel.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
        return [self._map_to_entity(model) for model in models], total

    async def add(self, order: Order) -> Order:
        """Add a new order"""
        model = OrderModel(id=order.id.value)
        self._update_model_from_entity(model, order)
        self.session.add(model)
        self.session.flush()
        return order

    async def update(self, order: Order) -> Order:
        """Update an existing order"""
        existing = self.session.get(OrderModel, order.id.value)
        if existing:
            self._update_model_from_entity(existing, order)
            self.session.flush()
        return order

    async def record_status_change(self, event: OrderStatusChanged) -> None:
        self.session.add(OrderStatusHistoryModel(
            order_id=event.order_id.value,
            old_status=event.old_status.value if event.old_status else None,
            new_status=event.new_status.value,
            changed_by=event.changed_by.value if event.changed_by else None,
            notes=event.notes,
            changed_at=event.changed_at,
        ))
        self.session.flush()

    async def get_status_history(self, order_id: OrderId) -> List[dict]:
        rows = self.session.query(OrderStatusHistoryModel).filter(
            OrderStatusHistoryModel.order_id == order_id.value
        ).order_by(OrderStatusHistoryModel.changed_at).all()
        return [
            {
                "old_status": row.old_status,
                "new_status": row.new_status,
                "changed_by": row.changed_by,
                "notes": row.notes,
                "changed_at": row.changed_at,
            }
            for row in rows
        ]

    async def find_discount_percent(self, client_id: Optional[UUID], quantity: int) -> float:
        """Client-specific quantity rule first, then the global one, else no discount"""
        def matching(scope):
            return self.session.query(PricingRuleModel).filter(
                scope,
                PricingRuleModel.is_active.is_(True),
                PricingRuleModel.min_quantity <= quantity,
                or_(PricingRuleModel.max_quantity.is_(None), PricingRuleModel.max_quantity >= quantity),
            ).order_by(PricingRuleModel.min_quantity.desc()).first()

        rule = None
        if client_id:
            rule = matching(PricingRuleModel.client_id == client_id)
        if not rule:
            rule = matching(PricingRuleModel.client_id.is_(None))
        return float(rule.discount_percent) if rule else 0.0

    async def count_line_items(self, order_ids: List[OrderId]) -> dict:
        if not order_ids:
            return {}
        rows = self.session.query(LineItemModel.order_id, func.count(LineItemModel.id)).filter(
            LineItemModel.order_id.in_([order_id.value for order_id in order_ids]),
            LineItemModel.status != LineItemStatus.CANCELLED.value,
        ).group_by(LineItemModel.order_id).all()
        return {order_id: count for order_id, count in rows}

    def _update_model_from_entity(self, model: OrderModel, order: Order) -> None:
        """Update ORM model from domain entity"""
        model.account_id = order.account_id.value if order.account_id else None
        model.created_by = order.created_by.value if order.created_by else None
        model.status = order.status.value
        for name in _COPIED_FIELDS:
            setattr(model, name, getattr(order, name))

    def _map_to_entity(self, model: OrderModel) -> Order:
        """Map ORM model to domain entity"""
        return Order(
            id=OrderId(model.id),
            account_id=UserId(model.account_id) if model.account_id else None,
            created_by=UserId(model.created_by) if model.created_by else None,
            status=OrderStatus(model.status),
            **{name: getattr(model, name) for name in _COPIED_FIELDS},
        )
