"""Line item repository implementation"""

from collections import defaultdict
from typing import Optional, List
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...domain.entities.line_item import LineItem, ConcurrentUpdateError
from ...domain.repositories.line_item_repository import ILineItemRepository
from ...domain.value_objects.entity_ids import LineItemId, OrderId, UserId
from ...domain.enums import LineItemStatus, ClientReviewStatus, WorkflowStatus
from ..orm.line_item_model import LineItemModel, LineItemChangeModel
from ..orm.order_model import WorkflowModel

_COPIED_FIELDS = (
    'client_id', 'target_page_id', 'target_page_url', 'anchor_text',
    'assigned_domain_id', 'assigned_domain', 'assigned_at',
    'estimated_price', 'wholesale_price', 'approved_price', 'service_fee',
    'client_reviewed_at', 'client_review_notes', 'display_order', 'version',
    'cancelled_at', 'cancellation_reason', 'workflow_id', 'publisher_id',
    'publisher_status', 'delivered_at', 'created_at', 'updated_at',
)


def _user_value(user_id: Optional[UserId]):
    return user_id.value if user_id else None


class LineItemRepositoryImpl(ILineItemRepository):
    """Repository implementation for order line items"""

    def __init__(self, session: Session):
        self.session = session

    async def get_by_id(self, line_item_id: LineItemId) -> Optional[LineItem]:
        model = self.session.get(LineItemModel, line_item_id.value)
        return self._map_to_entity(model) if model else None

    async def get_by_order(self, order_id: OrderId, status: Optional[str] = None,
                           client_id: Optional[UUID] = None) -> List[LineItem]:
        query = self.session.query(LineItemModel).filter(LineItemModel.order_id == order_id.value)
        if status:
            query = query.filter(LineItemModel.status == status)
        if client_id:
            query = query.filter(LineItemModel.client_id == client_id)
        models = query.order_by(LineItemModel.display_order, LineItemModel.created_at).all()
        return [self._map_to_entity(model) for model in models]

    async def max_display_order(self, order_id: OrderId) -> int:
        """Highest display order in the order, -1 when it has no items"""
        value = self.session.query(func.max(LineItemModel.display_order)).filter(
            LineItemModel.order_id == order_id.value
        ).scalar()
        return -1 if value is None else value

    async def add(self, line_item: LineItem) -> LineItem:
        model = LineItemModel(id=line_item.id.value, order_id=line_item.order_id.value)
        self._update_model_from_entity(model, line_item)
        self.session.add(model)
        self.session.flush()
        return line_item

    async def update(self, line_item: LineItem, expected_version: int) -> LineItem:
        """Compare-and-set on ``version`` so concurrent writers cannot clobber each other"""
        values = self._column_values(line_item)
        updated = self.session.query(LineItemModel).filter(
            LineItemModel.id == line_item.id.value,
            LineItemModel.version == expected_version,
        ).update(values, synchronize_session='fetch')
        if updated == 0:
            raise ConcurrentUpdateError(line_item.id.value)
        self.session.flush()
        return line_item

    async def record_change(self, line_item: LineItem, change_type: str, changed_by: Optional[UserId],
                            previous_value: Optional[dict], new_value: Optional[dict],
                            batch_id: Optional[UUID] = None, reason: Optional[str] = None) -> None:
        self.session.add(LineItemChangeModel(
            line_item_id=line_item.id.value,
            order_id=line_item.order_id.value,
            change_type=change_type,
            previous_value=previous_value,
            new_value=new_value,
            changed_by=_user_value(changed_by),
            change_reason=reason,
            batch_id=batch_id,
        ))
        self.session.flush()

    async def recent_changes(self, line_item_ids: List[LineItemId], per_item: int = 5) -> dict:
        if not line_item_ids:
            return {}
        rows = self.session.query(LineItemChangeModel).filter(
            LineItemChangeModel.line_item_id.in_([item_id.value for item_id in line_item_ids])
        ).order_by(LineItemChangeModel.changed_at.desc()).all()
        changes = defaultdict(list)
        for row in rows:
            if len(changes[row.line_item_id]) < per_item:
                changes[row.line_item_id].append({
                    "id": row.id,
                    "change_type": row.change_type,
                    "previous_value": row.previous_value,
                    "new_value": row.new_value,
                    "changed_by": row.changed_by,
                    "change_reason": row.change_reason,
                    "batch_id": row.batch_id,
                    "changed_at": row.changed_at,
                })
        return dict(changes)


    async def create_workflow(self, line_item: LineItem, title: str, created_by: Optional[UserId]) -> UUID:
        workflow = WorkflowModel(
            order_id=line_item.order_id.value,
            line_item_id=line_item.id.value,
            client_id=line_item.client_id,
            title=title,
            status=WorkflowStatus.ACTIVE.value,
            content={
                "target_page_url": line_item.target_page_url,
                "anchor_text": line_item.anchor_text,
                "assigned_domain": line_item.assigned_domain,
            },
            created_by=_user_value(created_by),
        )
        self.session.add(workflow)
        self.session.flush()
        return workflow.id

    def _column_values(self, line_item: LineItem) -> dict:
        values = {name: getattr(line_item, name) for name in _COPIED_FIELDS}
        values.update(
            status=line_item.status.value,
            client_review_status=(
                line_item.client_review_status.value if line_item.client_review_status else None
            ),
            added_by=_user_value(line_item.added_by),
            assigned_by=_user_value(line_item.assigned_by),
            cancelled_by=_user_value(line_item.cancelled_by),
            meta=dict(line_item.metadata),
        )
        return values

    def _update_model_from_entity(self, model: LineItemModel, line_item: LineItem) -> None:
        for name, value in self._column_values(line_item).items():
            setattr(model, name, value)

    def _map_to_entity(self, model: LineItemModel) -> LineItem:
        return LineItem(
            id=LineItemId(model.id),
            order_id=OrderId(model.order_id),
            status=LineItemStatus(model.status),
            client_review_status=(
                ClientReviewStatus(model.client_review_status) if model.client_review_status else None
            ),
            added_by=UserId(model.added_by) if model.added_by else None,
            assigned_by=UserId(model.assigned_by) if model.assigned_by else None,
            cancelled_by=UserId(model.cancelled_by) if model.cancelled_by else None,
            metadata=dict(model.meta or {}),
            **{name: getattr(model, name) for name in _COPIED_FIELDS},
        )
