"""CSV exports for staff"""

import csv
import io
from typing import Iterable, List, Sequence

from sqlalchemy.orm import Session

from ...infrastructure.orm.line_item_model import LineItemModel
from ...infrastructure.orm.website_model import WebsiteModel

LINE_ITEM_COLUMNS = [
    "id", "status", "client_id", "target_page_url", "anchor_text", "assigned_domain",
    "estimated_price", "wholesale_price", "approved_price", "service_fee",
    "client_review_status", "publisher_status", "published_url", "created_at",
]

WEBSITE_COLUMNS = [
    "id", "domain", "domain_rating", "total_traffic", "niche", "guest_post_cost",
    "derived_guest_post_cost", "price_calculation_method", "pricing_strategy", "source",
]


def rows_to_csv(columns: Sequence[str], rows: Iterable) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(columns)
    for row in rows:
        writer.writerow(["" if getattr(row, c) is None else getattr(row, c) for c in columns])
    return buffer.getvalue()


def export_order_line_items(db: Session, order_id) -> str:
    items: List[LineItemModel] = db.query(LineItemModel).filter(
        LineItemModel.order_id == order_id
    ).order_by(LineItemModel.display_order).all()
    return rows_to_csv(LINE_ITEM_COLUMNS, items)


def export_websites(db: Session) -> str:
    websites = db.query(WebsiteModel).order_by(WebsiteModel.domain).all()
    return rows_to_csv(WEBSITE_COLUMNS, websites)
