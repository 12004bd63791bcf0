"""
Domain Enums - Business domain enumerations
"""

from enum import Enum


class UserType(str, Enum):
    ACCOUNT = "account"
    PUBLISHER = "publisher"
    INTERNAL = "internal"


class UserStatus(str, Enum):
    PENDING_VERIFICATION = "pending_verification"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class OrderStatus(str, Enum):
    DRAFT = "draft"
    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"
    SITES_READY = "sites_ready"
    CLIENT_REVIEWING = "client_reviewing"
    CLIENT_APPROVED = "client_approved"
    INVOICED = "invoiced"
    PAYMENT_PENDING = "payment_pending"
    PAYMENT_PROCESSING = "payment_processing"
    PAID = "paid"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


# Statuses in which account users may still edit their order's line items
ACCOUNT_EDITABLE_ORDER_STATUSES = frozenset({
    OrderStatus.DRAFT,
    OrderStatus.PENDING_CONFIRMATION,
    OrderStatus.CONFIRMED,
    OrderStatus.SITES_READY,
    OrderStatus.CLIENT_REVIEWING,
    OrderStatus.CLIENT_APPROVED,
    OrderStatus.INVOICED,
})

PAYMENT_LOCKED_ORDER_STATUSES = frozenset({
    OrderStatus.PAYMENT_PENDING,
    OrderStatus.PAYMENT_PROCESSING,
    OrderStatus.PAID,
    OrderStatus.IN_PROGRESS,
    OrderStatus.COMPLETED,
    OrderStatus.REFUNDED,
    OrderStatus.PARTIALLY_REFUNDED,
})

# Orders counted as revenue on the admin dashboard
REVENUE_ORDER_STATUSES = frozenset({
    OrderStatus.PAID,
    OrderStatus.IN_PROGRESS,
    OrderStatus.COMPLETED,
})


class LineItemStatus(str, Enum):
    DRAFT = "draft"
    PENDING_SELECTION = "pending_selection"
    SELECTED = "selected"
    ASSIGNED = "assigned"
    APPROVED = "approved"
    WORKFLOW_CREATED = "workflow_created"
    IN_PROGRESS = "in_progress"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ClientReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class InclusionStatus(str, Enum):
    INCLUDED = "included"
    EXCLUDED = "excluded"
    SAVED_FOR_LATER = "saved_for_later"


class LineItemChangeType(str, Enum):
    CREATED = "created"
    MODIFIED = "modified"
    STATUS_CHANGED = "status_changed"
    CANCELLED = "cancelled"


class SharePermission(str, Enum):
    VIEW = "view"
    APPROVE = "approve"


class WorkflowStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class QualificationStatus(str, Enum):
    PENDING = "pending"
    HIGH_QUALITY = "high_quality"
    GOOD_QUALITY = "good_quality"
    MARGINAL_QUALITY = "marginal_quality"
    DISQUALIFIED = "disqualified"


QUALIFIED_STATUSES = (
    QualificationStatus.HIGH_QUALITY,
    QualificationStatus.GOOD_QUALITY,
    QualificationStatus.MARGINAL_QUALITY,
)


class OfferingType(str, Enum):
    GUEST_POST = "guest_post"
    LINK_INSERTION = "link_insertion"
    LISTICLE_PLACEMENT = "listicle_placement"


class PricingStrategy(str, Enum):
    MIN_PRICE = "min_price"
    MAX_PRICE = "max_price"
    CUSTOM = "custom"


class PriceCalculationMethod(str, Enum):
    MANUAL_OVERRIDE = "manual_override"
    CUSTOM = "custom"
    AUTO_MAX = "auto_max"
    AUTO_MIN = "auto_min"


class PricingComparisonStatus(str, Enum):
    MATCH = "match"
    MISMATCH = "mismatch"
    CURRENT_NULL = "current_null"
    DERIVED_NULL = "derived_null"
    BOTH_NULL = "both_null"


class PublisherAccountStatus(str, Enum):
    SHADOW = "shadow"
    UNCLAIMED = "unclaimed"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class PublisherStatus(str, Enum):
    """Publisher-side progress of an assigned line item."""
    PENDING = "pending"
    NOTIFIED = "notified"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    COMPLETED = "completed"


ACTIVE_PUBLISHER_STATUSES = (
    PublisherStatus.PENDING,
    PublisherStatus.NOTIFIED,
    PublisherStatus.ACCEPTED,
    PublisherStatus.IN_PROGRESS,
)


class EarningType(str, Enum):
    ORDER_COMPLETION = "order_completion"
    BONUS = "bonus"
    REFERRAL = "referral"
    ADJUSTMENT = "adjustment"
    REFUND = "refund"


class EarningStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    PAID = "paid"
    CANCELLED = "cancelled"


class NotificationType(str, Enum):
    NEW_ORDER = "new_order"
    ORDER_APPROVED = "order_approved"
    ORDER_CANCELLED = "order_cancelled"
    PAYMENT_SENT = "payment_sent"
    PAYMENT_RECEIVED = "payment_received"


class NotificationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class CommissionScope(str, Enum):
    GLOBAL = "global"
    PUBLISHER = "publisher"


class EmailLogStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    PARSED = "parsed"
    RETRYING = "retrying"
    FAILED = "failed"


class ReviewQueueType(str, Enum):
    LOW_CONFIDENCE = "low_confidence"
    PROCESSING_FAILED = "processing_failed"
    SHADOW_PUBLISHER = "shadow_publisher"


class ReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CreditType(str, Enum):
    PROMOTIONAL = "promotional"
    REFUND = "refund"
    ADJUSTMENT = "adjustment"
    BONUS = "bonus"


class CreditTransactionType(str, Enum):
    GRANT = "grant"
    USE = "use"
    EXPIRE = "expire"
    REFUND = "refund"


class ImpersonationStatus(str, Enum):
    ACTIVE = "active"
    ENDED = "ended"
