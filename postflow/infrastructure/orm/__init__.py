"""Infrastructure ORM Models"""

from .user_model import UserModel, ImpersonationLogModel
from .client_model import ClientModel, TargetPageModel
from .website_model import (
    WebsiteModel,
    PublisherModel,
    PublisherOfferingModel,
    PublisherOfferingRelationshipModel,
    CommissionConfigurationModel,
)
from .bulk_analysis_model import BulkAnalysisDomainModel
from .order_model import (
    OrderModel,
    OrderStatusHistoryModel,
    OrderShareTokenModel,
    PricingRuleModel,
    WorkflowModel,
)
from .line_item_model import LineItemModel, LineItemChangeModel
from .earning_model import PublisherEarningModel, PublisherNotificationModel
from .outreach_model import (
    EmailProcessingLogModel,
    EmailReviewQueueModel,
    PublisherAutomationLogModel,
    WebhookSecurityLogModel,
)
from .credit_model import AccountCreditModel, CreditTransactionModel

__all__ = [
    'UserModel',
    'ImpersonationLogModel',
    'ClientModel',
    'TargetPageModel',
    'WebsiteModel',
    'PublisherModel',
    'PublisherOfferingModel',
    'PublisherOfferingRelationshipModel',
    'CommissionConfigurationModel',
    'BulkAnalysisDomainModel',
    'OrderModel',
    'OrderStatusHistoryModel',
    'OrderShareTokenModel',
    'PricingRuleModel',
    'WorkflowModel',
    'LineItemModel',
    'LineItemChangeModel',
    'PublisherEarningModel',
    'PublisherNotificationModel',
    'EmailProcessingLogModel',
    'EmailReviewQueueModel',
    'PublisherAutomationLogModel',
    'WebhookSecurityLogModel',
    'AccountCreditModel',
    'CreditTransactionModel',
]
