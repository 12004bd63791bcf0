"""Initial schema

Revision ID: 0001_initial_schema
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
    ]


def upgrade() -> None:
    """Identity, catalogue, ordering, outreach and credits tables"""

    # Identity
    op.create_table('users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('user_type', sa.String(length=20), server_default='account', nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('company_name', sa.String(), nullable=True),
        sa.Column('status', sa.String(length=30), server_default='pending_verification', nullable=False),
        sa.Column('role', sa.String(length=20), server_default='user', nullable=False),
        sa.Column('email_verified', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('email_verification_token', sa.String(), nullable=True),
        sa.Column('password_reset_token', sa.String(), nullable=True),
        sa.Column('password_reset_expires_at', sa.DateTime(), nullable=True),
        sa.Column('password_reset_used', sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_user_type', 'users', ['user_type'])
    op.create_index('ix_users_email_verification_token', 'users', ['email_verification_token'])
    op.create_index('ix_users_password_reset_token', 'users', ['password_reset_token'])

    op.create_table('impersonation_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('admin_user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('target_user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('target_user_type', sa.String(length=20), nullable=False),
        sa.Column('reason', sa.String(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('user_agent', sa.String(), nullable=True),
        sa.Column('started_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_impersonation_logs_admin_user_id', 'impersonation_logs', ['admin_user_id'])
    op.create_index('ix_impersonation_logs_target_user_id', 'impersonation_logs', ['target_user_id'])
    op.create_index('ix_impersonation_logs_status', 'impersonation_logs', ['status'])

    # Clients
    op.create_table('clients',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('account_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('website', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clients_account_id', 'clients', ['account_id'])

    op.create_table('target_pages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('keywords', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_target_pages_client_id', 'target_pages', ['client_id'])

    # Publishers and websites
    op.create_table('publishers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('contact_name', sa.String(), nullable=True),
        sa.Column('company_name', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('account_status', sa.String(length=20), server_default='active', nullable=False),
        sa.Column('source', sa.String(length=30), server_default='signup', nullable=False),
        sa.Column('confidence_score', sa.Float(), nullable=True),
        sa.Column('invitation_token', sa.String(), nullable=True),
        sa.Column('invitation_expires_at', sa.DateTime(), nullable=True),
        sa.Column('claimed_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
        sa.UniqueConstraint('invitation_token'),
    )
    op.create_index('ix_publishers_email', 'publishers', ['email'])
    op.create_index('ix_publishers_account_status', 'publishers', ['account_status'])

    op.create_table('publisher_offerings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('publisher_id', sa.Uuid(), sa.ForeignKey('publishers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('offering_type', sa.String(length=30), nullable=False),
        sa.Column('offering_name', sa.String(), nullable=True),
        sa.Column('base_price', sa.Integer(), nullable=True),
        sa.Column('currency', sa.String(length=3), server_default='USD', nullable=False),
        sa.Column('turnaround_days', sa.Integer(), nullable=True),
        sa.Column('current_availability', sa.String(length=20), server_default='available', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('attributes', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_publisher_offerings_publisher_id', 'publisher_offerings', ['publisher_id'])

    op.create_table('websites',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('domain', sa.String(), nullable=False),
        sa.Column('domain_rating', sa.Integer(), nullable=True),
        sa.Column('total_traffic', sa.Integer(), nullable=True),
        sa.Column('niche', sa.String(), nullable=True),
        sa.Column('categories', sa.JSON(), nullable=True),
        sa.Column('source', sa.String(length=30), server_default='manual', nullable=False),
        sa.Column('guest_post_cost', sa.Integer(), nullable=True),
        sa.Column('derived_guest_post_cost', sa.Integer(), nullable=True),
        sa.Column('price_calculation_method', sa.String(length=30), nullable=True),
        sa.Column('price_calculated_at', sa.DateTime(), nullable=True),
        sa.Column('pricing_strategy', sa.String(length=20), server_default='min_price', nullable=False),
        sa.Column('custom_offering_id', sa.Uuid(), sa.ForeignKey('publisher_offerings.id'), nullable=True),
        sa.Column('price_override_offering_id', sa.Uuid(), sa.ForeignKey('publisher_offerings.id'), nullable=True),
        sa.Column('selected_offering_id', sa.Uuid(), sa.ForeignKey('publisher_offerings.id'), nullable=True),
        sa.Column('selected_publisher_id', sa.Uuid(), sa.ForeignKey('publishers.id'), nullable=True),
        sa.Column('selected_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_websites_domain', 'websites', ['domain'], unique=True)

    op.create_table('publisher_offering_relationships',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('publisher_id', sa.Uuid(), sa.ForeignKey('publishers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('website_id', sa.Uuid(), sa.ForeignKey('websites.id', ondelete='CASCADE'), nullable=False),
        sa.Column('offering_id', sa.Uuid(), sa.ForeignKey('publisher_offerings.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('verification_status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('priority_rank', sa.Integer(), server_default='100', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_publisher_offering_relationships_publisher_id', 'publisher_offering_relationships', ['publisher_id'])
    op.create_index('ix_publisher_offering_relationships_website_id', 'publisher_offering_relationships', ['website_id'])

    op.create_table('commission_configurations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('scope_type', sa.String(length=20), server_default='global', nullable=False),
        sa.Column('scope_id', sa.Uuid(), nullable=True),
        sa.Column('commission_percent', sa.Float(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('bulk_analysis_domains',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('project_id', sa.Uuid(), nullable=True),
        sa.Column('domain', sa.String(), nullable=False),
        sa.Column('target_page_ids', sa.JSON(), nullable=True),
        sa.Column('keyword_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('qualification_status', sa.String(length=30), server_default='pending', nullable=False),
        sa.Column('checked_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('checked_at', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('selected_target_page_id', sa.Uuid(), nullable=True),
        sa.Column('ai_qualification_reasoning', sa.Text(), nullable=True),
        sa.Column('was_manually_qualified', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('manually_qualified_by', sa.Uuid(), nullable=True),
        sa.Column('manually_qualified_at', sa.DateTime(), nullable=True),
        sa.Column('was_human_verified', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('human_verified_by', sa.Uuid(), nullable=True),
        sa.Column('human_verified_at', sa.DateTime(), nullable=True),
        sa.Column('has_workflow', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('workflow_id', sa.Uuid(), nullable=True),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('client_id', 'domain', name='uq_bulk_analysis_client_domain'),
    )
    op.create_index('ix_bulk_analysis_domains_client_id', 'bulk_analysis_domains', ['client_id'])
    op.create_index('ix_bulk_analysis_domains_project_id', 'bulk_analysis_domains', ['project_id'])
    op.create_index('ix_bulk_analysis_domains_qualification_status', 'bulk_analysis_domains', ['qualification_status'])

    # Orders
    op.create_table('orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('account_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('status', sa.String(length=30), server_default='draft', nullable=False),
        sa.Column('includes_client_review', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('rush_delivery', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('client_review_fee', sa.Integer(), server_default='0', nullable=False),
        sa.Column('rush_fee', sa.Integer(), server_default='0', nullable=False),
        sa.Column('subtotal', sa.Integer(), server_default='0', nullable=False),
        sa.Column('discount_percent', sa.Float(), server_default='0', nullable=False),
        sa.Column('discount_amount', sa.Integer(), server_default='0', nullable=False),
        sa.Column('total_retail', sa.Integer(), server_default='0', nullable=False),
        sa.Column('total_wholesale', sa.Integer(), server_default='0', nullable=False),
        sa.Column('profit', sa.Integer(), server_default='0', nullable=False),
        sa.Column('credits_applied', sa.Integer(), server_default='0', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('stripe_session_id', sa.String(), nullable=True),
        sa.Column('payment_reference', sa.String(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('invoiced_at', sa.DateTime(), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_account_id', 'orders', ['account_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_stripe_session_id', 'orders', ['stripe_session_id'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])

    op.create_table('order_status_history',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('old_status', sa.String(length=30), nullable=True),
        sa.Column('new_status', sa.String(length=30), nullable=False),
        sa.Column('changed_by', sa.Uuid(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('changed_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_status_history_order_id', 'order_status_history', ['order_id'])

    op.create_table('order_share_tokens',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('permissions', sa.JSON(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('used_at', sa.DateTime(), nullable=True),
        sa.Column('used_by_ip', sa.String(), nullable=True),
        sa.Column('use_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_share_tokens_order_id', 'order_share_tokens', ['order_id'])
    op.create_index('ix_order_share_tokens_token', 'order_share_tokens', ['token'], unique=True)

    op.create_table('pricing_rules',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('min_quantity', sa.Integer(), nullable=False),
        sa.Column('max_quantity', sa.Integer(), nullable=True),
        sa.Column('discount_percent', sa.Float(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pricing_rules_client_id', 'pricing_rules', ['client_id'])

    op.create_table('order_line_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('client_id', sa.Uuid(), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('added_by', sa.Uuid(), nullable=True),
        sa.Column('status', sa.String(length=30), server_default='draft', nullable=False),
        sa.Column('target_page_id', sa.Uuid(), nullable=True),
        sa.Column('target_page_url', sa.String(), nullable=True),
        sa.Column('anchor_text', sa.String(), nullable=True),
        sa.Column('assigned_domain_id', sa.Uuid(), nullable=True),
        sa.Column('assigned_domain', sa.String(), nullable=True),
        sa.Column('assigned_at', sa.DateTime(), nullable=True),
        sa.Column('assigned_by', sa.Uuid(), nullable=True),
        sa.Column('estimated_price', sa.Integer(), nullable=True),
        sa.Column('wholesale_price', sa.Integer(), nullable=True),
        sa.Column('approved_price', sa.Integer(), nullable=True),
        sa.Column('service_fee', sa.Integer(), server_default='0', nullable=False),
        sa.Column('client_review_status', sa.String(length=20), nullable=True),
        sa.Column('client_reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('client_review_notes', sa.Text(), nullable=True),
        sa.Column('display_order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('version', sa.Integer(), server_default='1', nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_by', sa.Uuid(), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('workflow_id', sa.Uuid(), nullable=True),
        sa.Column('delivered_at', sa.DateTime(), nullable=True),
        sa.Column('website_id', sa.Uuid(), sa.ForeignKey('websites.id'), nullable=True),
        sa.Column('publisher_id', sa.Uuid(), sa.ForeignKey('publishers.id'), nullable=True),
        sa.Column('publisher_offering_id', sa.Uuid(), sa.ForeignKey('publisher_offerings.id'), nullable=True),
        sa.Column('publisher_price', sa.Integer(), nullable=True),
        sa.Column('platform_fee', sa.Integer(), nullable=True),
        sa.Column('publisher_status', sa.String(length=20), nullable=True),
        sa.Column('publisher_notified_at', sa.DateTime(), nullable=True),
        sa.Column('publisher_accepted_at', sa.DateTime(), nullable=True),
        sa.Column('publisher_submitted_at', sa.DateTime(), nullable=True),
        sa.Column('published_url', sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_line_items_order_id', 'order_line_items', ['order_id'])
    op.create_index('ix_order_line_items_client_id', 'order_line_items', ['client_id'])
    op.create_index('ix_order_line_items_status', 'order_line_items', ['status'])
    op.create_index('ix_order_line_items_publisher_id', 'order_line_items', ['publisher_id'])
    op.create_index('ix_order_line_items_publisher_status', 'order_line_items', ['publisher_status'])

    op.create_table('line_item_changes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('line_item_id', sa.Uuid(), sa.ForeignKey('order_line_items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('change_type', sa.String(length=30), nullable=False),
        sa.Column('previous_value', sa.JSON(), nullable=True),
        sa.Column('new_value', sa.JSON(), nullable=True),
        sa.Column('changed_by', sa.Uuid(), nullable=True),
        sa.Column('change_reason', sa.Text(), nullable=True),
        sa.Column('batch_id', sa.Uuid(), nullable=True),
        sa.Column('changed_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_line_item_changes_line_item_id', 'line_item_changes', ['line_item_id'])
    op.create_index('ix_line_item_changes_order_id', 'line_item_changes', ['order_id'])
    op.create_index('ix_line_item_changes_batch_id', 'line_item_changes', ['batch_id'])

    op.create_table('workflows',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('line_item_id', sa.Uuid(), sa.ForeignKey('order_line_items.id'), nullable=True),
        sa.Column('client_id', sa.Uuid(), sa.ForeignKey('clients.id'), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        sa.Column('content', sa.JSON(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_workflows_order_id', 'workflows', ['order_id'])
    op.create_index('ix_workflows_line_item_id', 'workflows', ['line_item_id'])

    # Publisher fulfillment
    op.create_table('publisher_earnings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('publisher_id', sa.Uuid(), sa.ForeignKey('publishers.id'), nullable=False),
        sa.Column('order_line_item_id', sa.Uuid(), sa.ForeignKey('order_line_items.id'), nullable=True),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id'), nullable=True),
        sa.Column('earning_type', sa.String(length=30), nullable=False),
        sa.Column('gross_amount', sa.Integer(), nullable=False),
        sa.Column('platform_fee_amount', sa.Integer(), server_default='0', nullable=False),
        sa.Column('net_amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), server_default='USD', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('payment_batch_id', sa.Uuid(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_publisher_earnings_publisher_id', 'publisher_earnings', ['publisher_id'])
    op.create_index('ix_publisher_earnings_order_line_item_id', 'publisher_earnings', ['order_line_item_id'])
    op.create_index('ix_publisher_earnings_status', 'publisher_earnings', ['status'])

    op.create_table('publisher_order_notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('publisher_id', sa.Uuid(), sa.ForeignKey('publishers.id'), nullable=False),
        sa.Column('order_line_item_id', sa.Uuid(), sa.ForeignKey('order_line_items.id'), nullable=True),
        sa.Column('notification_type', sa.String(length=30), nullable=False),
        sa.Column('email_to', sa.String(), nullable=False),
        sa.Column('subject', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_publisher_order_notifications_publisher_id', 'publisher_order_notifications', ['publisher_id'])
    op.create_index('ix_publisher_order_notifications_status', 'publisher_order_notifications', ['status'])

    # Outreach import
    op.create_table('email_processing_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('webhook_id', sa.String(), nullable=True),
        sa.Column('campaign_id', sa.String(), nullable=True),
        sa.Column('campaign_name', sa.String(), nullable=True),
        sa.Column('campaign_type', sa.String(length=20), server_default='outreach', nullable=True),
        sa.Column('email_from', sa.String(), nullable=False),
        sa.Column('email_to', sa.String(), nullable=True),
        sa.Column('email_subject', sa.String(), nullable=True),
        sa.Column('email_message_id', sa.String(), nullable=True),
        sa.Column('received_at', sa.DateTime(), nullable=True),
        sa.Column('raw_content', sa.Text(), nullable=False),
        sa.Column('html_content', sa.Text(), nullable=True),
        sa.Column('thread_id', sa.String(), nullable=True),
        sa.Column('reply_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('original_outreach', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('parsed_data', sa.JSON(), nullable=True),
        sa.Column('confidence_score', sa.Float(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('retry_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('publisher_id', sa.Uuid(), sa.ForeignKey('publishers.id'), nullable=True),
        sa.Column('processing_duration_ms', sa.Integer(), nullable=True),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_email_processing_logs_webhook_id', 'email_processing_logs', ['webhook_id'])
    op.create_index('ix_email_processing_logs_email_from', 'email_processing_logs', ['email_from'])
    op.create_index('ix_email_processing_logs_status', 'email_processing_logs', ['status'])

    op.create_table('email_review_queue',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('log_id', sa.Uuid(), sa.ForeignKey('email_processing_logs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('publisher_id', sa.Uuid(), sa.ForeignKey('publishers.id'), nullable=True),
        sa.Column('queue_type', sa.String(length=30), nullable=False),
        sa.Column('priority', sa.Integer(), server_default='50', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('suggested_actions', sa.JSON(), nullable=True),
        sa.Column('missing_fields', sa.JSON(), nullable=True),
        sa.Column('auto_approve_at', sa.DateTime(), nullable=True),
        sa.Column('reviewed_by', sa.Uuid(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_email_review_queue_log_id', 'email_review_queue', ['log_id'])
    op.create_index('ix_email_review_queue_status', 'email_review_queue', ['status'])

    op.create_table('publisher_automation_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email_log_id', sa.Uuid(), sa.ForeignKey('email_processing_logs.id', ondelete='SET NULL'), nullable=True),
        sa.Column('publisher_id', sa.Uuid(), sa.ForeignKey('publishers.id'), nullable=True),
        sa.Column('action', sa.String(length=40), nullable=False),
        sa.Column('action_status', sa.String(length=20), server_default='success', nullable=False),
        sa.Column('previous_data', sa.JSON(), nullable=True),
        sa.Column('new_data', sa.JSON(), nullable=True),
        sa.Column('fields_updated', sa.JSON(), nullable=True),
        sa.Column('confidence', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_publisher_automation_logs_publisher_id', 'publisher_automation_logs', ['publisher_id'])

    op.create_table('webhook_security_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('webhook_id', sa.String(), nullable=True),
        sa.Column('source', sa.String(length=30), nullable=False),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('signature_valid', sa.Boolean(), nullable=True),
        sa.Column('ip_allowed', sa.Boolean(), nullable=False),
        sa.Column('allowed', sa.Boolean(), nullable=False),
        sa.Column('rejection_reason', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    # Credits
    op.create_table('account_credits',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('account_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('credit_type', sa.String(length=20), nullable=False),
        sa.Column('source', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('minimum_order_amount', sa.Integer(), nullable=True),
        sa.Column('maximum_usage_amount', sa.Integer(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('used_amount', sa.Integer(), server_default='0', nullable=False),
        sa.Column('remaining_amount', sa.Integer(), nullable=False),
        sa.Column('is_fully_used', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('granted_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_account_credits_account_id', 'account_credits', ['account_id'])

    op.create_table('credit_transactions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('account_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('credit_id', sa.Uuid(), sa.ForeignKey('account_credits.id'), nullable=True),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id'), nullable=True),
        sa.Column('transaction_type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('previous_balance', sa.Integer(), nullable=False),
        sa.Column('new_balance', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_credit_transactions_account_id', 'credit_transactions', ['account_id'])


def downgrade() -> None:
    """Drop every table in reverse dependency order"""
    for table in (
        'credit_transactions', 'account_credits', 'webhook_security_logs', 'publisher_automation_logs',
        'email_review_queue', 'email_processing_logs', 'publisher_order_notifications', 'publisher_earnings',
        'workflows', 'line_item_changes', 'order_line_items', 'pricing_rules', 'order_share_tokens',
        'order_status_history', 'orders', 'bulk_analysis_domains', 'commission_configurations',
        'publisher_offering_relationships', 'websites', 'publisher_offerings', 'publishers',
        'target_pages', 'clients', 'impersonation_logs', 'users',
    ):
        op.drop_table(table)
