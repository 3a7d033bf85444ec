"""baseline

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19 09:12:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(), unique=True, nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('username', sa.String(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('wallet_address', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=True),
        sa.Column('is_premium', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )

    # --- ideas ---
    op.create_table(
        'ideas',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('image', sa.String(), nullable=True),
        sa.Column('is_nft', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('minted_by', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_blurred', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_by', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('remix_of_id', sa.String(36), sa.ForeignKey('ideas.id', ondelete='SET NULL'), nullable=True),
        sa.Column('ownership_mode', sa.String(), nullable=False, server_default='showcase'),
        sa.Column('price_cents', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_ideas_minted_by', 'ideas', ['minted_by'])
    op.create_index('ix_ideas_created_by', 'ideas', ['created_by'])
    op.create_index('ix_ideas_remix_of_id', 'ideas', ['remix_of_id'])
    op.create_index('ix_ideas_created_at', 'ideas', ['created_at'])

    # --- comments / upvotes ---
    op.create_table(
        'comments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('idea_id', sa.String(36), sa.ForeignKey('ideas.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('comment_text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_comments_idea_id', 'comments', ['idea_id'])
    op.create_index('ix_comments_user_id', 'comments', ['user_id'])

    op.create_table(
        'upvotes',
        sa.Column('idea_id', sa.String(36), sa.ForeignKey('ideas.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )

    # --- wallets ---
    op.create_table(
        'creator_wallets',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('balance_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_earned_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_withdrawn_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_creator_wallets_user_id', 'creator_wallets', ['user_id'], unique=True)

    op.create_table(
        'wallet_transactions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('wallet_id', sa.String(36), sa.ForeignKey('creator_wallets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('idea_id', sa.String(36), sa.ForeignKey('ideas.id', ondelete='SET NULL'), nullable=True),
        sa.Column('stripe_session_id', sa.String(), unique=True, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_wallet_transactions_wallet_id', 'wallet_transactions', ['wallet_id'])
    op.create_index('ix_wallet_tx_wallet_ts', 'wallet_transactions', ['wallet_id', 'created_at'])

    op.create_table(
        'withdrawal_requests',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('wallet_id', sa.String(36), sa.ForeignKey('creator_wallets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('bank_details', sa.JSON(), nullable=True),
        sa.Column('requested_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_withdrawal_requests_wallet_id', 'withdrawal_requests', ['wallet_id'])

    # --- collaboration ---
    op.create_table(
        'collab_requests',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('idea_id', sa.String(36), sa.ForeignKey('ideas.id', ondelete='CASCADE'), nullable=False),
        sa.Column('investor_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('linkedin_url', sa.String(), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('accepted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_collab_requests_idea_id', 'collab_requests', ['idea_id'])
    op.create_index('ix_collab_requests_investor_id', 'collab_requests', ['investor_id'])

    op.create_table(
        'partnership_requests',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('idea_id', sa.String(36), sa.ForeignKey('ideas.id', ondelete='CASCADE'), nullable=False),
        sa.Column('creator_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('investor_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('investor_name', sa.String(), nullable=False),
        sa.Column('investor_email', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('agreed_nda', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('nda_signature', sa.String(), nullable=False),
        sa.Column('payment_amount_cents', sa.Integer(), nullable=False),
        sa.Column('payment_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('stripe_session_id', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='awaiting_payment'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_partnership_requests_idea_id', 'partnership_requests', ['idea_id'])
    op.create_index('ix_partnership_requests_creator_id', 'partnership_requests', ['creator_id'])
    op.create_index('ix_partnership_requests_investor_id', 'partnership_requests', ['investor_id'])
    op.create_index('ix_partnership_requests_stripe_session_id', 'partnership_requests', ['stripe_session_id'])
    op.create_index('ix_partnership_creator_status', 'partnership_requests', ['creator_id', 'status'])

    # --- stripe mirror ---
    op.create_table(
        'stripe_customers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('customer_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_stripe_customers_user_id', 'stripe_customers', ['user_id'], unique=True)
    op.create_index('ix_stripe_customers_customer_id', 'stripe_customers', ['customer_id'], unique=True)

    op.create_table(
        'stripe_orders',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('checkout_session_id', sa.String(), nullable=False),
        sa.Column('payment_intent_id', sa.String(), nullable=True),
        sa.Column('customer_id', sa.String(), nullable=True),
        sa.Column('amount_subtotal', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('amount_total', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(), nullable=False, server_default='usd'),
        sa.Column('payment_status', sa.String(), nullable=False, server_default='unpaid'),
        sa.Column('status', sa.String(), nullable=False, server_default='completed'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_stripe_orders_checkout_session_id', 'stripe_orders', ['checkout_session_id'], unique=True)
    op.create_index('ix_stripe_orders_payment_intent_id', 'stripe_orders', ['payment_intent_id'])

    op.create_table(
        'stripe_subscriptions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('customer_id', sa.String(), nullable=False),
        sa.Column('subscription_id', sa.String(), nullable=True),
        sa.Column('price_id', sa.String(), nullable=True),
        sa.Column('current_period_start', sa.Integer(), nullable=True),
        sa.Column('current_period_end', sa.Integer(), nullable=True),
        sa.Column('cancel_at_period_end', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(), nullable=False, server_default='not_started'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_stripe_subscriptions_customer_id', 'stripe_subscriptions', ['customer_id'], unique=True)

    op.create_table(
        'stripe_payout_accounts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('stripe_account_id', sa.String(), nullable=True),
        sa.Column('account_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_stripe_payout_accounts_user_id', 'stripe_payout_accounts', ['user_id'], unique=True)
    op.create_index('ix_stripe_payout_accounts_stripe_account_id', 'stripe_payout_accounts', ['stripe_account_id'])


def downgrade() -> None:
    op.drop_table('stripe_payout_accounts')
    op.drop_table('stripe_subscriptions')
    op.drop_table('stripe_orders')
    op.drop_table('stripe_customers')
    op.drop_table('partnership_requests')
    op.drop_table('collab_requests')
    op.drop_table('withdrawal_requests')
    op.drop_table('wallet_transactions')
    op.drop_table('creator_wallets')
    op.drop_table('upvotes')
    op.drop_table('comments')
    op.drop_table('ideas')
    op.drop_table('users')
