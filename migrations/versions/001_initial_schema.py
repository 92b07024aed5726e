"""Initial schema with all tables.

Revision ID: 001
Revises: 
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # API keys table
    op.create_table(
        'api_keys',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('wallet_address', sa.String(66), nullable=False, index=True),
        sa.Column('key_hash', sa.String(64), unique=True, nullable=False),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
    )

    # 2FA approval requests table
    op.create_table(
        'approval_requests',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('wallet_address', sa.String(66), nullable=False, index=True),
        sa.Column('action', sa.String(64), nullable=False),
        sa.Column('token', sa.String(64), nullable=False),
        sa.Column('amount', sa.String(80), nullable=True),
        sa.Column('recipient', sa.String(66), nullable=True),
        sa.Column('calls_json', sa.Text(), nullable=False),
        sa.Column('sig1_json', sa.Text(), nullable=False),
        sa.Column('nonce', sa.String(80), nullable=False),
        sa.Column('resource_bounds_json', sa.Text(), nullable=False),
        sa.Column('tx_hash', sa.String(66), nullable=False),
        sa.Column('status', sa.String(32), default='pending', index=True),
        sa.Column('final_tx_hash', sa.String(66), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now(), index=True),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_approval_requests_wallet_status', 'approval_requests', ['wallet_address', 'status'])

    # Ward approval requests table
    op.create_table(
        'ward_approval_requests',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('ward_address', sa.String(66), nullable=False, index=True),
        sa.Column('guardian_address', sa.String(66), nullable=False, index=True),
        sa.Column('action', sa.String(64), nullable=False),
        sa.Column('token', sa.String(64), nullable=False),
        sa.Column('amount', sa.String(80), nullable=True),
        sa.Column('amount_unit', sa.String(32), nullable=True),
        sa.Column('recipient', sa.String(66), nullable=True),
        sa.Column('calls_json', sa.Text(), nullable=False),
        sa.Column('nonce', sa.String(80), nullable=False),
        sa.Column('resource_bounds_json', sa.Text(), nullable=False),
        sa.Column('tx_hash', sa.String(66), nullable=False, index=True),
        sa.Column('ward_sig_json', sa.Text(), nullable=False),
        sa.Column('ward_2fa_sig_json', sa.Text(), nullable=True),
        sa.Column('guardian_sig_json', sa.Text(), nullable=True),
        sa.Column('guardian_2fa_sig_json', sa.Text(), nullable=True),
        sa.Column('needs_ward_2fa', sa.Boolean(), nullable=False),
        sa.Column('needs_guardian', sa.Boolean(), nullable=False),
        sa.Column('needs_guardian_2fa', sa.Boolean(), nullable=False),
        sa.Column('status', sa.String(32), default='pending_ward_sig', index=True),
        sa.Column('event_version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('final_tx_hash', sa.String(66), nullable=True, index=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now(), index=True),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), index=True),
    )
    op.create_index('ix_ward_approvals_guardian_status', 'ward_approval_requests', ['guardian_address', 'status'])
    op.create_index('ix_ward_approvals_ward_status', 'ward_approval_requests', ['ward_address', 'status'])

    # Transactions table
    op.create_table(
        'transactions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('wallet_address', sa.String(66), nullable=False, index=True),
        sa.Column('tx_hash', sa.String(66), nullable=False, index=True),
        sa.Column('type', sa.String(64), nullable=False),
        sa.Column('token', sa.String(64), nullable=False),
        sa.Column('amount', sa.String(80), nullable=True),
        sa.Column('amount_unit', sa.String(32), nullable=True),
        sa.Column('recipient', sa.String(66), nullable=True),
        sa.Column('recipient_name', sa.String(255), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('status', sa.String(16), default='pending', index=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('account_type', sa.String(16), default='normal'),
        sa.Column('ward_address', sa.String(66), nullable=True, index=True),
        sa.Column('fee', sa.String(80), nullable=True),
        sa.Column('network', sa.String(32), nullable=False),
        sa.Column('platform', sa.String(32), nullable=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now(), index=True),
    )
    op.create_index('ix_transactions_wallet_created', 'transactions', ['wallet_address', 'created_at'])

    # Swap executions table
    op.create_table(
        'swap_executions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('execution_id', sa.String(128), unique=True, nullable=False),
        sa.Column('wallet_address', sa.String(66), nullable=False, index=True),
        sa.Column('ward_address', sa.String(66), nullable=True, index=True),
        sa.Column('tx_hash', sa.String(66), nullable=True, index=True),
        sa.Column('primary_tx_hash', sa.String(66), nullable=True),
        sa.Column('tx_hashes', sa.JSON(), nullable=True),
        sa.Column('provider', sa.String(64), nullable=False),
        sa.Column('sell_token', sa.String(64), nullable=False),
        sa.Column('buy_token', sa.String(64), nullable=False),
        sa.Column('sell_amount_wei', sa.String(80), nullable=False),
        sa.Column('estimated_buy_amount_wei', sa.String(80), nullable=False),
        sa.Column('min_buy_amount_wei', sa.String(80), nullable=False),
        sa.Column('buy_actual_amount_wei', sa.String(80), nullable=True),
        sa.Column('failure_step_key', sa.String(64), nullable=True),
        sa.Column('failure_reason', sa.Text(), nullable=True),
        sa.Column('route_meta', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(16), default='pending'),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now(), index=True),
    )

    # Swap execution steps table
    op.create_table(
        'swap_execution_steps',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('execution_id', sa.String(128), nullable=False, index=True),
        sa.Column('step_key', sa.String(64), nullable=False),
        sa.Column('step_order', sa.Integer(), nullable=False),
        sa.Column('attempt', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(16), default='pending'),
        sa.Column('tx_hash', sa.String(66), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('finished_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now()),
        sa.UniqueConstraint('execution_id', 'step_key', 'attempt', name='uq_swap_steps_execution_step_attempt'),
    )

    # Ward configs table
    op.create_table(
        'ward_configs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('ward_address', sa.String(66), unique=True, nullable=False),
        sa.Column('guardian_address', sa.String(66), nullable=False, index=True),
        sa.Column('status', sa.String(16), default='active'),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    # Ward approval events outbox table
    op.create_table(
        'ward_approval_events_outbox',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('approval_id', sa.String(36), nullable=False, index=True),
        sa.Column('event_version', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(64), nullable=False),
        sa.Column('target_wallets', sa.JSON(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(16), default='pending'),
        sa.Column('attempts', sa.Integer(), default=0),
        sa.Column('next_attempt_at', sa.DateTime(), nullable=True),
        sa.Column('processing_until', sa.DateTime(), nullable=True),
        sa.Column('lease_token', sa.String(36), nullable=True),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now()),
        sa.UniqueConstraint('approval_id', 'event_version', 'event_type', name='uq_outbox_approval_version_type'),
    )
    op.create_index('ix_outbox_status_next_attempt', 'ward_approval_events_outbox', ['status', 'next_attempt_at'])


def downgrade() -> None:
    op.drop_table('ward_approval_events_outbox')
    op.drop_table('ward_configs')
    op.drop_table('swap_execution_steps')
    op.drop_table('swap_executions')
    op.drop_table('transactions')
    op.drop_table('ward_approval_requests')
    op.drop_table('approval_requests')
    op.drop_table('api_keys')
