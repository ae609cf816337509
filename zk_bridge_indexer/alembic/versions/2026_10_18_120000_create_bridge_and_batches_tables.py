"""create_bridge_and_batches_tables

Revision ID: 2026_10_18_120000
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '2026_10_18_120000'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute('CREATE SCHEMA IF NOT EXISTS domain')

    op.create_table(
        'zkevm_bridge_l1_tokens',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('address', postgresql.BYTEA(), nullable=False),
        sa.Column('symbol', sa.Text(), nullable=True),
        sa.Column('decimals', sa.SmallInteger(), nullable=True),
        sa.Column('inserted_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('address', name='uq_zkevm_bridge_l1_tokens_address'),
        schema='domain',
    )

    op.create_table(
        'zkevm_bridge_operations',
        sa.Column('type', sa.Text(), nullable=False),
        sa.Column('index', sa.BigInteger(), nullable=False),
        sa.Column('l1_transaction_hash', postgresql.BYTEA(), nullable=True),
        sa.Column('l2_transaction_hash', postgresql.BYTEA(), nullable=True),
        sa.Column('l1_token_id', sa.Integer(), nullable=True),
        sa.Column('l2_token_address', postgresql.BYTEA(), nullable=True),
        sa.Column('amount', sa.Numeric(78, 0), nullable=False),
        sa.Column('block_number', sa.BigInteger(), nullable=True),
        sa.Column('block_timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['l1_token_id'], ['domain.zkevm_bridge_l1_tokens.id']),
        sa.PrimaryKeyConstraint('type', 'index'),
        schema='domain',
    )
    op.create_index('ix_zkevm_bridge_operations_l1_tx', 'zkevm_bridge_operations', ['l1_transaction_hash'], schema='domain')
    op.create_index('ix_zkevm_bridge_operations_l2_tx', 'zkevm_bridge_operations', ['l2_transaction_hash'], schema='domain')

    op.create_table(
        'zksync_l1_transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('hash', postgresql.BYTEA(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('hash', name='uq_zksync_l1_transactions_hash'),
        schema='domain',
    )

    op.create_table(
        'zksync_batches',
        sa.Column('number', sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column('status', sa.SmallInteger(), server_default='0', nullable=False),
        sa.Column('commit_id', sa.Integer(), nullable=True),
        sa.Column('prove_id', sa.Integer(), nullable=True),
        sa.Column('execute_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['commit_id'], ['domain.zksync_l1_transactions.id']),
        sa.ForeignKeyConstraint(['prove_id'], ['domain.zksync_l1_transactions.id']),
        sa.ForeignKeyConstraint(['execute_id'], ['domain.zksync_l1_transactions.id']),
        sa.PrimaryKeyConstraint('number'),
        schema='domain',
    )
    for stage in ('commit', 'prove', 'execute'):
        op.create_index(
            f'ix_zksync_batches_{stage}_pending',
            'zksync_batches',
            ['number'],
            schema='domain',
            postgresql_where=sa.text(f'{stage}_id IS NULL'),
        )


def downgrade() -> None:
    for stage in ('commit', 'prove', 'execute'):
        op.drop_index(f'ix_zksync_batches_{stage}_pending', table_name='zksync_batches', schema='domain')
    op.drop_table('zksync_batches', schema='domain')
    op.drop_table('zksync_l1_transactions', schema='domain')
    op.drop_index('ix_zkevm_bridge_operations_l2_tx', table_name='zkevm_bridge_operations', schema='domain')
    op.drop_index('ix_zkevm_bridge_operations_l1_tx', table_name='zkevm_bridge_operations', schema='domain')
    op.drop_table('zkevm_bridge_operations', schema='domain')
    op.drop_table('zkevm_bridge_l1_tokens', schema='domain')
