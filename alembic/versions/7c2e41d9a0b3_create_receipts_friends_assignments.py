"""create receipts, receipt_items, friends and item_assignments tables

Revision ID: 7c2e41d9a0b3
Revises:
Create Date: 2026-10-18 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7c2e41d9a0b3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'receipts',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('store_name', sa.String(255), nullable=True),
        sa.Column('receipt_date', sa.Date(), nullable=True),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=True),
        sa.Column('tax', sa.Numeric(12, 2), nullable=True),
        sa.Column('tip', sa.Numeric(12, 2), nullable=True),
        sa.Column('discount', sa.Numeric(12, 2), nullable=True),
        sa.Column('total', sa.Numeric(12, 2), nullable=True),
        sa.Column('image_ref', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_table(
        'receipt_items',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('receipt_id', sa.String(), sa.ForeignKey('receipts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(500), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=True),
        sa.Column('confidence', sa.String(10), nullable=True),
    )
    op.create_index('ix_receipt_items_receipt_id', 'receipt_items', ['receipt_id'])
    op.create_table(
        'friends',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('handle', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_friends_handle', 'friends', ['handle'], unique=True)
    op.create_table(
        'item_assignments',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('item_id', sa.String(), sa.ForeignKey('receipt_items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('friend_id', sa.String(), sa.ForeignKey('friends.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.UniqueConstraint('item_id', 'friend_id'),
    )


def downgrade() -> None:
    op.drop_table('item_assignments')
    op.drop_index('ix_friends_handle', table_name='friends')
    op.drop_table('friends')
    op.drop_index('ix_receipt_items_receipt_id', table_name='receipt_items')
    op.drop_table('receipt_items')
    op.drop_table('receipts')
