# alembic/versions/001_initial_tables.py
"""initial tables

Revision ID: 001_initial_tables
Create Date: 2026-10-17 10:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

revision = '001_initial_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create chats table
    op.create_table(
        'chats',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('public_id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('model', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)
    )
    op.create_index('ix_chats_public_id', 'chats', ['public_id'], unique=True)

    # Create messages table, owned by chats
    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('chat_id', sa.Integer(), sa.ForeignKey('chats.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('model', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)
    )
    op.create_index('ix_messages_chat_id_created_at', 'messages', ['chat_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('ix_messages_chat_id_created_at', table_name='messages')
    op.drop_table('messages')
    op.drop_index('ix_chats_public_id', table_name='chats')
    op.drop_table('chats')
