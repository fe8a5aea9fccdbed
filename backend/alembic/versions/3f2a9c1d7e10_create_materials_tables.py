"""Create products, withdrawals, admins and logs tables

Revision ID: 3f2a9c1d7e10
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '3f2a9c1d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

category_enum = sa.Enum('grafico', 'estrutura_lojas', 'brindes', name='category')
kind_enum = sa.Enum('WITHDRAWAL', 'MANUAL_ADJUSTMENT', name='withdrawalkind')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'admins',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_admins_id', 'admins', ['id'])
    op.create_index('ix_admins_email', 'admins', ['email'], unique=True)

    op.create_table(
        'produtos',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('category', category_enum, nullable=False),
        sa.Column('available_quantity', sa.Integer(), nullable=False),
        sa.Column('image_1_url', sa.String(), nullable=True),
        sa.Column('image_2_url', sa.String(), nullable=True),
        sa.Column('image_3_url', sa.String(), nullable=True),
        sa.Column('cover_image_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('available_quantity >= 0'),
    )
    op.create_index('ix_produtos_id', 'produtos', ['id'])
    op.create_index('ix_produtos_name', 'produtos', ['name'])
    op.create_index('ix_produtos_category', 'produtos', ['category'])

    op.create_table(
        'retiradas',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('produtos.id', ondelete='SET NULL'), nullable=True),
        sa.Column('product_name', sa.String(), nullable=True),
        sa.Column('product_category', sa.String(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('destination', sa.String(), nullable=False),
        sa.Column('supervisor', sa.String(), nullable=False),
        sa.Column('photo_url', sa.String(), nullable=True),
        sa.Column('signature_url', sa.String(), nullable=True),
        sa.Column('kind', kind_enum, nullable=False, server_default='WITHDRAWAL'),
        sa.Column('reason', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('quantity > 0'),
    )
    op.create_index('ix_retiradas_id', 'retiradas', ['id'])
    op.create_index('ix_retiradas_product_id', 'retiradas', ['product_id'])
    op.create_index('ix_retiradas_kind', 'retiradas', ['kind'])
    op.create_index('ix_retiradas_created_at', 'retiradas', ['created_at'])

    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('ts', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('admin_id', sa.Integer(), sa.ForeignKey('admins.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.String(50)),
        sa.Column('resource', sa.String(50)),
        sa.Column('status', sa.String(20)),
        sa.Column('ip', sa.String(64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
    )
    op.create_index('ix_logs_id', 'logs', ['id'])
    op.create_index('ix_logs_ts', 'logs', ['ts'])
    op.create_index('ix_logs_action', 'logs', ['action'])
    op.create_index('ix_logs_resource', 'logs', ['resource'])
    op.create_index('ix_logs_status', 'logs', ['status'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('logs')
    op.drop_table('retiradas')
    op.drop_table('produtos')
    op.drop_table('admins')
    kind_enum.drop(op.get_bind(), checkfirst=True)
    category_enum.drop(op.get_bind(), checkfirst=True)
