"""create orders table

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-19 10:12:41.318204

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3f1c2a9b7d10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # 创建orders表
    op.create_table('orders',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('order_number', sa.String(length=50), nullable=False),
        sa.Column('bottom_number', sa.String(length=50), nullable=False),
        sa.Column('date', sa.String(length=32), nullable=False),
        sa.Column('diameter', sa.String(length=32), nullable=False),
        sa.Column('thickness', sa.String(length=32), nullable=False),
        sa.Column('type_size', sa.String(length=100), nullable=False),
        sa.Column('cutting', sa.String(length=100), nullable=False),
        sa.Column('material', sa.String(length=100), nullable=False),
        sa.Column('heat_treatment', sa.String(length=100), nullable=False),
        sa.Column('treatment_date', sa.String(length=32), nullable=False),
        sa.Column('executors', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_orders_id'), 'orders', ['id'], unique=False)
    op.create_index(op.f('ix_orders_order_number'), 'orders', ['order_number'], unique=True)
    op.create_index(op.f('ix_orders_bottom_number'), 'orders', ['bottom_number'], unique=False)
    op.create_index(op.f('ix_orders_date'), 'orders', ['date'], unique=False)
    op.create_index(op.f('ix_orders_material'), 'orders', ['material'], unique=False)
    op.create_index(op.f('ix_orders_created_at'), 'orders', ['created_at'], unique=False)


def downgrade():
    # 删除orders表
    op.drop_index(op.f('ix_orders_created_at'), table_name='orders')
    op.drop_index(op.f('ix_orders_material'), table_name='orders')
    op.drop_index(op.f('ix_orders_date'), table_name='orders')
    op.drop_index(op.f('ix_orders_bottom_number'), table_name='orders')
    op.drop_index(op.f('ix_orders_order_number'), table_name='orders')
    op.drop_index(op.f('ix_orders_id'), table_name='orders')
    op.drop_table('orders')
