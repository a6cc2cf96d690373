"""user_feedback: add sort_order for drag-and-drop ordering

Revision ID: 0002_user_feedback_sort_order
Revises: 0001_initial_schema
Create Date: 2025-12-08 14:37:05.880213

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0002_user_feedback_sort_order"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table("user_feedback", schema=None) as batch_op:
        batch_op.add_column(sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")))
        batch_op.create_index("ix_user_feedback_kind_sort", ["kind", "sort_order"], unique=False)


def downgrade():
    with op.batch_alter_table("user_feedback", schema=None) as batch_op:
        batch_op.drop_index("ix_user_feedback_kind_sort")
        batch_op.drop_column("sort_order")
