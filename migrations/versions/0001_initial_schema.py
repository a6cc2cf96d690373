"""initial schema: boards, tags, roadmap items, feedback, audit log

user_feedback.sort_order arrives in 0002.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-11-03 09:12:41.204118

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

NOW = sa.text("CURRENT_TIMESTAMP")


def upgrade():
    op.create_table(
        "boards",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_boards_name", "boards", ["name"], unique=False)
    op.create_index("ix_boards_sort_order", "boards", ["sort_order"], unique=False)

    op.create_table(
        "tags",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "roadmap_items",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("board_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("source", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("jira_key", sa.String(length=50), nullable=False, server_default=sa.text("''")),
        sa.Column("priority", sa.String(length=8), nullable=False, server_default=sa.text("'P2'")),
        sa.Column("status", sa.String(length=16), nullable=False, server_default=sa.text("'BACKLOG'")),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.ForeignKeyConstraint(["board_id"], ["boards.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_roadmap_items_board_id", "roadmap_items", ["board_id"], unique=False)
    op.create_index("ix_roadmap_items_status_sort", "roadmap_items", ["status", "sort_order"], unique=False)

    op.create_table(
        "item_tags",
        sa.Column("item_id", sa.String(length=36), nullable=False),
        sa.Column("tag_id", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(["item_id"], ["roadmap_items.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("item_id", "tag_id"),
    )
    op.create_index("ix_item_tags_tag", "item_tags", ["tag_id"], unique=False)

    op.create_table(
        "item_images",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("item_id", sa.String(length=36), nullable=False),
        sa.Column("url", sa.String(length=4000), nullable=False),
        sa.Column("caption", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.ForeignKeyConstraint(["item_id"], ["roadmap_items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_item_images_item_id", "item_images", ["item_id"], unique=False)

    op.create_table(
        "user_feedback",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("kind", sa.String(length=16), nullable=False, server_default=sa.text("'FEEDBACK'")),
        sa.Column("user_name", sa.String(length=120), nullable=False, server_default=sa.text("''")),
        sa.Column("email", sa.String(length=200), nullable=False, server_default=sa.text("''")),
        sa.Column("device", sa.String(length=16), nullable=False, server_default=sa.text("'-'")),
        sa.Column("feedback_type", sa.String(length=16), nullable=False, server_default=sa.text("''")),
        sa.Column("source", sa.String(length=16), nullable=False, server_default=sa.text("''")),
        sa.Column("language", sa.String(length=16), nullable=False, server_default=sa.text("''")),
        sa.Column("content", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("todo", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("todo_done", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "feedback_images",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("feedback_id", sa.String(length=36), nullable=False),
        sa.Column("url", sa.String(length=4000), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.ForeignKeyConstraint(["feedback_id"], ["user_feedback.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_feedback_images_feedback_id", "feedback_images", ["feedback_id"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entity", sa.String(length=40), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=False),
        sa.Column("action", sa.String(length=10), nullable=False),
        sa.Column("payload", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=NOW),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity"], unique=False)
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"], unique=False)
    op.create_index("ix_audit_logs_entity_created_at", "audit_logs", ["entity", "created_at"], unique=False)


def downgrade():
    op.drop_index("ix_audit_logs_entity_created_at", table_name="audit_logs")
    op.drop_index("ix_audit_logs_entity_id", table_name="audit_logs")
    op.drop_index("ix_audit_logs_entity", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_feedback_images_feedback_id", table_name="feedback_images")
    op.drop_table("feedback_images")
    op.drop_table("user_feedback")
    op.drop_index("ix_item_images_item_id", table_name="item_images")
    op.drop_table("item_images")
    op.drop_index("ix_item_tags_tag", table_name="item_tags")
    op.drop_table("item_tags")
    op.drop_index("ix_roadmap_items_status_sort", table_name="roadmap_items")
    op.drop_index("ix_roadmap_items_board_id", table_name="roadmap_items")
    op.drop_table("roadmap_items")
    op.drop_table("tags")
    op.drop_index("ix_boards_sort_order", table_name="boards")
    op.drop_index("ix_boards_name", table_name="boards")
    op.drop_table("boards")
