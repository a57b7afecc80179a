"""Clients, client users, campaigns, content items and metrics"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_init_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    id_type = sa.String(length=36)
    client_role_enum = sa.Enum("member", "admin", name="client_role")

    op.create_table(
        "clients",
        sa.Column("id", id_type, primary_key=True),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "client_users",
        sa.Column("id", id_type, primary_key=True),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("client_id", id_type, sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", client_role_enum, nullable=False, server_default="member"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "client_id", name="uq_client_users_user_client"),
    )
    op.create_index("ix_client_users_user_id", "client_users", ["user_id"])

    op.create_table(
        "campaigns",
        sa.Column("id", id_type, primary_key=True),
        sa.Column("client_id", id_type, sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
    )

    op.create_table(
        "content_items",
        sa.Column("id", id_type, primary_key=True),
        sa.Column("client_id", id_type, sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("campaign_id", id_type, sa.ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True),
        sa.Column("content_name", sa.Text(), nullable=True),
        sa.Column("platform", sa.Text(), nullable=False),
        sa.Column("content_type", sa.Text(), nullable=True),
        sa.Column("content_url", sa.Text(), nullable=True),
        sa.Column("post_date", sa.Date(), nullable=False),
    )
    op.create_index("ix_content_items_client_post_date", "content_items", ["client_id", "post_date"])

    op.create_table(
        "metrics",
        sa.Column("id", id_type, primary_key=True),
        sa.Column("content_id", id_type, sa.ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False),
        sa.Column("metric_name", sa.Text(), nullable=False),
        sa.Column("metric_value", sa.Text(), nullable=True),
        sa.Column("recorded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_metrics_content_id", "metrics", ["content_id"])


def downgrade() -> None:
    op.drop_index("ix_metrics_content_id", table_name="metrics")
    op.drop_table("metrics")

    op.drop_index("ix_content_items_client_post_date", table_name="content_items")
    op.drop_table("content_items")

    op.drop_table("campaigns")

    op.drop_index("ix_client_users_user_id", table_name="client_users")
    op.drop_table("client_users")
    sa.Enum(name="client_role").drop(op.get_bind(), checkfirst=True)

    op.drop_table("clients")
