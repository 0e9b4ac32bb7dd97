"""Initial schema — staff, items, assignments.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Staff
    op.create_table(
        "staff",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("designation", sa.String(20), nullable=False, server_default="officer"),
        sa.Column("department_id", sa.Integer, nullable=True),
        sa.Column("specializations", ARRAY(sa.Integer), nullable=False, server_default="{}"),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column("max_concurrent_capacity", sa.Integer, nullable=False),
        sa.Column("current_workload", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "availability_status", sa.String(20), nullable=False, server_default="available"
        ),
        sa.Column("performance_score", sa.Float, nullable=False, server_default="70"),
        sa.Column("version", sa.Integer, nullable=False, server_default="0"),
        sa.CheckConstraint("max_concurrent_capacity > 0", name="ck_staff_capacity_positive"),
        sa.CheckConstraint("current_workload >= 0", name="ck_staff_workload_non_negative"),
    )
    op.create_index("idx_staff_department", "staff", ["department_id"])

    # Items (complaints and tasks)
    op.create_table(
        "items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("title", sa.Text, nullable=False, server_default=""),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("category_id", sa.Integer, nullable=False),
        sa.Column("department_id", sa.Integer, nullable=True),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column(
            "submitted_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("response_due_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("escalation_due_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("review_due_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="unassigned"),
        sa.Column(
            "assigned_staff_id", sa.Integer, sa.ForeignKey("staff.id"), nullable=True
        ),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rating", sa.Integer, nullable=True),
    )
    op.create_index("idx_items_status", "items", ["status"])
    op.create_index("idx_items_assigned_staff", "items", ["assigned_staff_id"])

    # Assignments
    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "item_id",
            sa.Integer,
            sa.ForeignKey("items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("staff_id", sa.Integer, sa.ForeignKey("staff.id"), nullable=False),
        sa.Column("source", sa.String(20), nullable=False),
        sa.Column(
            "assigned_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "superseded_by", sa.Integer, sa.ForeignKey("assignments.id"), nullable=True
        ),
        sa.Column("score", sa.Float, nullable=True),
        sa.Column("distance_km", sa.Float, nullable=True),
        sa.Column("reason", sa.Text, nullable=True),
    )
    op.create_index("idx_assignments_staff", "assignments", ["staff_id"])
    op.create_index(
        "uq_assignments_active_item",
        "assignments",
        ["item_id"],
        unique=True,
        postgresql_where=sa.text("resolved_at IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("uq_assignments_active_item", table_name="assignments")
    op.drop_table("assignments")
    op.drop_table("items")
    op.drop_table("staff")
