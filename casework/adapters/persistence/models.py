"""SQLAlchemy ORM models — maps to PostgreSQL tables."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casework.adapters.persistence.database import Base


class StaffModel(Base):
    __tablename__ = "staff"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    designation: Mapped[str] = mapped_column(String(20), nullable=False, default="officer")
    department_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    specializations: Mapped[list[int]] = mapped_column(ARRAY(Integer), nullable=False, default=list)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_concurrent_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    current_workload: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    availability_status: Mapped[str] = mapped_column(String(20), nullable=False, default="available")
    performance_score: Mapped[float] = mapped_column(Float, nullable=False, default=70.0)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    assignments: Mapped[list["AssignmentModel"]] = relationship(back_populates="staff")

    __table_args__ = (
        CheckConstraint("max_concurrent_capacity > 0", name="ck_staff_capacity_positive"),
        CheckConstraint("current_workload >= 0", name="ck_staff_workload_non_negative"),
        Index("idx_staff_department", "department_id"),
    )


class ItemModel(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    priority: Mapped[str] = mapped_column(String(20), nullable=False)
    category_id: Mapped[int] = mapped_column(Integer, nullable=False)
    department_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    response_due_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    escalation_due_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    review_due_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="unassigned")
    assigned_staff_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("staff.id"), nullable=True
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)

    assignments: Mapped[list["AssignmentModel"]] = relationship(back_populates="item")

    __table_args__ = (
        Index("idx_items_status", "status"),
        Index("idx_items_assigned_staff", "assigned_staff_id"),
    )


class AssignmentModel(Base):
    __tablename__ = "assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False
    )
    staff_id: Mapped[int] = mapped_column(Integer, ForeignKey("staff.id"), nullable=False)
    source: Mapped[str] = mapped_column(String(20), nullable=False)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    superseded_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("assignments.id"), nullable=True
    )
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    distance_km: Mapped[float | None] = mapped_column(Float, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    item: Mapped["ItemModel"] = relationship(back_populates="assignments")
    staff: Mapped["StaffModel"] = relationship(back_populates="assignments")

    __table_args__ = (
        Index("idx_assignments_staff", "staff_id"),
        # At most one open link per item
        Index(
            "uq_assignments_active_item",
            "item_id",
            unique=True,
            postgresql_where=text("resolved_at IS NULL"),
        ),
    )
