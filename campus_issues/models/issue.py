# File: campus_issues/models/issue.py
from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum as PyEnum
from sqlalchemy import String, Float, Enum, Integer, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from campus_issues.db.base import Base

class IssueStatus(PyEnum):
    reported = "Reported"
    under_review = "Under Review"
    assigned = "Assigned"
    in_progress = "In Progress"
    resolved = "Resolved"

class IssuePriority(PyEnum):
    low = "Low"
    medium = "Medium"
    high = "High"
    critical = "Critical"

CATEGORIES = [
    "Infrastructure & Maintenance",
    "Safety & Security",
    "WiFi & Technology",
    "Cleanliness & Hygiene",
    "Transportation",
    "Cafeteria & Food Services",
    "Library & Academic Resources",
    "Sports & Recreation",
    "Other",
]

def _values(enum_cls):
    return [m.value for m in enum_cls]

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class Issue(Base):
    __tablename__ = "issues"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), index=True)
    description: Mapped[str] = mapped_column(String(4000))
    category: Mapped[str] = mapped_column(String(120), index=True)
    status: Mapped[IssueStatus] = mapped_column(
        Enum(IssueStatus, values_callable=_values, native_enum=False, length=20),
        default=IssueStatus.reported,
        index=True,
    )
    priority: Mapped[IssuePriority] = mapped_column(
        Enum(IssuePriority, values_callable=_values, native_enum=False, length=20),
        index=True,
    )
    location: Mapped[str] = mapped_column(String(300), default="Not specified")

    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)

    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    upvote_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0", index=True)

    # null: admin-originated or anonymous
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    reported_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("upvote_count >= 0", name="ck_issues_upvote_count_non_negative"),
        CheckConstraint(
            "(latitude IS NULL AND longitude IS NULL) OR (latitude IS NOT NULL AND longitude IS NOT NULL)",
            name="ck_issues_coordinates_paired",
        ),
    )

Index("ix_issues_latitude_longitude", Issue.latitude, Issue.longitude)
