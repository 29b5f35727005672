# File: campus_issues/models/issue_response.py
from __future__ import annotations
from enum import Enum as PyEnum
from sqlalchemy import String, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column
from campus_issues.db.base import Base
from campus_issues.models.issue import utcnow

class ResponseType(PyEnum):
    update = "update"
    resolution = "resolution"
    comment = "comment"

class IssueResponse(Base):
    __tablename__ = "issue_responses"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    issue_id: Mapped[int] = mapped_column(ForeignKey("issues.id", ondelete="CASCADE"), index=True, nullable=False)
    # null for responses issued under an admin session only
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    response_text: Mapped[str] = mapped_column(String(4000), nullable=False)
    response_type: Mapped[ResponseType] = mapped_column(
        Enum(ResponseType, native_enum=False, length=20), default=ResponseType.update, nullable=False
    )
    is_admin_response: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    created_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
