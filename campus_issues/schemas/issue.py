from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from campus_issues.models.issue import IssueStatus, IssuePriority
from campus_issues.models.issue_response import ResponseType


class IssueOut(BaseModel):
    id: int
    title: str
    description: str
    category: str
    status: IssueStatus
    priority: IssuePriority
    location: str

    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_url: Optional[str] = None

    upvote_count: int = 0
    user_id: Optional[int] = None

    reported_date: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class IssueStatusPatch(BaseModel):
    status: IssueStatus


class IssueOptions(BaseModel):
    """Choices offered by the report form."""
    categories: List[str]
    priorities: List[str]
    statuses: List[str]


class ReportOut(BaseModel):
    issue: IssueOut
    notices: List[str] = []
    redirect_to: str = "/dashboard"
    redirect_after_ms: int = 2000


class UpvoteOut(BaseModel):
    issue_id: int
    upvoted: bool
    upvote_count: int


class ResponseIn(BaseModel):
    response_text: str = Field(min_length=1, max_length=4000)
    response_type: ResponseType = ResponseType.update


class ResponseOut(BaseModel):
    id: int
    issue_id: int
    user_id: Optional[int] = None
    response_text: str
    response_type: ResponseType
    is_admin_response: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StatusHistoryOut(BaseModel):
    id: int
    issue_id: int
    old_status: Optional[str] = None
    new_status: str
    changed_by: Optional[int] = None
    change_reason: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StatsOut(BaseModel):
    total_issues: int
    resolved_issues: int
    pending_issues: int
    in_progress_issues: int
    active_users: int


class HomeOut(BaseModel):
    stats: StatsOut
    recent_issues: List[IssueOut]
