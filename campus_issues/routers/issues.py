# File: campus_issues/routers/issues.py
from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Request, Form
from sqlalchemy.orm import Session
from typing import List, Optional
from campus_issues.db.session import get_db
from campus_issues.core.errors import AuthRequired
from campus_issues.core.ratelimit import limiter
from campus_issues.core.security import AdminSession, get_admin_session, get_optional_user
from campus_issues.models.issue import CATEGORIES, IssuePriority, IssueStatus
from campus_issues.models.user import User
from campus_issues.repositories.issues import IssueRepository
from campus_issues.schemas.issue import (
    IssueOptions,
    IssueOut,
    IssueStatusPatch,
    ReportOut,
    ResponseIn,
    ResponseOut,
    StatusHistoryOut,
    UpvoteOut,
)
from campus_issues.services.reporting import ImageUpload, ReportForm, submit_report

router = APIRouter(prefix="/issues", tags=["issues"])


def _issue_or_404(repo: IssueRepository, issue_id: int):
    issue = repo.get(issue_id)
    if not issue:
        raise HTTPException(status_code=404, detail="Issue not found")
    return issue


@router.get("/options", response_model=IssueOptions)
def issue_options():
    return {
        "categories": CATEGORIES,
        "priorities": [p.value for p in IssuePriority],
        "statuses": [s.value for s in IssueStatus],
    }


@router.post("", response_model=ReportOut, status_code=201)
@limiter.limit("10/minute")
def create_issue(
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    category: str = Form(""),
    priority: str = Form(""),
    location: str = Form(""),
    contact_email: str = Form(""),
    contact_phone: str = Form(""),
    latitude: Optional[float] = Form(None),
    longitude: Optional[float] = Form(None),
    image: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    upload = None
    if image is not None and image.filename:
        upload = ImageUpload(
            filename=image.filename,
            content_type=image.content_type or "",
            data=image.file.read(),
        )
    form = ReportForm(
        title=title,
        description=description,
        category=category,
        priority=priority,
        location=location,
        contact_email=contact_email,
        contact_phone=contact_phone,
        latitude=latitude,
        longitude=longitude,
        image=upload,
    )
    result = submit_report(IssueRepository(db, user), form)
    return ReportOut(issue=IssueOut.model_validate(result.issue), notices=result.notices)


@router.get("", response_model=List[IssueOut])
@limiter.limit("60/minute")
def list_issues(request: Request, db: Session = Depends(get_db)):
    return IssueRepository(db).list()


@router.get("/{issue_id}", response_model=IssueOut)
def get_issue(issue_id: int, db: Session = Depends(get_db)):
    return _issue_or_404(IssueRepository(db), issue_id)


@router.patch("/{issue_id}/status", response_model=IssueOut)
def update_status(
    issue_id: int,
    body: IssueStatusPatch,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
    admin: Optional[AdminSession] = Depends(get_admin_session),
):
    if user is None and admin is None:
        raise AuthRequired("Please sign in to update issues.")
    repo = IssueRepository(db, user)
    issue = _issue_or_404(repo, issue_id)

    is_owner = user is not None and issue.user_id == user.id
    if not (is_owner or admin):
        raise HTTPException(
            status_code=403,
            detail="Only the reporter or an administrator can change the status",
        )
    return repo.update_status(issue_id, body.status)


@router.delete("/{issue_id}")
def delete_issue(
    issue_id: int,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
    admin: Optional[AdminSession] = Depends(get_admin_session),
):
    if user is None:
        raise AuthRequired("Please sign in to delete issues.")
    repo = IssueRepository(db, user)
    issue = _issue_or_404(repo, issue_id)

    # administrators respond and manage status; removal stays with the reporter
    if admin is not None:
        raise HTTPException(status_code=403, detail="Administrators cannot delete issues")
    if issue.user_id != user.id:
        raise HTTPException(status_code=403, detail="Only the reporter can delete this issue")

    repo.delete(issue_id)
    return {"ok": True}


@router.post("/{issue_id}/upvote", response_model=UpvoteOut)
def toggle_upvote(
    issue_id: int,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    repo = IssueRepository(db, user)
    if user is None:
        raise AuthRequired("Please sign in to upvote issues.")
    _issue_or_404(repo, issue_id)
    upvoted, count = repo.toggle_upvote(issue_id)
    return UpvoteOut(issue_id=issue_id, upvoted=upvoted, upvote_count=count)


@router.get("/{issue_id}/upvote")
def check_upvote(
    issue_id: int,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    return {"issue_id": issue_id, "upvoted": IssueRepository(db, user).check_upvoted(issue_id)}


@router.get("/{issue_id}/responses", response_model=List[ResponseOut])
def list_responses(issue_id: int, db: Session = Depends(get_db)):
    return IssueRepository(db).list_responses(issue_id)


@router.post("/{issue_id}/responses", response_model=ResponseOut, status_code=201)
def add_response(
    issue_id: int,
    body: ResponseIn,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
    admin: Optional[AdminSession] = Depends(get_admin_session),
):
    repo = IssueRepository(db, user)
    if user is None and admin is None:
        raise AuthRequired("Please sign in to add responses.")
    _issue_or_404(repo, issue_id)
    rows = repo.add_response(issue_id, body.response_text, body.response_type, is_admin=admin is not None)
    return rows[0]


@router.get("/{issue_id}/history", response_model=List[StatusHistoryOut])
def status_history(issue_id: int, db: Session = Depends(get_db)):
    return IssueRepository(db).list_status_history(issue_id)
