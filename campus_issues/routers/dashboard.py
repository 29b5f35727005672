# File: campus_issues/routers/dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from campus_issues.db.session import get_db
from campus_issues.core.errors import AuthRequired, RepositoryError
from campus_issues.core.security import AdminSession, get_admin_session, get_optional_user
from campus_issues.models.user import User
from campus_issues.repositories.issues import IssueRepository
from campus_issues.services.issue_board import ALL, IssueBoard

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

@router.get("")
def dashboard(
    search: str = Query(default=""),
    status: str = Query(default=ALL),
    priority: str = Query(default=ALL),
    category: str = Query(default=ALL),
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
    admin: Optional[AdminSession] = Depends(get_admin_session),
):
    if user is None and admin is None:
        raise AuthRequired("Please sign in to view the dashboard.")

    repo = IssueRepository(db, user)
    board = IssueBoard(repo)
    board.refresh()
    if board.error:
        # page-level error; the client offers a retry
        raise RepositoryError(board.error)

    visible = board.filter(search=search, status=status, priority=priority, category=category)
    upvoted = repo.upvoted_ids(i.id for i in board.issues)
    return {
        "issues": [i.model_dump(mode="json") for i in visible],
        "total_matching": len(visible),
        "stats": board.stats().model_dump(),
        "categories": board.categories(),
        "upvoted_issue_ids": sorted(upvoted),
        "map_pins": [board.map.place(p) for p in board.map_pins()],
        "viewer": {
            "user_id": user.id if user else None,
            "is_admin": admin is not None,
        },
    }
