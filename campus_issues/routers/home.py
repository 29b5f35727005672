# File: campus_issues/routers/home.py

import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from campus_issues.db.session import get_db
from campus_issues.repositories.issues import IssueRepository
from campus_issues.schemas.issue import HomeOut
from campus_issues.services.issue_board import IssueBoard

log = logging.getLogger(__name__)

router = APIRouter(tags=["home"])

@router.get("/", response_model=HomeOut)
def home(db: Session = Depends(get_db)):
    board = IssueBoard(IssueRepository(db))
    board.refresh()
    if board.error:
        log.warning(f"Home page rendered without issues: {board.error}")
    return {"stats": board.stats(), "recent_issues": board.recent(5)}
