# File: campus_issues/services/issue_board.py
# Project: campus-issues-backend
"""Cached issue list behind the dashboard and home views.

The board keeps snapshots of the last fetch. Mutations are applied to the
snapshot first, then written through the repository, then reconciled against
the row the store hands back; any field that disagrees is logged and the
store's value wins. A failed write restores the previous snapshot and records
the message in ``error``.
"""

import logging
from typing import Optional

from campus_issues.core.errors import RepositoryError
from campus_issues.models.issue import IssueStatus, utcnow
from campus_issues.repositories.issues import IssueRepository
from campus_issues.schemas.issue import IssueOut, StatsOut
from campus_issues.services.campus_map import CampusMap, MapPin

log = logging.getLogger(__name__)

ALL = "all"
WORKING_STATES = {IssueStatus.under_review, IssueStatus.assigned, IssueStatus.in_progress}
# fields that legitimately differ between an optimistic patch and the stored row
_IGNORED_ON_RECONCILE = {"updated_at"}


def _matches(value: Optional[str], wanted: Optional[str]) -> bool:
    if not wanted or wanted.lower() == ALL:
        return True
    return (value or "").lower() == wanted.lower()


class IssueBoard:
    def __init__(self, repo: IssueRepository, campus_map: Optional[CampusMap] = None):
        self.repo = repo
        self.map = campus_map or CampusMap.from_settings()
        self.issues: list[IssueOut] = []
        self.error: Optional[str] = None

    def _index(self, issue_id: int) -> Optional[int]:
        return next((n for n, i in enumerate(self.issues) if i.id == issue_id), None)

    def refresh(self) -> list[IssueOut]:
        try:
            rows = self.repo.list()
        except RepositoryError as e:
            self.error = e.message
            return self.issues
        self.issues = [IssueOut.model_validate(r) for r in rows]
        self.error = None
        return self.issues

    def _reconcile(self, idx: int, stored: IssueOut) -> None:
        local = self.issues[idx]
        diverged = sorted(
            name
            for name in IssueOut.model_fields
            if name not in _IGNORED_ON_RECONCILE and getattr(local, name) != getattr(stored, name)
        )
        if diverged:
            log.warning(f"Issue {stored.id} diverged from store on {', '.join(diverged)}; taking stored values")
        self.issues[idx] = stored

    def update_status(self, issue_id: int, status: IssueStatus) -> IssueOut:
        idx = self._index(issue_id)
        previous = self.issues[idx] if idx is not None else None
        if previous is not None:
            self.issues[idx] = previous.model_copy(update={"status": status, "updated_at": utcnow()})
        try:
            row = self.repo.update_status(issue_id, status)
        except RepositoryError as e:
            if previous is not None:
                self.issues[idx] = previous
            self.error = e.message
            raise
        stored = IssueOut.model_validate(row)
        if idx is not None:
            self._reconcile(idx, stored)
        return stored

    def delete(self, issue_id: int) -> bool:
        try:
            removed = self.repo.delete(issue_id)
        except RepositoryError as e:
            self.error = e.message
            raise
        self.issues = [i for i in self.issues if i.id != issue_id]
        return removed

    def toggle_upvote(self, issue_id: int) -> tuple[bool, int]:
        result = self.repo.toggle_upvote(issue_id)
        # counts come from the store, not from local arithmetic
        self.refresh()
        return result

    def filter(
        self,
        search: str = "",
        status: str = ALL,
        priority: str = ALL,
        category: str = ALL,
    ) -> list[IssueOut]:
        term = (search or "").lower()
        out = []
        for issue in self.issues:
            if term and term not in issue.title.lower() and term not in (issue.description or "").lower():
                continue
            if not _matches(issue.status.value, status):
                continue
            if not _matches(issue.priority.value, priority):
                continue
            if category and category != ALL and issue.category != category:
                continue
            out.append(issue)
        return out

    def categories(self) -> list[str]:
        return list(dict.fromkeys(i.category for i in self.issues))

    def recent(self, limit: int = 5) -> list[IssueOut]:
        return sorted(self.issues, key=lambda i: i.reported_date, reverse=True)[:limit]

    def stats(self) -> StatsOut:
        total = len(self.issues)
        return StatsOut(
            total_issues=total,
            resolved_issues=sum(1 for i in self.issues if i.status == IssueStatus.resolved),
            pending_issues=sum(1 for i in self.issues if i.status == IssueStatus.reported),
            in_progress_issues=sum(1 for i in self.issues if i.status in WORKING_STATES),
            # rough estimate shown on the home page
            active_users=int(total * 0.7),
        )

    def map_pins(self) -> list[MapPin]:
        return self.map.issue_pins(self.issues)
