# File: campus_issues/repositories/issues.py
# Project: campus-issues-backend
"""Data access for issues and the collections hanging off them.

Write paths raise ``RepositoryError`` (after rolling the session back) so the
caller can surface the message. Auxiliary reads are fail-soft: responses and
status history come back empty, and the upvote check answers "not upvoted",
when the store errors.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from campus_issues.core.errors import AuthRequired, RepositoryError, ValidationError
from campus_issues.models.issue import Issue, IssueStatus, IssuePriority, utcnow
from campus_issues.models.issue_response import IssueResponse, ResponseType
from campus_issues.models.issue_status_history import IssueStatusHistory
from campus_issues.models.issue_upvote import IssueUpvote
from campus_issues.models.user import User

log = logging.getLogger(__name__)


class IssueRepository:
    def __init__(self, db: Session, user: Optional[User] = None):
        self.db = db
        self.user = user

    def _fail(self, action: str, exc: Exception) -> RepositoryError:
        log.error(f"Error trying to {action}: {exc}", exc_info=True)
        try:
            self.db.rollback()
        except SQLAlchemyError:
            log.exception("Rollback failed")
        return RepositoryError(f"Failed to {action}")

    # ------------------------------------------------------------------
    # issues
    # ------------------------------------------------------------------

    def list(self) -> list[Issue]:
        """All issues, most upvoted first, newest first within equal counts."""
        try:
            return (
                self.db.query(Issue)
                .order_by(Issue.upvote_count.desc(), Issue.reported_date.desc(), Issue.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fail("load issues", e)

    def get(self, issue_id: int) -> Optional[Issue]:
        try:
            return self.db.get(Issue, issue_id)
        except SQLAlchemyError as e:
            raise self._fail("load issue", e)

    def create(
        self,
        *,
        title: str,
        description: str,
        category: str,
        priority: IssuePriority,
        location: str,
        contact_email: Optional[str] = None,
        contact_phone: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        image_url: Optional[str] = None,
    ) -> Issue:
        obj = Issue(
            title=title,
            description=description,
            category=category,
            priority=priority,
            location=location,
            contact_email=contact_email,
            contact_phone=contact_phone,
            latitude=latitude,
            longitude=longitude,
            image_url=image_url,
            status=IssueStatus.reported,
            upvote_count=0,
            user_id=self.user.id if self.user else None,
        )
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            raise self._fail("submit issue", e)
        return obj

    def update_status(self, issue_id: int, new_status: IssueStatus) -> Issue:
        try:
            obj = self.db.get(Issue, issue_id)
            if obj is None:
                raise RepositoryError(f"Issue {issue_id} not found")
            obj.status = new_status
            obj.updated_at = utcnow()
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            raise self._fail("update issue status", e)
        return obj

    def delete(self, issue_id: int) -> bool:
        try:
            removed = self.db.query(Issue).filter(Issue.id == issue_id).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete issue", e)
        return removed > 0

    # ------------------------------------------------------------------
    # upvotes
    # ------------------------------------------------------------------

    def _sync_upvote_count(self, issue_id: int) -> int:
        count = (
            self.db.query(func.count(IssueUpvote.id))
            .filter(IssueUpvote.issue_id == issue_id)
            .scalar()
        ) or 0
        self.db.query(Issue).filter(Issue.id == issue_id).update(
            {Issue.upvote_count: count}, synchronize_session=False
        )
        return count

    def toggle_upvote(self, issue_id: int) -> tuple[bool, int]:
        """Flip the current user's upvote and return ``(upvoted, upvote_count)``.

        Delete-by-key first; only when nothing was deleted is a row inserted.
        There is no separate existence check, and a duplicate insert racing
        in from another request is absorbed by the (issue_id, user_id) unique
        constraint. The count is recomputed from the rows in the same
        transaction.
        """
        if self.user is None:
            raise AuthRequired("Please sign in to upvote issues.")
        try:
            if self.db.get(Issue, issue_id) is None:
                raise RepositoryError(f"Issue {issue_id} not found")
            removed = (
                self.db.query(IssueUpvote)
                .filter(IssueUpvote.issue_id == issue_id, IssueUpvote.user_id == self.user.id)
                .delete(synchronize_session=False)
            )
            upvoted = not removed
            if upvoted:
                try:
                    with self.db.begin_nested():
                        self.db.add(IssueUpvote(issue_id=issue_id, user_id=self.user.id))
                except IntegrityError:
                    log.info(f"Upvote for issue {issue_id} by user {self.user.id} already present")
            count = self._sync_upvote_count(issue_id)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("update upvote", e)
        return upvoted, count

    def check_upvoted(self, issue_id: int) -> bool:
        if self.user is None:
            return False
        try:
            return (
                self.db.query(IssueUpvote.id)
                .filter(IssueUpvote.issue_id == issue_id, IssueUpvote.user_id == self.user.id)
                .first()
            ) is not None
        except SQLAlchemyError as e:
            log.warning(f"Upvote check failed for issue {issue_id}, reporting not upvoted: {e}")
            self.db.rollback()
            return False

    def upvoted_ids(self, issue_ids: Iterable[int]) -> set[int]:
        ids = list(issue_ids)
        if self.user is None or not ids:
            return set()
        try:
            rows = (
                self.db.query(IssueUpvote.issue_id)
                .filter(IssueUpvote.user_id == self.user.id, IssueUpvote.issue_id.in_(ids))
                .all()
            )
        except SQLAlchemyError as e:
            log.warning(f"Upvote lookup failed, reporting none upvoted: {e}")
            self.db.rollback()
            return set()
        return {r[0] for r in rows}

    # ------------------------------------------------------------------
    # responses / history
    # ------------------------------------------------------------------

    def add_response(
        self,
        issue_id: int,
        text: str,
        response_type: ResponseType = ResponseType.update,
        is_admin: bool = False,
    ) -> List[IssueResponse]:
        if self.user is None and not is_admin:
            raise AuthRequired("Please sign in to add responses.")
        body = (text or "").strip()
        if not body:
            raise ValidationError("Please enter a response message.")
        row = IssueResponse(
            issue_id=issue_id,
            user_id=self.user.id if self.user else None,
            response_text=body,
            response_type=response_type,
            is_admin_response=is_admin,
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            raise self._fail("add response", e)
        return [row]

    def list_responses(self, issue_id: int) -> List[IssueResponse]:
        try:
            return (
                self.db.query(IssueResponse)
                .filter(IssueResponse.issue_id == issue_id)
                .order_by(IssueResponse.created_at.desc(), IssueResponse.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            log.warning(f"Could not load responses for issue {issue_id}: {e}")
            self.db.rollback()
            return []

    def list_status_history(self, issue_id: int) -> List[IssueStatusHistory]:
        try:
            return (
                self.db.query(IssueStatusHistory)
                .filter(IssueStatusHistory.issue_id == issue_id)
                .order_by(IssueStatusHistory.created_at.desc(), IssueStatusHistory.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            log.warning(f"Could not load status history for issue {issue_id}: {e}")
            self.db.rollback()
            return []
