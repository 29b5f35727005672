# File: campus_issues/services/reporting.py
# Project: campus-issues-backend

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from campus_issues.core.config import settings
from campus_issues.core.errors import AuthRequired, ValidationError
from campus_issues.models.issue import CATEGORIES, Issue, IssuePriority
from campus_issues.repositories.issues import IssueRepository
from campus_issues.services.storage import StorageError, make_object_key, upload_image

log = logging.getLogger(__name__)

DEFAULT_LOCATION = "Not specified"
UPLOAD_FAILED_NOTICE = "Image upload failed. Your issue was submitted without the photo."


@dataclass
class ImageUpload:
    filename: str
    content_type: str
    data: bytes


@dataclass
class ReportForm:
    title: str = ""
    description: str = ""
    category: str = ""
    priority: str = ""
    location: str = ""
    contact_email: str = ""
    contact_phone: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image: Optional[ImageUpload] = None


@dataclass
class ReportResult:
    issue: Issue
    notices: list[str] = field(default_factory=list)


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def check_image(image: ImageUpload) -> None:
    if not (image.content_type or "").lower().startswith("image/"):
        raise ValidationError("Only image files can be attached.")
    if len(image.data) > settings.max_image_bytes:
        limit_mb = settings.max_image_bytes // (1024 * 1024)
        raise ValidationError(f"Image exceeds {limit_mb}MB")


def validate_report(form: ReportForm) -> IssuePriority:
    """Check the form without touching storage; returns the parsed priority."""
    if not all(_clean(v) for v in (form.title, form.description, form.category, form.priority)):
        raise ValidationError("Please fill in all required fields.")
    if _clean(form.category) not in CATEGORIES:
        raise ValidationError(f"Unknown category: {_clean(form.category)}")
    try:
        priority = IssuePriority(_clean(form.priority))
    except ValueError:
        raise ValidationError(f"Unknown priority: {_clean(form.priority)}")
    if (form.latitude is None) != (form.longitude is None):
        raise ValidationError("Latitude and longitude must be provided together.")
    if form.image is not None:
        check_image(form.image)
    return priority


def submit_report(repo: IssueRepository, form: ReportForm, now: Optional[datetime] = None) -> ReportResult:
    user = repo.user
    if user is None:
        raise AuthRequired("Please sign in to report an issue.")
    priority = validate_report(form)

    notices: list[str] = []
    image_url = None
    if form.image is not None:
        key = make_object_key(user.id, form.image.filename or "upload.jpg", now)
        try:
            image_url = upload_image(form.image.data, form.image.content_type, key)
        except StorageError as e:
            log.warning(f"Image upload failed for user {user.id}, submitting without image: {e}")
            notices.append(UPLOAD_FAILED_NOTICE)

    issue = repo.create(
        title=_clean(form.title),
        description=_clean(form.description),
        category=_clean(form.category),
        priority=priority,
        location=_clean(form.location) or DEFAULT_LOCATION,
        contact_email=_clean(form.contact_email) or user.email,
        contact_phone=_clean(form.contact_phone) or None,
        latitude=form.latitude,
        longitude=form.longitude,
        image_url=image_url,
    )
    log.info(f"Issue {issue.id} reported by user {user.id}")
    return ReportResult(issue=issue, notices=notices)
