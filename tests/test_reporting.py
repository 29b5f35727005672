from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from campus_issues.core.errors import AuthRequired, ValidationError
from campus_issues.models.issue import Issue, IssuePriority, IssueStatus
from campus_issues.repositories.issues import IssueRepository
from campus_issues.services import reporting
from campus_issues.services.reporting import (
    UPLOAD_FAILED_NOTICE,
    ImageUpload,
    ReportForm,
    submit_report,
)
from campus_issues.services.storage import StorageError, make_object_key

from conftest import auth_header


def _form(**overrides) -> ReportForm:
    fields = dict(
        title="Broken cooler",
        description="The water cooler near the library is not working.",
        category="Infrastructure & Maintenance",
        priority="High",
    )
    fields.update(overrides)
    return ReportForm(**fields)


@pytest.fixture
def fake_upload(monkeypatch):
    upload = MagicMock(return_value="https://cdn.example/issue-images/1/1.png")
    monkeypatch.setattr(reporting, "upload_image", upload)
    return upload


def test_broken_cooler_report(db, make_user, fake_upload):
    user = make_user()
    result = submit_report(IssueRepository(db, user), _form())

    issue = result.issue
    assert issue.status == IssueStatus.reported
    assert issue.priority == IssuePriority.high
    assert issue.upvote_count == 0
    assert issue.latitude is None and issue.longitude is None
    assert issue.contact_email == user.email
    assert issue.location == "Not specified"
    assert issue.user_id == user.id
    assert result.notices == []
    fake_upload.assert_not_called()


@pytest.mark.parametrize("missing", ["title", "description", "category", "priority"])
def test_missing_required_field_writes_nothing(db, make_user, missing):
    user = make_user()
    with pytest.raises(ValidationError, match="Please fill in all required fields."):
        submit_report(IssueRepository(db, user), _form(**{missing: "  "}))
    assert db.query(Issue).count() == 0


def test_unauthenticated_report_is_rejected(db):
    with pytest.raises(AuthRequired):
        submit_report(IssueRepository(db), _form())
    assert db.query(Issue).count() == 0


def test_unknown_category_and_priority(db, make_user):
    repo = IssueRepository(db, make_user())
    with pytest.raises(ValidationError):
        submit_report(repo, _form(category="Parking"))
    with pytest.raises(ValidationError):
        submit_report(repo, _form(priority="Urgent"))


def test_unpaired_coordinates_rejected(db, make_user):
    with pytest.raises(ValidationError):
        submit_report(IssueRepository(db, make_user()), _form(latitude=28.67))


def test_pin_and_contact_details_are_kept(db, make_user):
    result = submit_report(
        IssueRepository(db, make_user()),
        _form(latitude=28.67, longitude=77.23, location="Library", contact_email="desk@igdtuw.ac.in"),
    )
    assert (result.issue.latitude, result.issue.longitude) == (28.67, 77.23)
    assert result.issue.location == "Library"
    assert result.issue.contact_email == "desk@igdtuw.ac.in"


def test_oversized_image_rejected_before_upload(db, make_user, fake_upload):
    big = ImageUpload("cooler.png", "image/png", b"\0" * (10 * 1024 * 1024 + 1))
    with pytest.raises(ValidationError, match="Image exceeds 10MB"):
        submit_report(IssueRepository(db, make_user()), _form(image=big))
    fake_upload.assert_not_called()
    assert db.query(Issue).count() == 0


def test_non_image_rejected_before_upload(db, make_user, fake_upload):
    doc = ImageUpload("notes.pdf", "application/pdf", b"%PDF")
    with pytest.raises(ValidationError):
        submit_report(IssueRepository(db, make_user()), _form(image=doc))
    fake_upload.assert_not_called()


def test_image_uploaded_under_user_key(db, make_user, fake_upload):
    user = make_user()
    when = datetime(2024, 3, 1, tzinfo=timezone.utc)
    result = submit_report(
        IssueRepository(db, user),
        _form(image=ImageUpload("cooler.PNG", "image/png", b"png-bytes")),
        now=when,
    )
    fake_upload.assert_called_once_with(b"png-bytes", "image/png", f"{user.id}/{int(when.timestamp() * 1000)}.png")
    assert result.issue.image_url == "https://cdn.example/issue-images/1/1.png"


def test_upload_failure_submits_without_image(db, make_user, fake_upload):
    fake_upload.side_effect = StorageError("bucket unavailable")
    result = submit_report(
        IssueRepository(db, make_user()),
        _form(image=ImageUpload("cooler.png", "image/png", b"png-bytes")),
    )
    assert result.issue.id is not None
    assert result.issue.image_url is None
    assert result.notices == [UPLOAD_FAILED_NOTICE]


def test_object_key_defaults_extension():
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert make_object_key(7, "photo", when) == f"7/{int(when.timestamp() * 1000)}.jpg"


class TestReportEndpoint:
    def test_report_over_http(self, client, make_user):
        user = make_user()
        r = client.post(
            "/issues",
            data={
                "title": "Broken cooler",
                "description": "Not cooling",
                "category": "Infrastructure & Maintenance",
                "priority": "High",
            },
            headers=auth_header(user),
        )
        assert r.status_code == 201
        body = r.json()
        assert body["issue"]["status"] == "Reported"
        assert body["issue"]["contact_email"] == user.email
        assert body["redirect_to"] == "/dashboard"
        assert body["redirect_after_ms"] == 2000

    def test_missing_fields_over_http(self, client, make_user):
        r = client.post("/issues", data={"title": "Broken cooler"}, headers=auth_header(make_user()))
        assert r.status_code == 400
        assert r.json()["detail"] == "Please fill in all required fields."

    def test_anonymous_report_over_http(self, client):
        r = client.post("/issues", data={"title": "x", "description": "y", "category": "Other", "priority": "Low"})
        assert r.status_code == 401

    def test_image_without_storage_is_inlined(self, client, make_user):
        r = client.post(
            "/issues",
            data={"title": "Cracked tile", "description": "Lobby", "category": "Other", "priority": "Low"},
            files={"image": ("tile.png", b"png-bytes", "image/png")},
            headers=auth_header(make_user()),
        )
        assert r.status_code == 201
        assert r.json()["issue"]["image_url"].startswith("data:image/png;base64,")
