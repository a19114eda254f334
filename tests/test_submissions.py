"""Community submission tests."""
import pytest
from fastapi import status

from app.models import Submission, SubmissionStatus, Tool
from app.services.errors import PersistenceFailure, RateLimited, ValidationFailed
from app.services.submissions import submit_tool


def submit(client, payload, ip="203.0.113.10"):
    return client.post("/api/submissions", json=payload, headers={"X-Forwarded-For": ip})


class TestSubmitTool:
    """Test POST /api/submissions."""

    def test_valid_submission_is_stored_pending(self, client, db_session, payload):
        response = submit(client, payload())
        assert response.status_code == status.HTTP_201_CREATED

        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Tool submitted for review"

        submission = db_session.query(Submission).one()
        assert str(submission.id) == data["submission_id"]
        assert submission.status == SubmissionStatus.PENDING
        assert submission.reviewed is False
        assert submission.approved is False
        assert submission.submitter_ip == "203.0.113.10"

    def test_submission_does_not_create_tool(self, client, db_session, payload):
        submit(client, payload())
        assert db_session.query(Tool).count() == 0
        assert client.get("/api/tools").json()["tools"] == []

    def test_text_fields_are_sanitized(self, client, db_session, payload):
        response = submit(client, payload(
            title="<script>alert(1)</script>Box <b>Breathing</b>",
            description="  A <i>calming</i> exercise for anxious moments.  ",
            url="  https://example.com/box  ",
        ))
        assert response.status_code == status.HTTP_201_CREATED

        submission = db_session.query(Submission).one()
        assert submission.title == "Box Breathing"
        assert submission.description == "A calming exercise for anxious moments."
        assert submission.url == "https://example.com/box"

    def test_validation_errors_returned(self, client, db_session, payload):
        response = submit(client, payload(title="ab", url="not a url"))
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        data = response.json()
        assert data["success"] is False
        assert data["errors"] == [
            "Title must be between 3 and 255 characters",
            "Must be a valid URL",
        ]
        assert db_session.query(Submission).count() == 0

    def test_markup_only_field_rejected_after_sanitizing(self, client, db_session, payload):
        response = submit(client, payload(title="<p></p><p></p>"))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "Title must be between 3 and 255 characters" in response.json()["errors"]
        assert db_session.query(Submission).count() == 0

    def test_ampersands_stored_as_typed(self, client, db_session, payload):
        response = submit(client, payload(
            title="AT&T Calm Line",
            description="Built by our R&D team for stressful days.",
        ))
        assert response.status_code == status.HTTP_201_CREATED

        submission = db_session.query(Submission).one()
        assert submission.title == "AT&T Calm Line"
        assert submission.description == "Built by our R&D team for stressful days."

    def test_wrong_json_types_return_field_errors(self, client, db_session, payload):
        response = submit(client, payload(title=12345, category=["mindfulness"], url=42))
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        data = response.json()
        assert data["success"] is False
        assert data["errors"] == [
            "Title must be between 3 and 255 characters",
            "Must be a valid URL",
            "Invalid category",
        ]
        assert db_session.query(Submission).count() == 0

    def test_second_submission_within_cooldown_rate_limited(self, client, db_session, payload):
        assert submit(client, payload()).status_code == status.HTTP_201_CREATED

        response = submit(client, payload(title="Another Tool"))
        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.json()["success"] is False
        assert int(response.headers["Retry-After"]) > 0
        assert db_session.query(Submission).count() == 1

    def test_rate_limit_checked_before_validation(self, client, payload):
        submit(client, payload())
        response = submit(client, payload(title=""))
        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS

    def test_other_clients_not_affected(self, client, db_session, payload):
        submit(client, payload(), ip="203.0.113.10")
        response = submit(client, payload(), ip="203.0.113.11")
        assert response.status_code == status.HTTP_201_CREATED
        assert db_session.query(Submission).count() == 2

    def test_allowed_again_after_cooldown(self, client, clock, payload):
        submit(client, payload())
        clock.advance(300)
        assert submit(client, payload()).status_code == status.HTTP_201_CREATED

    def test_clients_without_proxy_headers_share_bucket(self, client, db_session, payload):
        first = client.post("/api/submissions", json=payload())
        second = client.post("/api/submissions", json=payload())

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert db_session.query(Submission).one().submitter_ip == "unknown"

    def test_storage_disabled_fails_write(self, disabled_client, payload):
        response = submit(disabled_client, payload())
        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["success"] is False


class TestSubmitToolService:
    """Test the submission workflow directly."""

    def test_returns_stored_submission(self, db_session, submission_limiter, payload):
        submission = submit_tool(db_session, payload(), "1.2.3.4", submission_limiter)
        assert submission.id is not None
        assert submission.creator_name == "Calm Lab"

    def test_rate_limited_carries_retry_after(self, db_session, clock, submission_limiter, payload):
        submit_tool(db_session, payload(), "1.2.3.4", submission_limiter)
        clock.advance(60)

        with pytest.raises(RateLimited) as exc_info:
            submit_tool(db_session, payload(), "1.2.3.4", submission_limiter)
        assert exc_info.value.retry_after == 240

    def test_validation_failed_lists_errors(self, db_session, submission_limiter, payload):
        with pytest.raises(ValidationFailed) as exc_info:
            submit_tool(db_session, payload(category="unknown"), "1.2.3.4", submission_limiter)
        assert exc_info.value.errors == ["Invalid category"]

    def test_disabled_store_raises_persistence_failure(self, submission_limiter, payload):
        with pytest.raises(PersistenceFailure):
            submit_tool(None, payload(), "1.2.3.4", submission_limiter)
