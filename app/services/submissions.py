"""Submission and moderation workflows."""
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.middleware.rate_limit import SubmissionCooldown
from app.models.directory import Submission, SubmissionStatus, Tool, utcnow
from app.services.errors import (
    AlreadyReviewed, InvalidInput, NotFound, PersistenceFailure, RateLimited, ValidationFailed
)
from app.services.validation import sanitize_submission, validate_submission

logger = logging.getLogger("app.submissions")

DESCRIPTIVE_FIELDS = (
    "title", "url", "category", "description",
    "creator_name", "creator_link", "creator_background", "thumbnail_url",
)


def require_store(db: Optional[Session]) -> Session:
    """Return db, or raise PersistenceFailure when storage is not configured."""
    if db is None:
        logger.warning("Write attempted while directory store is disabled")
        raise PersistenceFailure("Directory storage is not configured")
    return db


def parse_id(value: Any, not_found_message: str) -> uuid.UUID:
    """Parse a record id; malformed ids cannot match a record."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise NotFound(not_found_message)


def submit_tool(
    db: Optional[Session],
    payload: Mapping[str, Any],
    client_id: str,
    limiter: SubmissionCooldown,
) -> Submission:
    """
    Accept a community tool submission for moderation.

    Args:
        db: Database session (None when storage is disabled)
        payload: Submission fields
        client_id: Submitter network identifier
        limiter: Cooldown store shared by the application

    Returns:
        The stored pending Submission

    Raises:
        RateLimited: client submitted inside the cooldown window
        ValidationFailed: payload failed field validation
        PersistenceFailure: storage disabled or the write failed
    """
    if not limiter.allow(client_id):
        retry_after = limiter.retry_after(client_id)
        logger.info(
            f"Submission from {client_id} rejected by cooldown",
            extra={'extra_fields': {'client_ip': client_id, 'retry_after': retry_after}}
        )
        raise RateLimited(retry_after=retry_after)

    result = validate_submission(payload)
    if not result.valid:
        raise ValidationFailed(result.errors)

    clean = sanitize_submission(payload)

    # Markup-only values can be emptied by sanitizing
    result = validate_submission(clean)
    if not result.valid:
        raise ValidationFailed(result.errors)

    db = require_store(db)

    submission = Submission(
        **{key: clean.get(key) for key in DESCRIPTIVE_FIELDS},
        submitter_ip=client_id,
        status=SubmissionStatus.PENDING,
    )

    try:
        db.add(submission)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to store submission from {client_id}")
        raise PersistenceFailure("Failed to submit tool") from e

    db.refresh(submission)
    logger.info(
        f"Submission {submission.id} received",
        extra={'extra_fields': {'submission_id': str(submission.id), 'category': submission.category}}
    )
    return submission


def list_pending(db: Optional[Session]) -> List[Submission]:
    """Pending submissions, newest first."""
    return list_submissions(db, status=SubmissionStatus.PENDING)


def list_submissions(db: Optional[Session], status: Optional[str] = None) -> List[Submission]:
    """All submissions, or those with the given status, newest first."""
    if db is None:
        return []

    if status is not None and status not in SubmissionStatus.ALL:
        raise InvalidInput(f"Unknown submission status: {status}")

    query = db.query(Submission)
    if status:
        query = query.filter(Submission.status == status)

    return query.order_by(desc(Submission.created_at)).all()


def count_by_status(db: Optional[Session]) -> Dict[str, int]:
    """Number of submissions in each moderation state."""
    counts = {s: 0 for s in SubmissionStatus.ALL}
    if db is None:
        return counts

    rows = (
        db.query(Submission.status, func.count(Submission.id))
        .group_by(Submission.status)
        .all()
    )
    for status, count in rows:
        counts[status] = count
    return counts


def _transition(db: Session, submission_id: uuid.UUID, new_status: str) -> None:
    """
    Move a submission out of "pending".

    The status guard in the UPDATE makes this a compare-and-swap: only one
    caller can win, however many times a decision is retried.
    """
    updated = (
        db.query(Submission)
        .filter(
            Submission.id == submission_id,
            Submission.status == SubmissionStatus.PENDING,
        )
        .update(
            {Submission.status: new_status, Submission.reviewed_at: utcnow()},
        )
    )

    if updated == 0:
        db.rollback()
        exists = db.query(Submission.id).filter(Submission.id == submission_id).first()
        if exists is None:
            raise NotFound("Submission not found")
        raise AlreadyReviewed()


def approve_submission(db: Optional[Session], submission_id: Any) -> Tool:
    """
    Approve a pending submission and publish it as a Tool.

    The status change and the Tool insert commit in one transaction.

    Raises:
        NotFound: no submission with this id
        AlreadyReviewed: the submission was already approved or rejected
        PersistenceFailure: storage disabled or the transaction failed
    """
    db = require_store(db)
    sid = parse_id(submission_id, "Submission not found")

    try:
        _transition(db, sid, SubmissionStatus.APPROVED)

        submission = db.query(Submission).filter(Submission.id == sid).one()
        tool = Tool(
            **{key: getattr(submission, key) for key in DESCRIPTIVE_FIELDS},
            approved=True,
            avg_rating=0.0,
            total_ratings=0,
            view_count=0,
            click_count=0,
            source_submission_id=submission.id,
        )
        db.add(tool)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to approve submission {sid}")
        raise PersistenceFailure("Failed to approve submission") from e

    db.refresh(tool)
    logger.info(
        f"Submission {sid} approved as tool {tool.id}",
        extra={'extra_fields': {'submission_id': str(sid), 'tool_id': str(tool.id)}}
    )
    return tool


def reject_submission(db: Optional[Session], submission_id: Any) -> Submission:
    """
    Reject a pending submission. No Tool is created.

    Raises:
        NotFound: no submission with this id
        AlreadyReviewed: the submission was already approved or rejected
        PersistenceFailure: storage disabled or the write failed
    """
    db = require_store(db)
    sid = parse_id(submission_id, "Submission not found")

    try:
        _transition(db, sid, SubmissionStatus.REJECTED)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to reject submission {sid}")
        raise PersistenceFailure("Failed to reject submission") from e

    submission = db.query(Submission).filter(Submission.id == sid).one()
    logger.info(
        f"Submission {sid} rejected",
        extra={'extra_fields': {'submission_id': str(sid)}}
    )
    return submission
