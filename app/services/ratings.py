"""Tool ratings and view/click tracking."""
import logging
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.middleware.rate_limit import UNKNOWN_CLIENT
from app.models.directory import Rating, Tool
from app.services.errors import InvalidInput, NotFound, PersistenceFailure
from app.services.submissions import parse_id, require_store
from app.services.validation import sanitize_text

logger = logging.getLogger("app.ratings")

ANONYMOUS_RATER = "anonymous"
REVIEW_TEXT_MAX = 2000
TRACKED_ACTIONS = {
    "view": Tool.view_count,
    "click": Tool.click_count,
}


def coerce_rating(value: Any) -> int:
    """
    Check that value is a whole number from 1 to 5.

    Raises:
        InvalidInput: for anything else, including booleans and 4.5
    """
    if isinstance(value, bool):
        raise InvalidInput("Rating must be between 1 and 5")

    if isinstance(value, int):
        rating = value
    elif isinstance(value, float) and value.is_integer():
        rating = int(value)
    else:
        raise InvalidInput("Rating must be between 1 and 5")

    if not 1 <= rating <= 5:
        raise InvalidInput("Rating must be between 1 and 5")
    return rating


def refresh_rating_aggregates(db: Session, tool: Tool) -> None:
    """Recompute a tool's average rating and count from all of its ratings."""
    average, count = (
        db.query(func.avg(Rating.rating), func.count(Rating.id))
        .filter(Rating.tool_id == tool.id)
        .one()
    )
    tool.avg_rating = float(average) if average is not None else 0.0
    tool.total_ratings = count or 0


def _upsert_rating(
    db: Session,
    tool: Tool,
    rater_id: str,
    rating: int,
    review_text: Optional[str],
) -> None:
    existing = db.query(Rating).filter(
        Rating.tool_id == tool.id,
        Rating.rater_id == rater_id
    ).first()

    if existing:
        existing.rating = rating
        existing.review_text = review_text
    else:
        db.add(Rating(
            tool_id=tool.id,
            rater_id=rater_id,
            rating=rating,
            review_text=review_text,
        ))

    db.flush()
    refresh_rating_aggregates(db, tool)
    db.commit()


def rate_tool(
    db: Optional[Session],
    tool_id: Any,
    rating: Any,
    rater_id: Optional[str],
    review_text: Optional[str] = None,
) -> Tool:
    """
    Record a rating for an approved tool.

    A rater's later rating replaces their earlier one. The tool's aggregate
    rating and count are recomputed from the full set of ratings.

    Returns:
        The Tool with refreshed aggregates

    Raises:
        InvalidInput: rating outside 1..5 or review text too long
        NotFound: unknown or unapproved tool
        PersistenceFailure: storage disabled or the write failed
    """
    value = coerce_rating(rating)

    if review_text is not None:
        review_text = sanitize_text(review_text) or None
        if review_text and len(review_text) > REVIEW_TEXT_MAX:
            raise InvalidInput("Review text must be at most 2000 characters")

    db = require_store(db)
    tid = parse_id(tool_id, "Tool not found")
    rater = rater_id if rater_id and rater_id != UNKNOWN_CLIENT else ANONYMOUS_RATER

    tool = db.query(Tool).filter(Tool.id == tid, Tool.approved == True).first()
    if not tool:
        raise NotFound("Tool not found")

    try:
        try:
            _upsert_rating(db, tool, rater, value, review_text)
        except IntegrityError:
            # Lost an insert race with the same rater; their row exists now
            db.rollback()
            _upsert_rating(db, tool, rater, value, review_text)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to store rating for tool {tid}")
        raise PersistenceFailure("Failed to submit rating") from e

    db.refresh(tool)
    logger.info(
        f"Tool {tid} rated {value}",
        extra={'extra_fields': {
            'tool_id': str(tid),
            'avg_rating': tool.avg_rating,
            'total_ratings': tool.total_ratings,
        }}
    )
    return tool


def track_event(db: Optional[Session], tool_id: Any, action: Optional[str]) -> None:
    """
    Increment a tool's view or click counter.

    Unknown tools and a disabled store are silent no-ops.

    Raises:
        InvalidInput: action is not "view" or "click"
        PersistenceFailure: the update failed
    """
    column = TRACKED_ACTIONS.get(action) if isinstance(action, str) else None
    if column is None:
        raise InvalidInput("Action must be 'view' or 'click'")

    if db is None:
        return

    try:
        tid = parse_id(tool_id, "Tool not found")
    except NotFound:
        logger.debug(f"Ignoring {action} for malformed tool id {tool_id!r}")
        return

    try:
        updated = (
            db.query(Tool)
            .filter(Tool.id == tid, Tool.approved == True)
            .update({column: column + 1}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to track {action} for tool {tid}")
        raise PersistenceFailure("Failed to track action") from e

    if not updated:
        logger.debug(f"Ignoring {action} for unknown tool {tid}")
