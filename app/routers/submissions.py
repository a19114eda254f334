"""Community tool submission routes."""
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import client_ip, error_response, get_submission_limiter
from app.middleware.rate_limit import SubmissionCooldown
from app.schemas.directory import SubmissionCreate
from app.services.errors import DirectoryError
from app.services.submissions import submit_tool

router = APIRouter(prefix="/api/submissions", tags=["submissions"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_submission(
    submission_data: SubmissionCreate,
    client_id: str = Depends(client_ip),
    limiter: SubmissionCooldown = Depends(get_submission_limiter),
    db: Optional[Session] = Depends(get_db),
):
    """
    Submit a tool for moderator review.

    Returns 400 with the list of field errors, or 429 if this client
    submitted within the cooldown window.
    """
    try:
        submission = submit_tool(db, submission_data.model_dump(), client_id, limiter)
    except DirectoryError as e:
        return error_response(e)

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={
            "success": True,
            "message": "Tool submitted for review",
            "submission_id": str(submission.id),
        }
    )
