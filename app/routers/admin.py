"""Admin routes for moderating community submissions."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.auth.admin import issue_admin_token, verify_admin_password
from app.db import get_db
from app.dependencies import error_response, require_moderator
from app.middleware.rate_limit import get_client_ip
from app.schemas.directory import AdminLogin, AdminSessionResponse, SubmissionListResponse, SubmissionResponse
from app.services.errors import DirectoryError
from app.services.submissions import (
    approve_submission, count_by_status, list_submissions, reject_submission
)
from app.settings import settings

logger = logging.getLogger("app.admin")

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/session", response_model=AdminSessionResponse)
async def admin_login(
    request: Request,
    login: AdminLogin,
):
    """
    Check the moderator password.

    On success returns a signed token that can be sent as
    "Authorization: Bearer <token>" instead of resending the password.
    """
    if not login.password:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Password is required"}
        )

    try:
        valid = verify_admin_password(login.password)
    except DirectoryError as e:
        logger.error("Admin login attempted but no moderator secret is configured")
        return error_response(e)

    if not valid:
        logger.warning(
            "Failed admin login",
            extra={
                'request_id': getattr(request.state, 'request_id', None),
                'extra_fields': {'client_ip': get_client_ip(request)}
            }
        )
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"success": False, "error": "Invalid password"}
        )

    return AdminSessionResponse(
        token=issue_admin_token(),
        expires_in=settings.ADMIN_TOKEN_MAX_AGE
    )


@router.get(
    "/submissions",
    response_model=SubmissionListResponse,
    dependencies=[Depends(require_moderator)],
)
async def admin_submissions(
    status_filter: Optional[str] = Query("pending", alias="status"),
    db: Optional[Session] = Depends(get_db),
):
    """
    List submissions for review, newest first.

    Defaults to the pending queue; pass status=all for every submission.
    """
    wanted = None if status_filter in (None, "", "all") else status_filter

    try:
        submissions = list_submissions(db, status=wanted)
    except DirectoryError as e:
        return error_response(e)

    return SubmissionListResponse(
        submissions=[SubmissionResponse.model_validate(s) for s in submissions],
        count=len(submissions),
        counts=count_by_status(db)
    )


@router.post(
    "/submissions/{submission_id}/approve",
    dependencies=[Depends(require_moderator)],
)
async def approve(
    submission_id: str,
    db: Optional[Session] = Depends(get_db),
):
    """Approve a pending submission and publish it as a tool."""
    try:
        tool = approve_submission(db, submission_id)
    except DirectoryError as e:
        return error_response(e)

    return {"success": True, "tool_id": str(tool.id)}


@router.post(
    "/submissions/{submission_id}/reject",
    dependencies=[Depends(require_moderator)],
)
async def reject(
    submission_id: str,
    db: Optional[Session] = Depends(get_db),
):
    """Reject a pending submission."""
    try:
        reject_submission(db, submission_id)
    except DirectoryError as e:
        return error_response(e)

    return {"success": True}
