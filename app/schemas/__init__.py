"""Pydantic schemas."""
from app.schemas.directory import (
    ToolCategory,
    SubmissionCreate,
    RatingCreate,
    ToolEvent,
    AdminLogin,
    ToolResponse,
    ToolListResponse,
    SubmissionResponse,
    SubmissionListResponse,
    CategorySummary,
    RatingResponse,
    AdminSessionResponse,
)

__all__ = [
    "ToolCategory",
    "SubmissionCreate",
    "RatingCreate",
    "ToolEvent",
    "AdminLogin",
    "ToolResponse",
    "ToolListResponse",
    "SubmissionResponse",
    "SubmissionListResponse",
    "CategorySummary",
    "RatingResponse",
    "AdminSessionResponse",
]
