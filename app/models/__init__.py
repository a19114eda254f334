"""Database models."""
from app.models.directory import Tool, Submission, SubmissionStatus, Rating

__all__ = [
    "Tool",
    "Submission",
    "SubmissionStatus",
    "Rating",
]
