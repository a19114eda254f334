"""Directory Pydantic schemas."""
from pydantic import BaseModel, Field
from datetime import datetime
from uuid import UUID
from enum import Enum
from typing import Any, Literal, Optional


class ToolCategory(str, Enum):
    """Categories a tool can be listed under."""
    MINDFULNESS = "mindfulness"
    DISTRESS_TOLERANCE = "distress-tolerance"
    EMOTION_REGULATION = "emotion-regulation"
    INTERPERSONAL_EFFECTIVENESS = "interpersonal-effectiveness"


CATEGORY_INFO = {
    ToolCategory.MINDFULNESS: {
        "name": "Mindfulness",
        "description": "Mindfulness and meditation practices",
    },
    ToolCategory.DISTRESS_TOLERANCE: {
        "name": "Distress Tolerance",
        "description": "Tools for getting through crises and managing stress",
    },
    ToolCategory.EMOTION_REGULATION: {
        "name": "Emotion Regulation",
        "description": "Tools for understanding and managing emotions",
    },
    ToolCategory.INTERPERSONAL_EFFECTIVENESS: {
        "name": "Interpersonal Effectiveness",
        "description": "Tools for building and maintaining healthy relationships",
    },
}


SortOrder = Literal["rating", "newest", "popular"]


# Request Schemas
class SubmissionCreate(BaseModel):
    """Schema for a tool submission.

    Fields are deliberately untyped: constraint checks, including wrong JSON
    types, run in the validation service so that every failing field is
    reported in one 400 response.
    """
    title: Any = None
    url: Any = None
    category: Any = None
    description: Any = None
    creator_name: Any = None
    creator_link: Any = None
    creator_background: Any = None
    thumbnail_url: Any = None


class RatingCreate(BaseModel):
    """Schema for rating a tool. ``rating`` is checked by the rating service."""
    rating: Any = None
    review_text: Optional[str] = Field(None, description="Optional review text")


class ToolEvent(BaseModel):
    """Schema for tracking a tool view or click."""
    action: Optional[str] = Field(None, description="'view' or 'click'")


class AdminLogin(BaseModel):
    """Schema for moderator login."""
    password: Optional[str] = None


# Response Schemas
class ToolResponse(BaseModel):
    """Schema for a public tool."""
    id: UUID
    title: str
    url: str
    category: str
    description: str
    creator_name: str
    creator_link: Optional[str] = None
    creator_background: Optional[str] = None
    thumbnail_url: Optional[str] = None
    avg_rating: float = 0.0
    total_ratings: int = 0
    view_count: int = 0
    click_count: int = 0
    approved: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ToolListResponse(BaseModel):
    """Schema for a tool listing."""
    tools: list[ToolResponse]
    count: int


class SubmissionResponse(BaseModel):
    """Schema for a submission as seen by moderators."""
    id: UUID
    title: str
    url: str
    category: str
    description: str
    creator_name: str
    creator_link: Optional[str] = None
    creator_background: Optional[str] = None
    thumbnail_url: Optional[str] = None
    submitter_ip: str
    status: str
    reviewed: bool
    approved: bool
    reviewed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SubmissionListResponse(BaseModel):
    """Schema for the moderation queue."""
    submissions: list[SubmissionResponse]
    count: int
    counts: dict[str, int] = Field(
        default_factory=lambda: {"pending": 0, "approved": 0, "rejected": 0}
    )


class CategorySummary(BaseModel):
    """Schema for a category with its number of approved tools."""
    id: ToolCategory
    name: str
    description: str
    count: int = 0


class RatingResponse(BaseModel):
    """Schema for a rating result with the tool's updated aggregates."""
    success: bool = True
    message: str = "Rating submitted successfully"
    avg_rating: float
    total_ratings: int


class AdminSessionResponse(BaseModel):
    """Schema for a successful moderator login."""
    success: bool = True
    message: str = "Login successful"
    token: str
    expires_in: int
