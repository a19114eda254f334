"""Public tool listing, rating and tracking routes."""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import client_ip, error_response
from app.schemas.directory import (
    RatingCreate, RatingResponse, ToolEvent, ToolListResponse, ToolResponse
)
from app.services.errors import DirectoryError
from app.services.listing import category_summaries, get_tool, list_tools
from app.services.ratings import rate_tool, track_event

router = APIRouter(prefix="/api", tags=["tools"])


@router.get("/tools", response_model=ToolListResponse)
async def tools_index(
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = "rating",
    db: Optional[Session] = Depends(get_db),
):
    """
    List approved tools.

    Sort options: rating (default), newest, popular
    """
    try:
        tools = list_tools(db, category=category or None, search=search, sort=sort)
    except DirectoryError as e:
        return error_response(e)

    return ToolListResponse(
        tools=[ToolResponse.model_validate(t) for t in tools],
        count=len(tools)
    )


@router.get("/tools/{tool_id}", response_model=ToolResponse)
async def tool_detail(
    tool_id: str,
    db: Optional[Session] = Depends(get_db),
):
    """Get a single approved tool."""
    try:
        tool = get_tool(db, tool_id)
    except DirectoryError as e:
        return error_response(e)

    return ToolResponse.model_validate(tool)


@router.get("/categories")
async def categories(db: Optional[Session] = Depends(get_db)):
    """List categories with their approved tool counts."""
    return {"categories": [c.model_dump(mode="json") for c in category_summaries(db)]}


@router.post("/tools/{tool_id}/ratings", response_model=RatingResponse)
async def create_rating(
    tool_id: str,
    rating_data: RatingCreate,
    rater_id: str = Depends(client_ip),
    db: Optional[Session] = Depends(get_db),
):
    """Rate a tool from 1 to 5. Rating again replaces the earlier rating."""
    try:
        tool = rate_tool(
            db,
            tool_id,
            rating_data.rating,
            rater_id,
            review_text=rating_data.review_text
        )
    except DirectoryError as e:
        return error_response(e)

    return RatingResponse(
        avg_rating=tool.avg_rating,
        total_ratings=tool.total_ratings
    )


@router.post("/tools/{tool_id}/events")
async def create_event(
    tool_id: str,
    event: ToolEvent,
    db: Optional[Session] = Depends(get_db),
):
    """Record a view or click on a tool."""
    try:
        track_event(db, tool_id, event.action)
    except DirectoryError as e:
        return error_response(e)

    return {"success": True}
