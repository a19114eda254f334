"""Public tool listing."""
from typing import Any, List, Optional

from sqlalchemy import desc, func, or_
from sqlalchemy.orm import Session

from app.models.directory import Tool
from app.schemas.directory import CATEGORY_INFO, CategorySummary, ToolCategory
from app.services.errors import InvalidInput, NotFound
from app.services.submissions import parse_id
from app.services.validation import VALID_CATEGORIES

SORT_COLUMNS = {
    "rating": Tool.avg_rating,
    "newest": Tool.created_at,
    "popular": Tool.total_ratings,
}


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def list_tools(
    db: Optional[Session],
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = "rating",
) -> List[Tool]:
    """
    List approved tools.

    Args:
        db: Database session (None when storage is disabled)
        category: Only tools in this category
        search: Case-insensitive substring of title, description or creator name
        sort: "rating" (highest average first), "newest" or "popular"
            (most ratings first)

    Returns:
        Matching tools; empty when storage is disabled
    """
    sort = sort or "rating"
    if sort not in SORT_COLUMNS:
        raise InvalidInput(f"Unknown sort order: {sort}")

    if isinstance(category, ToolCategory):
        category = category.value
    if category and category not in VALID_CATEGORIES:
        raise InvalidInput(f"Unknown category: {category}")

    if db is None:
        return []

    query = db.query(Tool).filter(Tool.approved == True)

    if category:
        query = query.filter(Tool.category == category)

    term = search.strip() if search else ""
    if term:
        pattern = _like_pattern(term)
        query = query.filter(or_(
            Tool.title.ilike(pattern, escape="\\"),
            Tool.description.ilike(pattern, escape="\\"),
            Tool.creator_name.ilike(pattern, escape="\\"),
        ))

    return query.order_by(desc(SORT_COLUMNS[sort]), desc(Tool.created_at)).all()


def get_tool(db: Optional[Session], tool_id: Any) -> Tool:
    """Fetch an approved tool by id, or raise NotFound."""
    if db is None:
        raise NotFound("Tool not found")

    tid = parse_id(tool_id, "Tool not found")
    tool = db.query(Tool).filter(Tool.id == tid, Tool.approved == True).first()
    if not tool:
        raise NotFound("Tool not found")
    return tool


def category_summaries(db: Optional[Session]) -> List[CategorySummary]:
    """Every category with the number of approved tools in it."""
    counts = {}
    if db is not None:
        rows = (
            db.query(Tool.category, func.count(Tool.id))
            .filter(Tool.approved == True)
            .group_by(Tool.category)
            .all()
        )
        counts = dict(rows)

    return [
        CategorySummary(
            id=category,
            name=info["name"],
            description=info["description"],
            count=counts.get(category.value, 0),
        )
        for category, info in CATEGORY_INFO.items()
    ]
