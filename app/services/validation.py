"""Submission validation and text sanitization."""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from bs4 import BeautifulSoup
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from app.schemas.directory import ToolCategory

TITLE_LENGTH = (3, 255)
DESCRIPTION_LENGTH = (10, 2000)
CREATOR_NAME_LENGTH = (2, 255)
CREATOR_BACKGROUND_MAX = 2000

VALID_CATEGORIES = frozenset(c.value for c in ToolCategory)

TEXT_FIELDS = ("title", "description", "creator_name", "creator_background")
URL_FIELDS = ("url", "creator_link", "thumbnail_url")

_url_adapter = TypeAdapter(AnyHttpUrl)

# Nested/encoded markup can take a few passes to fully unwrap
_MAX_SANITIZE_PASSES = 5

# "&" not starting an entity reference, e.g. AT&T or R&D
_BARE_AMPERSAND = re.compile(r"&(?!#?[0-9A-Za-z]+;)")
_RUNS_OF_SPACES = re.compile(r"[ \t]{2,}")


@dataclass
class ValidationResult:
    """Outcome of validating a submission payload."""
    valid: bool
    errors: List[str] = field(default_factory=list)


def is_valid_url(value: Any) -> bool:
    """Return True if value is a well-formed absolute http(s) URL."""
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        _url_adapter.validate_python(value.strip())
    except ValidationError:
        return False
    return True


def _length_ok(value: Any, bounds: tuple) -> bool:
    if not isinstance(value, str):
        return False
    low, high = bounds
    return low <= len(value.strip()) <= high


def validate_submission(data: Mapping[str, Any]) -> ValidationResult:
    """
    Check a candidate submission against the field constraints.

    Args:
        data: Submission payload (missing keys are treated as absent)

    Returns:
        ValidationResult with one message per failing field
    """
    errors = []

    if not _length_ok(data.get("title"), TITLE_LENGTH):
        errors.append("Title must be between 3 and 255 characters")

    if not is_valid_url(data.get("url")):
        errors.append("Must be a valid URL")

    category = data.get("category")
    if not isinstance(category, str) or category not in VALID_CATEGORIES:
        errors.append("Invalid category")

    if not _length_ok(data.get("description"), DESCRIPTION_LENGTH):
        errors.append("Description must be between 10 and 2000 characters")

    if not _length_ok(data.get("creator_name"), CREATOR_NAME_LENGTH):
        errors.append("Creator name must be between 2 and 255 characters")

    creator_link = data.get("creator_link")
    if creator_link not in (None, "") and not is_valid_url(creator_link):
        errors.append("Creator link must be a valid URL")

    thumbnail_url = data.get("thumbnail_url")
    if thumbnail_url not in (None, "") and not is_valid_url(thumbnail_url):
        errors.append("Thumbnail URL must be a valid URL")

    creator_background = data.get("creator_background")
    if creator_background is not None and (
        not isinstance(creator_background, str) or len(creator_background) > CREATOR_BACKGROUND_MAX
    ):
        errors.append("Creator background must be at most 2000 characters")

    return ValidationResult(valid=not errors, errors=errors)


def _strip_markup_once(text: str, decode_entities: bool) -> str:
    # Later passes see already-decoded text, so every "&" there is literal
    if decode_entities:
        markup = _BARE_AMPERSAND.sub("&amp;", text)
    else:
        markup = text.replace("&", "&amp;")

    soup = BeautifulSoup(markup, "html.parser")
    for element in soup(["script", "style"]):
        element.decompose()
    return _RUNS_OF_SPACES.sub(" ", soup.get_text(separator=" "))


def sanitize_text(text: Optional[str]) -> Optional[str]:
    """
    Remove script blocks and all tag markup from free text, then trim.

    Text without any "<" is only trimmed, so "AT&T" and "&amp;" stay as
    typed. Not a substitute for escaping at render time.
    """
    if text is None:
        return None

    cleaned = text
    for attempt in range(_MAX_SANITIZE_PASSES):
        if "<" not in cleaned:
            break
        stripped = _strip_markup_once(cleaned, decode_entities=attempt == 0)
        if stripped == cleaned:
            break
        cleaned = stripped

    return cleaned.strip()


def sanitize_submission(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of the payload with text fields sanitized and URLs trimmed."""
    clean = dict(data)

    for key in TEXT_FIELDS:
        if isinstance(clean.get(key), str):
            clean[key] = sanitize_text(clean[key])

    for key in URL_FIELDS:
        if isinstance(clean.get(key), str):
            clean[key] = clean[key].strip()

    # Empty optional fields are stored as NULL
    for key in ("creator_link", "creator_background", "thumbnail_url"):
        if clean.get(key) == "":
            clean[key] = None

    return clean
