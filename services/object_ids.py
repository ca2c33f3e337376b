"""Helpers shared by the Mongo-backed stores."""

from typing import Iterable, Optional

from bson import ObjectId
from pydantic import ValidationError as PydanticValidationError


def parse_object_id(value) -> Optional[ObjectId]:
    """Return an ObjectId for a 24-hex id string, or None if it is not one."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def format_errors(errors: Iterable[dict]) -> str:
    """Flatten pydantic-style error dicts into one human-readable line."""
    parts = []
    for item in errors:
        field = ".".join(str(loc) for loc in item.get("loc", ()) if loc != "body")
        msg = item.get("msg", "invalid value")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts) or "Invalid input"


def validation_message(error: PydanticValidationError) -> str:
    """Human-readable summary of a pydantic ValidationError."""
    return format_errors(error.errors())
