"""
Input validation helpers shared by services and endpoints
"""
from typing import Any, Optional, Tuple
from uuid import UUID

from vtube.core.exceptions import ValidationError


def parse_uuid(value: Any, field: str = "id") -> UUID:
    """Coerce a path/body value to a UUID or raise a 400 ValidationError"""
    if isinstance(value, UUID):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required", field=field)
    try:
        return UUID(str(value).strip())
    except (ValueError, AttributeError, TypeError):
        raise ValidationError(f"Invalid {field} format", field=field, value=value)


def optional_uuid(value: Any, field: str = "id") -> Optional[UUID]:
    """Like parse_uuid but lets empty values through as None"""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_uuid(value, field)


def normalize_pagination(page: Optional[int], limit: Optional[int], default_limit: int, max_limit: int) -> Tuple[int, int]:
    """Clamp page/limit to sane values: page >= 1 and 1 <= limit <= max_limit"""
    page = page if page and page > 0 else 1
    limit = limit if limit and limit > 0 else default_limit
    return page, min(limit, max_limit)


def require_text(value: Optional[str], field: str) -> str:
    """Return a stripped non-empty string or raise ValidationError"""
    if value is None or not str(value).strip():
        raise ValidationError(f"{field.capitalize()} is required", field=field)
    return str(value).strip()
