"""
Page/limit helpers shared by list endpoints
"""
import math
from typing import List, Optional


def page_offset(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit


def pagination_meta(page: int, limit: int, total: int) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }


def split_csv(value: Optional[str]) -> List[str]:
    """'a, b,,c' -> ['a', 'b', 'c']"""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def split_csv_ints(value: Optional[str]) -> List[int]:
    """Comma-separated IDs; non-numeric entries are ignored"""
    return [int(part) for part in split_csv(value) if part.isdigit()]
