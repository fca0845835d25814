"""
core/pagination.py — limit/offset handling for list endpoints.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Query

from core.config import settings


@dataclass
class PageParams:
    limit: int
    offset: int


def page_params(
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
) -> PageParams:
    """FastAPI dependency: clamp the requested page size to settings.max_page_size."""
    return PageParams(
        limit=min(limit or settings.default_page_size, settings.max_page_size),
        offset=offset,
    )


def paginate(query, page: PageParams):
    """Return (rows, total) for a SQLAlchemy query."""
    total = query.order_by(None).count()
    rows = query.limit(page.limit).offset(page.offset).all()
    return rows, total


def page_response(rows, total: int, page: PageParams, schema) -> dict:
    return {
        "items": [schema.model_validate(r) for r in rows],
        "total": total,
        "limit": page.limit,
        "offset": page.offset,
    }
