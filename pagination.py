"""
Two pagination contracts:

* offset pagination (page/limit) for our own collections, exact totals;
* cursor pagination for the media host, which only hands out opaque
  cursors. Its total is counted separately and is only an estimate of
  where the cursor is.
"""
import math
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from database import Repository, SortSpec

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


class OffsetPagination(BaseModel):
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int
    pages: int


class CursorPagination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool
    next_cursor: Optional[str] = None


def paginate(
    repo: Repository,
    page: int = 1,
    limit: int = DEFAULT_LIMIT,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort: Optional[SortSpec] = None,
) -> Tuple[List[dict], OffsetPagination]:
    total = repo.count(filter_dict)
    items = repo.find(filter_dict, sort=sort, skip=(page - 1) * limit, limit=limit)
    return items, OffsetPagination(page=page, limit=limit, total=total, pages=page_count(total, limit))
