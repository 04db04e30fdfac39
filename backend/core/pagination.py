# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Offset pagination shared by the student and user listings."""

import math
from typing import List, Tuple

from pydantic import BaseModel
from sqlalchemy.orm import Query

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


def paginate(query: Query, page: int, limit: int) -> Tuple[List, Pagination]:
    """
    Run *query* for one page.  ``skip = (page - 1) * limit``.

    *query* must already carry its filters and ordering; the total is
    counted over the same filters.
    """
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return rows, Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit),
    )
