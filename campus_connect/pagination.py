import math
from typing import Tuple
from flask import request
from .extensions import db

MAX_LIMIT = 100


def _positive_int(raw, default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def page_args(default_limit: int = 10) -> Tuple[int, int]:
    page = _positive_int(request.args.get("page"), 1)
    limit = min(_positive_int(request.args.get("limit"), default_limit), MAX_LIMIT)
    return page, limit


def paginate(stmt, default_limit: int = 10):
    """Run ``stmt`` one page at a time.

    Returns ``(items, meta)`` where meta carries totalPages, currentPage
    and total for the response body.
    """
    page, limit = page_args(default_limit)
    result = db.paginate(stmt, page=page, per_page=limit, max_per_page=MAX_LIMIT, error_out=False)
    meta = {
        "totalPages": math.ceil(result.total / limit) if result.total else 0,
        "currentPage": page,
        "total": result.total,
    }
    return result.items, meta
