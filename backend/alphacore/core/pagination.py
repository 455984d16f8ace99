"""Pagination - page/limit arithmetic shared by list endpoints."""

import math


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def pagination_meta(total: int, page: int, limit: int) -> dict:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }
