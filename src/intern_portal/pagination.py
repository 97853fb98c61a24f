import math

from pydantic import BaseModel


class Pagination(BaseModel):
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total_count: int) -> "Pagination":
        total_pages = math.ceil(total_count / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total_count=total_count,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


def offset_for(page: int, limit: int) -> int:
    return (page - 1) * limit
