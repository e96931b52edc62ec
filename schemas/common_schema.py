from typing import Any
from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Envelope shared by every JSON response."""
    status: bool = True
    message: str
    data: Any = None
    errors: Any = None


class Pagination(BaseModel):
    current_page: int
    per_page: int
    total: int
    last_page: int
    next_page_url: str | None = None
    prev_page_url: str | None = None

    @classmethod
    def build(cls, page: int, per_page: int, total: int):
        last_page = max(1, -(-total // per_page))
        return cls(
            current_page=page,
            per_page=per_page,
            total=total,
            last_page=last_page,
            next_page_url=f"?page={page + 1}" if page < last_page else None,
            prev_page_url=f"?page={page - 1}" if page > 1 else None,
        )
