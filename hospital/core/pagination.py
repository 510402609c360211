"""
Pagination for admin list endpoints.
"""
from typing import TypeVar, Generic, List, Type
from pydantic import BaseModel
from fastapi import Query
from sqlalchemy.orm import Query as SQLAlchemyQuery
import math

T = TypeVar("T")

class PageParams:
    """
    Page parameters for pagination.

    Attributes:
        page: Page number (1-indexed)
        size: Number of items per page
    """
    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number"),
        size: int = Query(10, ge=1, le=100, description="Items per page")
    ):
        self.page = page
        self.size = size
        self.offset = (page - 1) * size


class PageResponse(BaseModel, Generic[T]):
    """
    Paginated response model.

    Attributes:
        items: List of items for the current page
        total: Total number of items
        page: Current page number
        size: Number of items per page
        pages: Total number of pages
        has_next: Whether there is a next page
        has_prev: Whether there is a previous page
    """
    items: List[T]
    total: int
    page: int
    size: int
    pages: int
    has_next: bool
    has_prev: bool


def paginate(query: SQLAlchemyQuery, page_params: PageParams, schema_class: Type[BaseModel]) -> PageResponse:
    """
    Run one page of a SQLAlchemy query and wrap it with page metadata.

    Rows are converted with schema_class.model_validate, so the schema needs
    from_attributes enabled.
    """
    total = query.count()
    rows = query.offset(page_params.offset).limit(page_params.size).all()
    pages = math.ceil(total / page_params.size) if total else 0

    return PageResponse(
        items=[schema_class.model_validate(row) for row in rows],
        total=total,
        page=page_params.page,
        size=page_params.size,
        pages=pages,
        has_next=page_params.page < pages,
        has_prev=page_params.page > 1
    )
