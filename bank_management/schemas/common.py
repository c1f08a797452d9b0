from datetime import datetime
from decimal import Decimal
from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from bank_management.utils.dates import utcnow

T = TypeVar("T")

# Decimal in Python, plain number in JSON
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input, renders camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: str = ""
    errors: List[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=utcnow)


class PagedResult(CamelModel, Generic[T]):
    items: List[T] = Field(default_factory=list)
    total_count: int
    page: int
    page_size: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


def ok(data=None, message: str = "") -> ApiResponse:
    return ApiResponse(success=True, data=data, message=message)


def failure(message: str, errors: Optional[List[str]] = None) -> ApiResponse:
    return ApiResponse(success=False, data=None, message=message, errors=errors or [])
