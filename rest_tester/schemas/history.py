"""
Pydantic schemas for request history.

Defines schemas for creating, returning and paginating history records.
Wire names follow the client's camelCase convention where they differ.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .execute import HttpMethod, ResponseRecord


# Largest value a signed 64-bit BIGINT column holds
MAX_TIMESTAMP = 2**63 - 1


class HistoryCreate(BaseModel):
    """
    Schema for creating a history record.

    ``id`` and ``timestamp`` are normally generated by the client; when
    omitted the server fills them in at insert time.
    """
    id: str | None = Field(default=None, min_length=1, max_length=64)
    method: HttpMethod
    url: str
    headers: dict[str, str] = {}
    body: str | None = None
    timestamp: int | None = Field(default=None, ge=0, le=MAX_TIMESTAMP)
    response: ResponseRecord | None = None

    @field_validator("url")
    @classmethod
    def url_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("URL must not be empty")
        return value


class HistoryResponse(BaseModel):
    """Schema for a stored history record."""
    id: str
    method: HttpMethod
    url: str
    headers: dict[str, str]
    body: str | None
    timestamp: int
    response: ResponseRecord | None

    model_config = ConfigDict(from_attributes=True)


class HistoryListResponse(BaseModel):
    """Schema for one page of history records."""
    items: list[HistoryResponse]
    total: int
    page: int
    page_size: int = Field(alias="pageSize")
    total_pages: int = Field(alias="totalPages")

    model_config = ConfigDict(populate_by_name=True)


class SuccessResponse(BaseModel):
    """Acknowledgement returned by mutating endpoints."""
    success: bool = True


class HistoryCreatedResponse(SuccessResponse):
    """Acknowledgement for a created record, carrying its id."""
    id: str
