"""
Pydantic schemas package.

Exports all schemas for API request/response validation.
"""

from .execute import (
    HttpMethod,
    HTTP_METHODS,
    ResponseRecord,
)

from .history import (
    HistoryCreate,
    HistoryResponse,
    HistoryListResponse,
    SuccessResponse,
    HistoryCreatedResponse,
)

__all__ = [
    # Execute schemas
    "HttpMethod",
    "HTTP_METHODS",
    "ResponseRecord",
    # History schemas
    "HistoryCreate",
    "HistoryResponse",
    "HistoryListResponse",
    "SuccessResponse",
    "HistoryCreatedResponse",
]
