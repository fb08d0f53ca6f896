"""
History record API routes.

Provides endpoints for storing, viewing and deleting request history.
Records are created by clients after every completed send.
"""

import math

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db
from ..exceptions import BadRequestError, ErrorResponse, ResourceNotFoundError
from ..schemas.execute import HTTP_METHODS
from ..schemas.history import (
    HistoryCreate,
    HistoryCreatedResponse,
    HistoryListResponse,
    HistoryResponse,
    SuccessResponse,
)
from ..services import history_service


router = APIRouter(prefix="/history", tags=["history"])

# Keeps the SQL OFFSET within a signed 64-bit integer
MAX_PAGE = 2**31


@router.post(
    "",
    response_model=HistoryCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "Duplicate id"}},
)
def create_history(record: HistoryCreate, db: Session = Depends(get_db)):
    """
    Store a history record.

    Args:
        record: Request parameters and captured response
        db: Database session

    Returns:
        Acknowledgement with the stored record's id
    """
    history = history_service.create_history(db, record)
    return HistoryCreatedResponse(id=history.id)


@router.get("", response_model=HistoryListResponse)
def list_history(
    page: int = Query(1, le=MAX_PAGE),
    search: str | None = None,
    method: str | None = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Get one page of history records ordered by timestamp (descending).

    Args:
        page: 1-based page number; values below 1 return the first page
        search: Case-insensitive URL substring filter
        method: HTTP method filter, or ALL
        db: Database session

    Returns:
        HistoryListResponse with items, total and page metadata
    """
    if method is not None:
        method = method.upper()
        if method != "ALL" and method not in HTTP_METHODS:
            raise BadRequestError(f"Unsupported method filter: {method}")

    page = max(page, 1)
    page_size = settings.history_page_size
    items, total = history_service.list_history(
        db, page=page, page_size=page_size, search=search, method=method
    )
    return HistoryListResponse(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size),
    )


@router.get(
    "/{record_id}",
    response_model=HistoryResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_history(record_id: str, db: Session = Depends(get_db)):
    """
    Get a single history record by ID.

    Raises:
        ResourceNotFoundError: 404 if the record does not exist
    """
    history = history_service.get_history(db, record_id)
    if history is None:
        raise ResourceNotFoundError("History record", record_id)
    return history


@router.delete("/{record_id}", response_model=SuccessResponse)
def delete_history(record_id: str, db: Session = Depends(get_db)):
    """Delete a single history record; unknown ids succeed too."""
    history_service.delete_history(db, record_id)
    return SuccessResponse()


@router.delete("", response_model=SuccessResponse)
def clear_all_history(db: Session = Depends(get_db)):
    """Clear all history records."""
    history_service.clear_history(db)
    return SuccessResponse()
