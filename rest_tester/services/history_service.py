"""
History service for persisting request/response records.

Storage errors are logged and re-raised; callers decide whether a failed
write matters to them.
"""

import time
import uuid

from sqlalchemy import func, select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import DuplicateRecordError
from ..logger import get_logger
from ..models.history import History
from ..schemas.history import HistoryCreate


logger = get_logger(__name__)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def _apply_filters(stmt, search: str | None, method: str | None):
    if search:
        stmt = stmt.where(func.lower(History.url).contains(search.lower(), autoescape=True))
    if method and method != "ALL":
        stmt = stmt.where(History.method == method)
    return stmt


def create_history(db: Session, record: HistoryCreate) -> History:
    """
    Save a history record.

    Args:
        db: Database session
        record: The record to store; a missing id or timestamp is generated

    Returns:
        The created history record

    Raises:
        DuplicateRecordError: If a record with the same id already exists
        SQLAlchemyError: On any other storage failure
    """
    history = History(
        id=record.id or uuid.uuid4().hex,
        method=record.method,
        url=record.url,
        headers=record.headers,
        body=record.body,
        timestamp=record.timestamp if record.timestamp is not None else now_ms(),
        response=record.response.model_dump(by_alias=True) if record.response else None,
    )
    db.add(history)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if get_history(db, history.id) is not None:
            raise DuplicateRecordError(history.id)
        logger.exception("Failed to save history record", extra={"record_id": history.id})
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to save history record", extra={"record_id": history.id})
        raise
    db.refresh(history)
    logger.info(
        "History record saved",
        extra={"record_id": history.id, "method": history.method, "url": history.url},
    )
    return history


def list_history(
    db: Session,
    page: int,
    page_size: int,
    search: str | None = None,
    method: str | None = None
) -> tuple[list[History], int]:
    """
    Get one page of history records, newest first.

    Filters apply to the whole history before pagination, so ``total``
    counts every matching record.

    Args:
        db: Database session
        page: 1-based page number; values below 1 are treated as 1
        page_size: Records per page
        search: Case-insensitive URL substring
        method: Exact HTTP method, or None/"ALL" for any

    Returns:
        Tuple of (records on the page, total matching records)
    """
    page = max(page, 1)

    count_stmt = _apply_filters(select(func.count()).select_from(History), search, method)
    total = db.scalar(count_stmt) or 0

    items_stmt = (
        _apply_filters(select(History), search, method)
        .order_by(History.timestamp.desc(), History.seq.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    items = list(db.scalars(items_stmt))
    return items, total


def get_history(db: Session, record_id: str) -> History | None:
    return db.scalar(select(History).where(History.id == record_id))


def delete_history(db: Session, record_id: str) -> bool:
    """
    Delete a single history record.

    Deleting an unknown id is not an error.

    Returns:
        True if a record was removed
    """
    result = db.execute(delete(History).where(History.id == record_id))
    db.commit()
    removed = result.rowcount > 0
    logger.info("History record deleted", extra={"record_id": record_id, "removed": removed})
    return removed


def clear_history(db: Session) -> int:
    """
    Delete every history record.

    Returns:
        Number of records removed
    """
    result = db.execute(delete(History))
    db.commit()
    logger.info("History cleared", extra={"removed": result.rowcount})
    return result.rowcount
