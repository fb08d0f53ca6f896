"""
History model for storing executed request records.

Each completed send (successful or not) creates one history entry holding
the request parameters and the normalized response.
"""

from typing import Any, Optional

from sqlalchemy import BigInteger, Integer, String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class History(Base):
    """
    SQLAlchemy model for request/response history.

    Records are immutable once written; the only mutation is deletion.

    Attributes:
        seq: Internal insertion sequence, used to order records that share
            a timestamp
        id: Opaque unique identifier exposed to clients
        method: HTTP method used
        url: Target URL
        headers: Headers sent with the request
        body: Raw request payload, if any
        timestamp: Creation time in epoch milliseconds
        response: Normalized response (status, statusText, data, headers,
            duration), or None if none was captured
    """
    __tablename__ = "history"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    method: Mapped[str] = mapped_column(String(10))
    url: Mapped[str] = mapped_column(Text)
    headers: Mapped[dict] = mapped_column(JSON, default=dict)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, index=True)
    response: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
