"""
Client-side request session.

Drives one user's sends through an explicit state machine:

    IDLE -> SENDING -> RESPONSE_AVAILABLE | ERROR

The response is published before history is touched; history writes are
best-effort and their failures are kept in ``history_error`` instead of
being raised.
"""

import enum
import secrets
from typing import Awaitable, Callable

from ..logger import get_logger
from ..schemas.execute import HTTP_METHODS, ResponseRecord
from ..schemas.history import HistoryCreate, HistoryResponse
from .history_client import HistoryClient, HistoryClientError
from .history_service import now_ms
from .http_executor import execute_request


logger = get_logger(__name__)

Executor = Callable[..., Awaitable[ResponseRecord]]


class SessionState(str, enum.Enum):
    IDLE = "idle"
    SENDING = "sending"
    RESPONSE_AVAILABLE = "response_available"
    ERROR = "error"


class InvalidRequestError(ValueError):
    """Raised when a send is rejected before reaching the executor."""


def generate_record_id(timestamp: int) -> str:
    """Build a record id from a millisecond timestamp and a random suffix."""
    return f"{timestamp}-{secrets.token_hex(6)}"


class RequestSession:
    """
    State holder for sending requests and browsing their history.

    Attributes:
        state: Current SessionState
        response: Response shown to the user, if any
        history: Records on the current history page
        total: Number of records matching the current filter
        page: Current 1-based history page
        total_pages: Pages available for the current filter
        history_error: Message from the last failed history call, if any
    """

    def __init__(self, history: HistoryClient, *, executor: Executor = execute_request):
        self.history_client = history
        self._executor = executor
        self.state = SessionState.IDLE
        self.response: ResponseRecord | None = None
        self.history: list[HistoryResponse] = []
        self.total = 0
        self.page = 1
        self.total_pages = 0
        self.search: str | None = None
        self.method_filter: str | None = None
        self.history_error: str | None = None

    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        body: str | None = None
    ) -> ResponseRecord:
        """
        Execute a request, publish its response and record it in history.

        Raises:
            InvalidRequestError: If the method is unsupported or the URL is
                blank; the session state is left unchanged
        """
        method = method.upper()
        if method not in HTTP_METHODS:
            raise InvalidRequestError(f"Unsupported method: {method}")
        if not url or not url.strip():
            raise InvalidRequestError("URL must not be empty")
        headers = dict(headers or {})
        if method == "GET":
            body = None

        previous_state = self.state
        self.state = SessionState.SENDING
        try:
            response = await self._executor(method, url, headers, body)
        except BaseException:
            self.state = previous_state
            raise

        self.response = response
        self.state = SessionState.ERROR if response.is_network_error else SessionState.RESPONSE_AVAILABLE

        timestamp = now_ms()
        record = HistoryCreate(
            id=generate_record_id(timestamp),
            method=method,
            url=url,
            headers=headers,
            body=body,
            timestamp=timestamp,
            response=response,
        )
        await self._record(record)
        return response

    async def _record(self, record: HistoryCreate) -> None:
        try:
            await self.history_client.save(record)
            await self.refresh()
        except HistoryClientError as e:
            self.history_error = str(e)
            logger.warning(
                "History update failed",
                extra={"record_id": record.id, "error": e.detail, "status_code": e.status_code},
            )

    async def refresh(self) -> None:
        """Re-read the current history page."""
        result = await self.history_client.list(
            page=self.page, search=self.search, method=self.method_filter
        )
        self.history = result.items
        self.total = result.total
        self.page = result.page
        self.total_pages = result.total_pages
        self.history_error = None

    def select(self, record: HistoryResponse) -> None:
        """Show a stored record's response."""
        if record.response is None:
            return
        self.response = record.response
        self.state = SessionState.ERROR if record.response.is_network_error else SessionState.RESPONSE_AVAILABLE

    async def delete(self, record_id: str) -> None:
        await self.history_client.delete(record_id)
        await self.refresh()

    async def clear(self) -> None:
        await self.history_client.clear()
        self.history = []
        self.total = 0
        self.page = 1
        self.total_pages = 0

    async def set_filter(self, search: str | None = None, method: str | None = None) -> None:
        """Filter history by URL substring and method, starting at page 1."""
        self.search = search or None
        self.method_filter = None if method in (None, "", "ALL") else method.upper()
        self.page = 1
        await self.refresh()

    async def go_to_page(self, page: int) -> None:
        self.page = max(page, 1)
        await self.refresh()
