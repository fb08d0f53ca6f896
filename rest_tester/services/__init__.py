# Services package

from .http_executor import execute_request, merge_headers, parse_response_data
from .history_service import (
    create_history,
    list_history,
    get_history,
    delete_history,
    clear_history,
)
from .history_client import HistoryClient, HistoryClientError
from .request_session import RequestSession, SessionState, InvalidRequestError

__all__ = [
    "execute_request",
    "merge_headers",
    "parse_response_data",
    "create_history",
    "list_history",
    "get_history",
    "delete_history",
    "clear_history",
    "HistoryClient",
    "HistoryClientError",
    "RequestSession",
    "SessionState",
    "InvalidRequestError",
]
