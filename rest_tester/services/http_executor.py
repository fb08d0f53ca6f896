"""
HTTP execution service for sending HTTP requests.

Runs in the caller's process using httpx, measures latency and normalizes
every outcome, including transport failures, into a ResponseRecord.
"""

import json
import time
from typing import Any

import httpx

from ..config import get_settings
from ..logger import get_logger
from ..schemas.execute import ResponseRecord


logger = get_logger(__name__)

DEFAULT_HEADERS = {"Content-Type": "application/json"}


def merge_headers(headers: dict[str, str] | None) -> dict[str, str]:
    """
    Merge caller headers over the defaults.

    Header names compare case-insensitively, so ``content-type`` supplied
    by the caller replaces the default ``Content-Type``.

    Example:
        >>> merge_headers({"content-type": "text/plain", "X-Id": "1"})
        {'content-type': 'text/plain', 'X-Id': '1'}
    """
    headers = headers or {}
    supplied = {name.lower() for name in headers}
    merged = {
        name: value for name, value in DEFAULT_HEADERS.items()
        if name.lower() not in supplied
    }
    merged.update(headers)
    return merged


def parse_response_data(body: str, content_type: str | None) -> Any:
    """
    Decode the response body as JSON if content type indicates JSON.

    Args:
        body: Response body text
        content_type: Content-Type header value

    Returns:
        Parsed JSON value, or the body text when it is not JSON or fails
        to decode
    """
    if content_type and "application/json" in content_type.lower():
        try:
            return json.loads(body)
        except json.JSONDecodeError:
            return body
    return body


def _elapsed_ms(start_time: float) -> int:
    return max(0, int((time.perf_counter() - start_time) * 1000))


async def execute_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    body: str | None = None,
    *,
    timeout: float | None = None,
    client: httpx.AsyncClient | None = None
) -> ResponseRecord:
    """
    Execute an HTTP request and return the normalized response.

    Args:
        method: HTTP method (GET, POST, PUT, DELETE)
        url: Target URL
        headers: Request headers, merged over the JSON content type default
        body: Raw request payload; ignored for GET
        timeout: Timeout in seconds, defaults to ``Settings.request_timeout``
        client: Optional pre-configured client; one is created per call
            otherwise

    Returns:
        ResponseRecord with the server's status, or a pseudo-response
        with status 0 when the request could not complete
    """
    if timeout is None:
        timeout = get_settings().request_timeout

    content = body if body is not None and method != "GET" else None
    request_headers = merge_headers(headers)

    start_time = time.perf_counter()
    try:
        if client is not None:
            response = await client.request(
                method, url, headers=request_headers, content=content, timeout=timeout
            )
        else:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.request(
                    method, url, headers=request_headers, content=content
                )
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        duration = _elapsed_ms(start_time)
        message = str(e) or e.__class__.__name__
        logger.warning(
            "Request failed before a response was received",
            extra={"method": method, "url": url, "error": message},
        )
        return ResponseRecord.network_error(message, duration)
    except Exception as e:
        duration = _elapsed_ms(start_time)
        message = str(e) or e.__class__.__name__
        logger.warning(
            "Request could not be sent",
            exc_info=e,
            extra={"method": method, "url": url, "error": message},
        )
        return ResponseRecord.network_error(message, duration)

    duration = _elapsed_ms(start_time)
    response_headers = dict(response.headers)

    return ResponseRecord(
        status=response.status_code,
        status_text=response.reason_phrase or "",
        data=parse_response_data(response.text, response.headers.get("content-type")),
        headers=response_headers,
        duration=duration,
    )
