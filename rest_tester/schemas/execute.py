"""
Pydantic schemas for request execution.

Defines the normalized response shape shared by live executions and
stored history records.
"""

from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field


# HTTP methods supported by the system
HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]

HTTP_METHODS: tuple[str, ...] = get_args(HttpMethod)

# Sentinel status for responses synthesized from transport failures
NETWORK_ERROR_STATUS = 0
NETWORK_ERROR_TEXT = "Network Error"


class ResponseRecord(BaseModel):
    """
    Normalized outcome of one HTTP request.

    Transport failures produce the same shape with ``status == 0`` and
    ``data == {"error": <message>}``.
    """
    status: int
    status_text: str = Field(alias="statusText")
    data: Any = None
    headers: dict[str, str] = {}
    duration: int = Field(ge=0)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_network_error(self) -> bool:
        return self.status == NETWORK_ERROR_STATUS

    @classmethod
    def network_error(cls, message: str, duration: int) -> "ResponseRecord":
        """Build the pseudo-response for a request that never completed."""
        return cls(
            status=NETWORK_ERROR_STATUS,
            status_text=NETWORK_ERROR_TEXT,
            data={"error": message},
            headers={},
            duration=duration,
        )
