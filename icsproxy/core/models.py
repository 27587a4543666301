"""Data models shared by the fetcher and the HTTP layer."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class FetchResponse(BaseModel):
    """Result of one upstream ICS fetch.

    ``success`` is False for non-2xx statuses and for transport failures; in
    the latter case ``status_code`` is None.
    """

    success: bool
    content: Optional[str] = None
    status_code: Optional[int] = None
    headers: dict[str, str] = Field(default_factory=dict)
    error_message: Optional[str] = None
    fetch_time: datetime = Field(default_factory=_now_utc)

    @property
    def content_length(self) -> int:
        """Length of the body in characters (0 when there is none)."""
        return len(self.content) if self.content else 0


class CalendarRequest(BaseModel):
    """Resolved parameters of one /calendar.ics request."""

    source_url: str = Field(..., description="Upstream ICS URL")
    target_tz: str = Field(..., description="IANA timezone the output is expressed in")
    override_existing: bool = Field(
        default=True, description="Convert values that already carry a TZID"
    )
