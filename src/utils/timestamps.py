"""UTC timestamp helpers shared by the progress and live-session engines."""

from datetime import UTC, date, datetime
from typing import Annotated

from pydantic import AfterValidator


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_date(dt: datetime) -> date:
    """Calendar date of ``dt`` in UTC."""
    return as_utc(dt).date()


# Every timestamp accepted by a schema is normalized to aware UTC
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]
