"""Clock collaborators for SAML timestamp generation.

SAML instants are serialized at second precision in UTC, so every clock
truncates microseconds. Response construction reads the clock exactly once.
"""

from datetime import datetime, timezone
from typing import Protocol

SAML_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class Clock(Protocol):
    """Source of the current instant."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in UTC, truncated to whole seconds."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(microsecond=0)


class FixedClock:
    """Clock that always returns the same instant (for tests and replays)."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant.astimezone(timezone.utc).replace(microsecond=0)

    def now(self) -> datetime:
        return self._instant


def format_saml_instant(value: datetime) -> str:
    """Format a datetime as a SAML ``xs:dateTime`` in UTC (``Z`` suffix).

    Naive datetimes are taken to be UTC already.

    Example:
        >>> format_saml_instant(datetime(2003, 4, 17, 0, 46, 2, tzinfo=timezone.utc))
        '2003-04-17T00:46:02Z'
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(SAML_DATETIME_FORMAT)


def parse_saml_instant(value: str) -> datetime:
    """Parse a SAML ``xs:dateTime`` string into an aware UTC datetime."""
    return datetime.fromisoformat(value.replace("Z", "+00:00")).astimezone(timezone.utc)
