"""ISO-8601 timestamp helpers.

Submissions carry timestamps in the canonical UTC form
``YYYY-MM-DDTHH:MM:SS.mmmZ``. A string is accepted only if parsing it and
formatting it back yields the very same string.
"""

from datetime import UTC, datetime

ISO_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def format_iso(value: datetime) -> str:
    """Format a datetime in the canonical millisecond UTC form."""
    value = value.astimezone(UTC) if value.tzinfo else value
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_iso(value, strict: bool = True) -> datetime | None:
    """Parse a timestamp into an aware UTC datetime.

    In strict mode only the canonical form is accepted and anything that does
    not round-trip gives None. Otherwise any ISO-8601 string is read, with a
    missing offset taken as UTC.
    """
    if not isinstance(value, str):
        return None
    if not strict:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)
    try:
        parsed = datetime.strptime(value, ISO_FORMAT)
    except ValueError:
        return None
    if format_iso(parsed) != value:
        return None
    return parsed.replace(tzinfo=UTC)


def iso_now() -> str:
    return format_iso(datetime.now(UTC))
