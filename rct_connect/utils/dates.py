from datetime import datetime, timedelta, timezone

UTC = timezone.utc


def _utcnow() -> datetime:
    return datetime.now(UTC)


def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix.

    Every stored timestamp uses this exact shape so plain string comparison
    orders them chronologically.
    """
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    return to_iso(_utcnow())


def iso_in(**delta) -> str:
    return to_iso(_utcnow() + timedelta(**delta))


def parse_iso(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp from a client (any precision, ``Z`` or an
    offset). Naive values are taken as UTC. Raises ValueError when unparseable.
    """
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
