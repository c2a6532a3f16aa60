from datetime import datetime, timezone


def utcnow():
    """Naive UTC timestamp; all stored datetimes are naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value):
    """Parse an ISO 8601 string into a naive UTC datetime.

    Offsets are honoured and converted; a string without an offset is taken
    to already be UTC. Raises ValueError on malformed input.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise TypeError(f"Cannot parse {type(value).__name__} as a timestamp")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def isoformat(value):
    if value is None:
        return None
    return value.isoformat() + "Z"
