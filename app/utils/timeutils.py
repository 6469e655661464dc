from datetime import datetime, UTC


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how TIMESTAMP columns round-trip."""
    return datetime.now(UTC).replace(tzinfo=None)
