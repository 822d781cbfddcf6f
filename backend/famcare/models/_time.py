from datetime import UTC, datetime


def utc_now_naive() -> datetime:
    """Current UTC time without tzinfo; datetime columns are plain ``DateTime``."""
    return datetime.now(UTC).replace(tzinfo=None)
