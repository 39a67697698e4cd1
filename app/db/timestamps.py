from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp used as the column default for every created_at/updated_at"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
