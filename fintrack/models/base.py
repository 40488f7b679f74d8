from datetime import datetime, timezone


def utcnow() -> datetime:
    # Naive UTC, stored through plain DateTime columns, so stored and fresh values compare
    return datetime.now(timezone.utc).replace(tzinfo=None)
