from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (space separated, like the stored rows)."""
    return datetime.now(timezone.utc).isoformat(sep=" ")
