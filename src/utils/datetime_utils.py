"""UTC date helpers for backend query windows."""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def days_ago_date(days: int) -> str:
    """Calendar date ``days`` before today (UTC) as YYYY-MM-DD.

    Both WIQL and ServiceNow encoded queries accept this form in date comparisons.
    """
    return (utc_now() - timedelta(days=days)).strftime("%Y-%m-%d")
