"""Time helpers shared by models and services."""
from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as a naive datetime object.

    Timestamp columns are stored without time zone, so the tzinfo is
    stripped after reading the aware UTC clock.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    """Current UTC calendar date (used for export file names)."""
    return utc_now().date()
