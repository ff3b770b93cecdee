from datetime import datetime


def at(day: int, hour: int = 12, minute: int = 0, month: int = 1, year: int = 2025) -> datetime:
    """Fixed timestamps for tests that care about ordering or report windows."""
    return datetime(year, month, day, hour, minute)
