# utils/helpers.py
from datetime import date, datetime, time, timedelta
import secrets
import string
from typing import Union, Optional, Tuple

NumberLike = Union[float, int, str]

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LEN = 9


def new_id() -> str:
    """
    Collision-resistant record identity: '<epoch ms>-<9 random base36 chars>'.

    Two ids minted in the same millisecond still differ in the suffix
    (36**9 combinations).
    """
    stamp = int(datetime.now().timestamp() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
    return f"{stamp}-{suffix}"


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def now() -> datetime:
    return datetime.now()


def to_iso(ts: datetime) -> str:
    """Stored timestamp format; fixed microsecond precision keeps text order == time order."""
    return ts.isoformat(timespec="microseconds")


def from_iso(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromisoformat(value)


def parse_date(value: Union[str, date]) -> date:
    """Accept a date or an ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


def day_bounds(start: Union[str, date], end: Union[str, date]) -> Tuple[str, str]:
    """
    Inclusive [start 00:00:00, end 23:59:59.999999] as stored-format strings.
    """
    lo = datetime.combine(parse_date(start), time.min)
    hi = datetime.combine(parse_date(end), time.max)
    return to_iso(lo), to_iso(hi)


def default_report_window(days: int, today: Optional[date] = None) -> Tuple[date, date]:
    end = today or date.today()
    return end - timedelta(days=days), end


def fmt_money(v: NumberLike) -> str:
    """Amount as printed on invoices and CLI output: thousands separators, 2 decimals."""
    return f"{float(v):,.2f}"


def money(val: NumberLike) -> float:
    return round(float(val), 2)
