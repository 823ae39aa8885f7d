import time
from datetime import datetime, timezone


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def ms_to_datetime(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(
        tzinfo=None
    )
