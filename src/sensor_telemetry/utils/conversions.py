import math
import time
from datetime import datetime, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def round_2(value: float) -> float:
    """
    Round to 2 decimal places as `round(x * 100) / 100`.

    Ties on the scaled value go away from zero (0.125 -> 0.13, -0.125 -> -0.13),
    unlike the builtin round() which goes to even.
    """
    scaled = value * 100
    rounded = math.floor(abs(scaled) + 0.5)
    return math.copysign(rounded, scaled) / 100


def to_epoch_ms(moment: datetime) -> int:
    """Convert a datetime to epoch milliseconds, honoring its UTC offset.

    Naive datetimes are read as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    delta = moment - EPOCH
    return delta.days * 86_400_000 + delta.seconds * 1000 + delta.microseconds // 1000


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000
